"""
Shared fixtures for the console test suites.
"""

import random

from gcs_sim import Coordinate, ManualScheduler, SimulatorConfig, VehicleSession

HOME = Coordinate(26.9239, 75.8267)
METERS_PER_DEG_LAT = 6371000 * 3.141592653589793 / 180


def north_of(origin: Coordinate, meters: float) -> Coordinate:
    """Coordinate `meters` due north of origin"""
    return Coordinate(origin.lat + meters / METERS_PER_DEG_LAT, origin.lon)


def make_session(**overrides) -> VehicleSession:
    config = SimulatorConfig(**overrides)
    return VehicleSession(
        config,
        scheduler=ManualScheduler(config.tick_ms, config.jitter_period_ms),
        rng=random.Random(42),
    )
