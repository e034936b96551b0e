"""
config.py

Runtime settings for the simulated vehicle session and the console API.

Usage:
    from gcs_sim.config import SimulatorConfig

    config = SimulatorConfig(tick_ms=50)
    config = SimulatorConfig.from_env()
"""

import os
from dataclasses import dataclass, fields
from typing import Optional, Tuple, get_args


ENV_PREFIX = "GCS_SIM_"


@dataclass
class SimulatorConfig:
    """Configuration for a simulated vehicle session"""
    home_lat: float = 26.9239
    home_lon: float = 75.8267
    geofence_radius_m: float = 200.0
    geofence_baseline_event: bool = False  # log EXIT when a session starts outside

    cruise_speed_mps: float = 10.0
    tick_ms: int = 100
    jitter_period_ms: int = 1000
    jitter_max_ms: float = 120.0
    stable_jitter_ms: float = 10.0

    altitude_m: float = 200.0
    initial_battery: float = 90.0
    drain_moving: float = 0.02  # percent per tick
    drain_idle: float = 0.005
    low_battery_threshold: float = 10.0

    return_home_max_speed: float = 0.5  # m/s
    history_limit: Optional[int] = None  # None keeps the whole session

    host: str = "0.0.0.0"
    port: int = 8000
    telemetry_push_ms: int = 100

    @property
    def home(self) -> Tuple[float, float]:
        return (self.home_lat, self.home_lon)

    @classmethod
    def from_env(cls, environ=None) -> "SimulatorConfig":
        """Build a config, overriding defaults with GCS_SIM_<FIELD> variables"""
        environ = os.environ if environ is None else environ
        overrides = {}

        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            overrides[f.name] = _parse_value(f.name, f.type, raw)

        return cls(**overrides)


def _parse_value(name: str, type_hint, raw: str):
    args = get_args(type_hint)
    if type(None) in args:
        if raw.strip().lower() in ("", "none"):
            return None
        type_hint = next(a for a in args if a is not type(None))

    try:
        if type_hint is bool:
            return raw.strip().lower() in ("1", "true", "yes", "on")
        if type_hint is int:
            return int(raw)
        if type_hint is float:
            return float(raw)
    except ValueError as e:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from e

    return raw
