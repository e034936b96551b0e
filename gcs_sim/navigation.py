"""
navigation.py

Constant ground-speed integrator that moves the simulated vehicle toward its
current target one tick at a time.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .geo import Coordinate, distance_meters

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvanceResult:
    position: Coordinate
    speed: float
    arrived: bool
    target: Optional[Coordinate] = None  # target that was reached, when arrived


class NavigationSimulator:
    """
    Owns the vehicle position and target.

    Every call to advance() moves the vehicle by at most one tick of travel at
    cruise speed and snaps it onto the target once the remaining distance fits
    inside a single step.
    """

    def __init__(self, position: Coordinate, speed_mps: float = 10.0):
        self.position = position
        self.speed_mps = speed_mps
        self.speed = 0.0
        self._target: Optional[Coordinate] = None

    @property
    def target(self) -> Optional[Coordinate]:
        return self._target

    @property
    def has_target(self) -> bool:
        return self._target is not None

    def set_target(self, target: Coordinate):
        self._target = target
        logger.debug(f"Target set: ({target.lat:.6f}, {target.lon:.6f})")

    def clear_target(self):
        self._target = None

    def reset(self, position: Coordinate):
        """Place the vehicle at position, stopped and without a target"""
        self.position = position
        self.speed = 0.0
        self._target = None

    def step_meters(self, tick_ms: float) -> float:
        return self.speed_mps * max(tick_ms, 0) / 1000

    def advance(self, tick_ms: float) -> AdvanceResult:
        """
        Integrate one tick of motion

        Args:
            tick_ms: Tick duration in milliseconds; zero or negative means no
                displacement.

        Returns:
            AdvanceResult with the new position, derived speed and arrival flag
        """
        target = self._target
        if target is None:
            self.speed = 0.0
            return AdvanceResult(self.position, 0.0, False)

        current = self.position
        dist = distance_meters(current, target)
        step = self.step_meters(tick_ms)

        if dist <= step:
            self.position = target
            self.speed = 0.0
            self._target = None
            logger.info(f"Arrived at ({target.lat:.6f}, {target.lon:.6f})")
            return AdvanceResult(target, 0.0, True, target)

        if step == 0:
            self.speed = 0.0
            return AdvanceResult(current, 0.0, False)

        fraction = step / dist
        new_position = Coordinate(
            current.lat + (target.lat - current.lat) * fraction,
            current.lon + (target.lon - current.lon) * fraction,
        )

        moved = distance_meters(current, new_position)
        self.position = new_position
        self.speed = moved / (tick_ms / 1000)

        return AdvanceResult(new_position, self.speed, False)
