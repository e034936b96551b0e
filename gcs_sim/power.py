"""
power.py

Battery depletion as a function of motion state.
"""

from dataclasses import dataclass


@dataclass
class PowerModel:
    drain_moving: float = 0.02  # percent per tick
    drain_idle: float = 0.005
    low_threshold: float = 10.0

    def drain(self, has_active_target: bool, battery: float) -> float:
        """Battery after one tick, floored at 0"""
        rate = self.drain_moving if has_active_target else self.drain_idle
        return max(0.0, battery - rate)

    def is_low(self, battery: float) -> bool:
        return battery < self.low_threshold
