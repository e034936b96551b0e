"""
telemetry.py

Immutable telemetry snapshots and the aggregator that replaces them.
"""

import random
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, Optional

from .geo import Coordinate


@dataclass(frozen=True)
class TelemetrySnapshot:
    """Read-only view of the vehicle handed to presentation"""
    position: Coordinate
    altitude: float = 200.0
    speed: float = 0.0
    battery: float = 90.0
    link_jitter_ms: float = 0.0
    outside_geofence: bool = False
    battery_low: bool = False
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "altitude": self.altitude,
            "speed": self.speed,
            "battery": self.battery,
            "position": self.position.to_dict(),
            "link_jitter_ms": self.link_jitter_ms,
            "outside_geofence": self.outside_geofence,
            "battery_low": self.battery_low,
            "timestamp": self.timestamp.isoformat(),
        }


class JitterSampler:
    """Link quality model: pinned when the link is stable, uniform noise otherwise"""

    def __init__(self, max_ms: float = 120.0, stable_ms: float = 10.0,
                 rng: Optional[random.Random] = None):
        self.max_ms = max_ms
        self.stable_ms = stable_ms
        self.rng = rng or random.Random()
        self.stable_link = False

    def sample(self) -> float:
        if self.stable_link:
            return self.stable_ms
        return self.rng.random() * self.max_ms


class TelemetryAggregator:
    """Holds the current snapshot; every update swaps in a new instance"""

    def __init__(self, initial: TelemetrySnapshot, jitter: Optional[JitterSampler] = None):
        self.initial = initial
        self.jitter = jitter or JitterSampler()
        self._snapshot = initial

    @property
    def snapshot(self) -> TelemetrySnapshot:
        return self._snapshot

    def reset(self) -> TelemetrySnapshot:
        self._snapshot = replace(self.initial, timestamp=datetime.now())
        return self._snapshot

    def compose(self, position: Coordinate, speed: float, battery: float,
                outside_geofence: bool, battery_low: bool) -> TelemetrySnapshot:
        self._snapshot = replace(
            self._snapshot,
            position=position,
            speed=speed,
            battery=battery,
            outside_geofence=outside_geofence,
            battery_low=battery_low,
            timestamp=datetime.now(),
        )
        return self._snapshot

    def resample_jitter(self) -> TelemetrySnapshot:
        self._snapshot = replace(
            self._snapshot,
            link_jitter_ms=self.jitter.sample(),
            timestamp=datetime.now(),
        )
        return self._snapshot
