"""
geofence.py

Circular keep-in boundary and the monitor that turns per-tick membership into
ENTER/EXIT crossing events.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from .geo import Coordinate, distance_meters

logger = logging.getLogger(__name__)


class CrossingKind(str, Enum):
    ENTER = "ENTER"
    EXIT = "EXIT"


@dataclass(frozen=True)
class Geofence:
    center: Coordinate
    radius_m: float

    def contains(self, position: Coordinate) -> bool:
        return distance_meters(position, self.center) <= self.radius_m

    def to_dict(self) -> Dict[str, Any]:
        return {"center": self.center.to_dict(), "radius_m": self.radius_m}


@dataclass(frozen=True)
class GeofenceLogEntry:
    kind: CrossingKind
    position: Coordinate
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "kind": self.kind.value,
            "position": self.position.to_dict(),
        }


@dataclass(frozen=True)
class GeofenceStatus:
    is_outside: bool
    crossing: Optional[CrossingKind] = None


class GeofenceMonitor:
    """Classifies positions against a fixed fence and logs boundary crossings"""

    def __init__(self, fence: Geofence, history_limit: Optional[int] = None,
                 baseline_event: bool = False):
        self.fence = fence
        self.baseline_event = baseline_event
        self.was_outside: Optional[bool] = None
        self.log: deque = deque(maxlen=history_limit)

    @property
    def is_outside(self) -> bool:
        return bool(self.was_outside)

    def reset(self):
        """Forget the baseline and the log for a new session"""
        self.was_outside = None
        self.log.clear()

    def check(self, position: Coordinate) -> GeofenceStatus:
        is_outside = not self.fence.contains(position)
        previous = self.was_outside
        self.was_outside = is_outside

        crossing = None
        if previous is None:
            # first evaluation only sets the baseline
            if is_outside and self.baseline_event:
                crossing = CrossingKind.EXIT
        elif is_outside and not previous:
            crossing = CrossingKind.EXIT
        elif previous and not is_outside:
            crossing = CrossingKind.ENTER

        if crossing:
            self.log.append(GeofenceLogEntry(kind=crossing, position=position))
            if crossing is CrossingKind.EXIT:
                logger.warning(f"Geofence EXIT at ({position.lat:.5f}, {position.lon:.5f})")
            else:
                logger.info(f"Geofence ENTER at ({position.lat:.5f}, {position.lon:.5f})")

        return GeofenceStatus(is_outside=is_outside, crossing=crossing)

    def entries(self) -> List[GeofenceLogEntry]:
        return list(self.log)
