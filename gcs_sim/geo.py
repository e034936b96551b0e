"""
geo.py

Coordinates and great-circle distance shared by every simulation component.
"""

import math
from dataclasses import dataclass
from typing import Dict

EARTH_RADIUS_M = 6371000


class InvalidCoordinateError(ValueError):
    """Raised when a latitude/longitude pair is outside the valid range"""


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lon: float

    def __post_init__(self):
        validate_coordinate(self.lat, self.lon)

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}


def validate_coordinate(lat: float, lon: float):
    """Reject non-finite values and anything outside [-90, 90] / [-180, 180]"""
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise InvalidCoordinateError(f"Coordinate must be finite: ({lat}, {lon})")
    if not -90 <= lat <= 90:
        raise InvalidCoordinateError(f"Latitude out of range: {lat}")
    if not -180 <= lon <= 180:
        raise InvalidCoordinateError(f"Longitude out of range: {lon}")


def distance_meters(a: Coordinate, b: Coordinate) -> float:
    """Great circle distance (haversine)"""
    lat1, lon1 = math.radians(a.lat), math.radians(a.lon)
    lat2, lon2 = math.radians(b.lat), math.radians(b.lon)

    dlat = lat2 - lat1
    dlon = lon2 - lon1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_M * c
