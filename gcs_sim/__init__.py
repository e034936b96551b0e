"""Simulated vehicle ground control console: navigation, telemetry and session core."""

from .config import SimulatorConfig
from .events import Event, EventPriority, EventRouter
from .geo import Coordinate, InvalidCoordinateError, distance_meters
from .geofence import CrossingKind, Geofence, GeofenceLogEntry, GeofenceMonitor, GeofenceStatus
from .lifecycle import ConnectionLifecycle, ConnectionState
from .navigation import AdvanceResult, NavigationSimulator
from .power import PowerModel
from .relay import RelayChannel
from .scheduler import AsyncioScheduler, ManualScheduler, Scheduler
from .session import VehicleSession
from .telemetry import JitterSampler, TelemetryAggregator, TelemetrySnapshot

__version__ = "1.0.0"

__all__ = [
    "AdvanceResult",
    "AsyncioScheduler",
    "ConnectionLifecycle",
    "ConnectionState",
    "Coordinate",
    "CrossingKind",
    "Event",
    "EventPriority",
    "EventRouter",
    "Geofence",
    "GeofenceLogEntry",
    "GeofenceMonitor",
    "GeofenceStatus",
    "InvalidCoordinateError",
    "JitterSampler",
    "ManualScheduler",
    "NavigationSimulator",
    "PowerModel",
    "RelayChannel",
    "Scheduler",
    "SimulatorConfig",
    "TelemetryAggregator",
    "TelemetrySnapshot",
    "VehicleSession",
    "distance_meters",
]
