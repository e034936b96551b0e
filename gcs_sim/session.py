"""
session.py

Vehicle session: wires the navigator, power model, geofence monitor,
connection lifecycle and telemetry aggregator to a scheduler, and exposes the
operator intents consumed by the console and the API.

Usage:
    from gcs_sim import VehicleSession, ManualScheduler, Coordinate

    session = VehicleSession(scheduler=ManualScheduler())
    session.connect()
    session.set_target(Coordinate(26.9250, 75.8280))
    session.scheduler.advance(5000)
    print(session.snapshot.to_dict())
"""

import logging
import random
from collections import deque
from typing import Any, Dict, List, Optional

from .config import SimulatorConfig
from .events import Event, EventPriority, EventRouter
from .geo import Coordinate
from .geofence import Geofence, GeofenceLogEntry, GeofenceMonitor
from .lifecycle import ConnectionLifecycle, ConnectionState
from .navigation import NavigationSimulator
from .power import PowerModel
from .scheduler import ManualScheduler, Scheduler
from .telemetry import JitterSampler, TelemetryAggregator, TelemetrySnapshot

logger = logging.getLogger(__name__)


class VehicleSession:
    """Single simulated vehicle and its operator session"""

    def __init__(self, config: Optional[SimulatorConfig] = None,
                 scheduler: Optional[Scheduler] = None,
                 event_router: Optional[EventRouter] = None,
                 rng: Optional[random.Random] = None):
        self.config = config or SimulatorConfig()
        self.home = Coordinate(self.config.home_lat, self.config.home_lon)
        self.event_router = event_router or EventRouter()

        self.navigator = NavigationSimulator(self.home, speed_mps=self.config.cruise_speed_mps)
        self.power = PowerModel(
            drain_moving=self.config.drain_moving,
            drain_idle=self.config.drain_idle,
            low_threshold=self.config.low_battery_threshold,
        )
        self.geofence = GeofenceMonitor(
            Geofence(center=self.home, radius_m=self.config.geofence_radius_m),
            history_limit=self.config.history_limit,
            baseline_event=self.config.geofence_baseline_event,
        )
        self.lifecycle = ConnectionLifecycle(
            self.navigator,
            self.home,
            event_router=self.event_router,
            return_home_max_speed=self.config.return_home_max_speed,
        )
        self.telemetry = TelemetryAggregator(
            TelemetrySnapshot(
                position=self.home,
                altitude=self.config.altitude_m,
                battery=self.config.initial_battery,
            ),
            jitter=JitterSampler(
                max_ms=self.config.jitter_max_ms,
                stable_ms=self.config.stable_jitter_ms,
                rng=rng,
            ),
        )
        self.path_history: deque = deque(maxlen=self.config.history_limit)
        self._low_battery_reported = False

        self.scheduler = scheduler or ManualScheduler(self.config.tick_ms, self.config.jitter_period_ms)
        self.scheduler.bind(on_tick=self.tick, on_jitter=self.sample_jitter)

        self.event_router.subscribe('session.disconnected', self._handle_disconnected)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> TelemetrySnapshot:
        return self.telemetry.snapshot

    @property
    def state(self) -> ConnectionState:
        return self.lifecycle.state

    @property
    def connected(self) -> bool:
        return self.lifecycle.connected

    @property
    def target(self) -> Optional[Coordinate]:
        return self.navigator.target

    @property
    def stable_link(self) -> bool:
        return self.telemetry.jitter.stable_link

    def geofence_log(self) -> List[GeofenceLogEntry]:
        return self.geofence.entries()

    def path(self) -> List[Coordinate]:
        return list(self.path_history)

    def status(self) -> Dict[str, Any]:
        target = self.navigator.target
        return {
            **self.lifecycle.to_dict(),
            "target": target.to_dict() if target else None,
            "home": self.home.to_dict(),
            "stable_link": self.stable_link,
            "timers_running": self.scheduler.running,
        }

    # ------------------------------------------------------------------
    # Operator intents
    # ------------------------------------------------------------------

    def connect(self) -> bool:
        """Open a fresh session: reset telemetry and history, start timers"""
        if not self.lifecycle.connect():
            return False

        self.navigator.reset(self.home)
        self.geofence.reset()
        self.path_history.clear()
        self._low_battery_reported = False
        self.telemetry.reset()

        self.scheduler.start()
        return True

    def disconnect(self) -> bool:
        return self.lifecycle.request_disconnect()

    def return_home(self) -> bool:
        return self.lifecycle.request_return_home(self.snapshot.speed)

    def set_target(self, target: Coordinate) -> bool:
        """Operator click-to-target; ignored while disconnected or returning home"""
        if not self.lifecycle.connected:
            logger.warning("Target ignored: not connected")
            return False
        if self.lifecycle.returning_home:
            logger.warning("Target ignored: returning home")
            return False

        self.navigator.set_target(target)
        self.event_router.emit(
            'navigation.target.set', 'vehicle_session', EventPriority.MEDIUM,
            target=target.to_dict(),
        )
        return True

    def set_stable_link(self, enabled: bool) -> bool:
        self.telemetry.jitter.stable_link = enabled
        self.event_router.emit('link.stable.changed', 'vehicle_session', stable_link=enabled)
        logger.info(f"Stable link {'enabled' if enabled else 'disabled'}")
        return enabled

    def toggle_stable_link(self) -> bool:
        return self.set_stable_link(not self.stable_link)

    def shutdown(self):
        self.scheduler.stop()

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------

    def tick(self) -> TelemetrySnapshot:
        """One position tick: move, drain, check the fence, settle arrival"""
        if not self.lifecycle.connected:
            return self.snapshot

        had_target = self.navigator.has_target
        result = self.navigator.advance(self.config.tick_ms)

        battery = self.power.drain(had_target, self.snapshot.battery)
        fence = self.geofence.check(result.position)
        if fence.crossing:
            self.event_router.emit(
                f'geofence.{fence.crossing.value.lower()}', 'geofence_monitor',
                EventPriority.CRITICAL if fence.is_outside else EventPriority.HIGH,
                position=result.position.to_dict(),
            )

        battery_low = self.power.is_low(battery)
        if battery_low and not self._low_battery_reported:
            self._low_battery_reported = True
            logger.warning(f"Battery low: {battery:.1f}%")
            self.event_router.emit('power.battery.low', 'power_model', EventPriority.HIGH, battery=battery)

        snapshot = self.telemetry.compose(
            position=result.position,
            speed=result.speed,
            battery=battery,
            outside_geofence=fence.is_outside,
            battery_low=battery_low,
        )
        self.path_history.append(result.position)

        if result.arrived:
            self.event_router.emit(
                'navigation.arrived', 'navigation_simulator', EventPriority.MEDIUM,
                target=result.target.to_dict(),
            )
            self.lifecycle.on_arrival(result.target)

        return snapshot

    def sample_jitter(self) -> TelemetrySnapshot:
        if not self.lifecycle.connected:
            return self.snapshot
        return self.telemetry.resample_jitter()

    def _handle_disconnected(self, event: Event):
        self.navigator.clear_target()
        self.scheduler.stop()
