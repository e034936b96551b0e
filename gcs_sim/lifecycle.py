"""
lifecycle.py

Connect / disconnect / return-home state machine.

Disconnecting is always deferred: the request sends the vehicle home and the
session only reaches DISCONNECTED once the navigator reports arrival there.
"""

import logging
from enum import Enum
from typing import Any, Dict, Optional

from .events import EventPriority, EventRouter
from .geo import Coordinate
from .navigation import NavigationSimulator

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    RETURNING_HOME = "returning_home"


class ConnectionLifecycle:
    """Arbitrates operator connection commands against the vehicle's motion"""

    def __init__(self, navigator: NavigationSimulator, home: Coordinate,
                 event_router: Optional[EventRouter] = None,
                 return_home_max_speed: float = 0.5):
        self.navigator = navigator
        self.home = home
        self.event_router = event_router or EventRouter()
        self.return_home_max_speed = return_home_max_speed
        self.state = ConnectionState.DISCONNECTED
        self.pending_disconnect = False

    @property
    def connected(self) -> bool:
        return self.state != ConnectionState.DISCONNECTED

    @property
    def returning_home(self) -> bool:
        return self.state == ConnectionState.RETURNING_HOME

    @property
    def status_label(self) -> str:
        if self.returning_home:
            return "Returning..."
        return "Disconnect" if self.connected else "Connect"

    def connect(self) -> bool:
        if self.state != ConnectionState.DISCONNECTED:
            logger.warning(f"Connect ignored: session is {self.state.value}")
            return False

        self.state = ConnectionState.CONNECTED
        self.pending_disconnect = False
        self.navigator.clear_target()

        logger.info("Vehicle connected")
        self._publish('session.connected', EventPriority.HIGH)
        return True

    def request_disconnect(self) -> bool:
        """Send the vehicle home and disconnect once it gets there"""
        if not self.connected:
            logger.warning("Disconnect ignored: not connected")
            return False

        self.pending_disconnect = True
        self.state = ConnectionState.RETURNING_HOME
        self.navigator.set_target(self.home)

        logger.info("Disconnect requested, returning home first")
        self._publish('session.disconnect.requested', EventPriority.HIGH)
        return True

    def request_return_home(self, current_speed: float) -> bool:
        if not self.connected:
            logger.warning("Return home ignored: not connected")
            return False
        if current_speed >= self.return_home_max_speed:
            logger.warning(
                f"Return home ignored: speed {current_speed:.2f} m/s "
                f">= {self.return_home_max_speed} m/s"
            )
            return False

        self.state = ConnectionState.RETURNING_HOME
        self.navigator.set_target(self.home)

        logger.info("Returning home")
        self._publish('navigation.return_home', EventPriority.MEDIUM)
        return True

    def on_arrival(self, target: Optional[Coordinate]) -> bool:
        """
        React to the navigator reaching a target

        Returns:
            bool: True if the arrival completed a pending disconnect
        """
        if target != self.home or self.state != ConnectionState.RETURNING_HOME:
            return False

        self.state = ConnectionState.CONNECTED
        if not self.pending_disconnect:
            logger.info("Arrived home")
            return False

        self.pending_disconnect = False
        self.state = ConnectionState.DISCONNECTED
        self.navigator.clear_target()

        logger.info("Arrived home, vehicle disconnected")
        self._publish('session.disconnected', EventPriority.HIGH)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "state": self.state.value,
            "connected": self.connected,
            "returning_home": self.returning_home,
            "pending_disconnect": self.pending_disconnect,
            "status_label": self.status_label,
        }

    def _publish(self, event_type: str, priority: EventPriority):
        self.event_router.emit(event_type, 'connection_lifecycle', priority, state=self.state.value)
