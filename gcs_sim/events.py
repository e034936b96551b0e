"""
events.py

Session event bus. Publishing dispatches synchronously on the caller's thread,
which is the tick callback in the single-threaded simulation model.
"""

import fnmatch
import logging
import uuid
from collections import defaultdict, deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)


class EventPriority(int, Enum):
    CRITICAL = 1
    HIGH = 2
    MEDIUM = 3
    LOW = 4
    INFO = 5


@dataclass
class Event:
    type: str
    priority: EventPriority
    source: str
    data: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)
    processed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "priority": self.priority.name,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
            "data": self.data,
            "processed": self.processed,
        }


class EventRouter:
    """Event router with wildcard subscriptions and bounded history"""

    def __init__(self, history_size: int = 1000):
        self.subscribers: Dict[str, List[Callable]] = defaultdict(list)
        self.event_history = deque(maxlen=history_size)
        self.error_handlers: List[Callable] = []

    def subscribe(self, pattern: str, handler: Callable):
        """Subscribe to an event type; '*' and 'geofence.*' style patterns match by glob"""
        self.subscribers[pattern].append(handler)
        logger.debug(f"Subscribed to {pattern}")

    def unsubscribe(self, pattern: str, handler: Callable):
        handlers = self.subscribers.get(pattern, [])
        if handler in handlers:
            handlers.remove(handler)

    def publish(self, event: Event):
        """Record and dispatch an event to every matching subscriber"""
        self.event_history.append(event)
        logger.debug(f"Event published: {event.type} [Priority: {event.priority.name}]")
        self._dispatch_event(event)

    def emit(self, event_type: str, source: str, priority: EventPriority = EventPriority.INFO,
             **data) -> Event:
        event = Event(type=event_type, priority=priority, source=source, data=data)
        self.publish(event)
        return event

    def recent(self, limit: int = 50) -> List[Event]:
        if limit <= 0:
            return []
        return list(self.event_history)[-limit:]

    def _matching_handlers(self, event_type: str) -> List[Callable]:
        handlers = []
        for pattern, subscribed in list(self.subscribers.items()):
            if pattern == event_type or fnmatch.fnmatchcase(event_type, pattern):
                handlers.extend(subscribed)
        return handlers

    def _dispatch_event(self, event: Event):
        for handler in self._matching_handlers(event.type):
            try:
                handler(event)
                event.processed = True
            except Exception as e:
                logger.error(f"Handler error for {event.type}: {e}")
                self._handle_error(e)

    def _handle_error(self, error: Exception):
        for handler in self.error_handlers:
            try:
                handler(error)
            except Exception as e:
                logger.error(f"Error handler failed: {e}")
