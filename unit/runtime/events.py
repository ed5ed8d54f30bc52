"""
Unit Events - lifecycle event emitter with dot-segment wildcards.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class EventError:
    """Error details attached to a failure event."""
    message: str
    code: Optional[str] = None
    stack: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "EventError":
        return cls(
            message=str(exc),
            code=type(exc).__name__,
            stack="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        )


@dataclass
class Event:
    """A single emitted event."""
    type: str
    timestamp: datetime = field(default_factory=datetime.now)
    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[EventError] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "type": self.type,
            "timestamp": self.timestamp.isoformat(),
            "data": self.data,
        }
        if self.error:
            result["error"] = {"message": self.error.message, "code": self.error.code}
        return result


Handler = Callable[[Event], Any]


def matches(pattern: str, event_type: str) -> bool:
    """
    Match an event type against a subscription pattern.

    ``*`` on its own matches every event. Otherwise patterns are compared
    segment by segment on dots, and each ``*`` matches exactly one segment.
    """
    if pattern == "*" or pattern == event_type:
        return True
    pattern_parts = pattern.split(".")
    type_parts = event_type.split(".")
    if len(pattern_parts) != len(type_parts):
        return False
    return all(p == "*" or p == t for p, t in zip(pattern_parts, type_parts))


class EventEmitter:
    """
    In-memory event emitter.

    Usage:
        emitter = EventEmitter()
        unsubscribe = emitter.on("*.error", lambda event: print(event.type))
        emitter.emit(Event(type="calculator.error"))
        unsubscribe()
    """

    def __init__(self):
        self._observers: Dict[str, List[Handler]] = {}

    def on(self, pattern: str, handler: Handler) -> Callable[[], None]:
        """Subscribe to a type or pattern. Returns an unsubscribe function."""
        handlers = self._observers.setdefault(pattern, [])
        if handler not in handlers:
            handlers.append(handler)

        def unsubscribe():
            current = self._observers.get(pattern)
            if not current or handler not in current:
                return
            current.remove(handler)
            if not current:
                del self._observers[pattern]

        return unsubscribe

    def once(self, pattern: str, handler: Handler) -> Callable[[], None]:
        """Subscribe for a single delivery."""
        unsubscribe: Optional[Callable[[], None]] = None

        def wrapped(event: Event):
            unsubscribe()
            return handler(event)

        unsubscribe = self.on(pattern, wrapped)
        return unsubscribe

    def off(self, pattern: str):
        """Drop every handler registered under a pattern."""
        self._observers.pop(pattern, None)

    def emit(self, event: Event):
        """
        Deliver an event to all matching handlers.

        A failing handler is logged and does not stop delivery to the others.
        """
        for pattern, handlers in list(self._observers.items()):
            if not matches(pattern, event.type):
                continue
            for handler in list(handlers):
                try:
                    handler(event)
                except Exception:
                    logger.exception(f"Event handler for '{pattern}' failed on {event.type}")

    def remove_all_listeners(self):
        self._observers.clear()

    def listener_count(self, pattern: str) -> int:
        return len(self._observers.get(pattern, []))

    def event_types(self) -> List[str]:
        """Patterns that currently have handlers."""
        return list(self._observers.keys())

    def has_handlers(self, pattern: str) -> bool:
        return self.listener_count(pattern) > 0
