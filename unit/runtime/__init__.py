"""Unit runtime - validated execution and lifecycle events."""

from unit.runtime.validator import Validator, ValidatorConfig
from unit.runtime.events import Event, EventEmitter, EventError

__all__ = [
    "Validator",
    "ValidatorConfig",
    "Event",
    "EventEmitter",
    "EventError",
]
