"""
Unit Errors - Exception taxonomy for the unit trinity.

Every error carries the id of the unit that raised it and renders it as a
``[unit-id]`` prefix, so callers can pattern-match on the message.
"""

from __future__ import annotations

from typing import List, Optional, Sequence


class UnitError(Exception):
    """Base class for all unit errors."""

    def __init__(self, message: str, *, unit_id: Optional[str] = None):
        self.unit_id = unit_id
        self.detail = message
        if unit_id:
            message = f"[{unit_id}] {message}"
        super().__init__(message)


# ============================================================
# Identity
# ============================================================

class InvalidIdentityError(UnitError):
    """Raised when a unit id or version is malformed."""

    def __init__(self, message: str, *, value: Optional[str] = None):
        self.value = value
        super().__init__(message)


# ============================================================
# Consistency
# ============================================================

class InconsistentConsciousnessError(UnitError):
    """Capabilities and schemas disagree."""

    def __init__(
        self,
        message: str,
        *,
        unit_id: Optional[str] = None,
        missing_schemas: Sequence[str] = (),
        orphan_schemas: Sequence[str] = (),
    ):
        self.missing_schemas = list(missing_schemas)
        self.orphan_schemas = list(orphan_schemas)
        super().__init__(message, unit_id=unit_id)


class PostLearningInconsistencyError(InconsistentConsciousnessError):
    """Learning would have left capabilities and schemas out of sync."""


class IncompatibleContractError(UnitError):
    """A teaching contract failed the pre-flight compatibility check."""

    def __init__(self, message: str, *, unit_id: Optional[str] = None, source: Optional[str] = None):
        self.source = source
        super().__init__(message, unit_id=unit_id)


# ============================================================
# Capabilities
# ============================================================

class InvalidCapabilityError(UnitError):
    """Capability name or implementation is unusable."""


class DuplicateCapabilityError(UnitError):
    def __init__(self, name: str, *, unit_id: Optional[str] = None):
        self.name = name
        super().__init__(f"Capability '{name}' already exists", unit_id=unit_id)


class UnknownCapabilityError(UnitError):
    """Execution was requested for a name the unit does not know."""

    def __init__(self, name: str, available: Sequence[str], *, unit_id: Optional[str] = None):
        self.name = name
        self.available: List[str] = list(available)
        super().__init__(self._format(name, self.available), unit_id=unit_id)

    @staticmethod
    def _format(name: str, available: List[str]) -> str:
        return f"Capability '{name}' not found. Available: {', '.join(available)}"


class UnknownCommandError(UnknownCapabilityError):
    """Raised by the validator's gated execution path."""

    @staticmethod
    def _format(name: str, available: List[str]) -> str:
        return f"Unknown command: {name}. Available: {', '.join(available)}"


class CapabilityExecutionError(UnitError):
    """The capability implementation itself failed; see ``__cause__``."""

    def __init__(self, name: str, cause: BaseException, *, unit_id: Optional[str] = None):
        self.capability = name
        self.cause = cause
        super().__init__(f"Capability '{name}' execution failed: {cause}", unit_id=unit_id)


# ============================================================
# Schemas
# ============================================================

class InvalidSchemaError(UnitError):
    """Schema structure is malformed."""

    def __init__(self, message: str, *, unit_id: Optional[str] = None, name: Optional[str] = None):
        self.name = name
        super().__init__(message, unit_id=unit_id)


class SchemaNameMismatchError(InvalidSchemaError):
    """Embedded schema name disagrees with the key it is stored under."""


class DuplicateSchemaError(UnitError):
    def __init__(self, name: str, *, unit_id: Optional[str] = None):
        self.name = name
        super().__init__(f"Schema '{name}' already exists", unit_id=unit_id)


class _SchemaViolation(UnitError):
    def __init__(self, message: str, errors: Sequence[str], *, unit_id: Optional[str] = None, name: str = ""):
        self.name = name
        self.errors: List[str] = list(errors)
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message, unit_id=unit_id)


class InvalidInputError(_SchemaViolation):
    """Strict-mode input check failed; the capability was not invoked."""


class InvalidOutputError(_SchemaViolation):
    """Strict-mode response check failed."""
