"""Core models, identity helpers and errors for units."""

from unit.core.models import (
    UnitSchema,
    UnitProps,
    ToolSchema,
    PropertySchema,
    ParametersSchema,
    ResponseSchema,
    ValidationResult,
    CompatibilityResult,
)
from unit.core.identity import (
    create_unit_schema,
    validate_unit_id,
    validate_unit_schema,
    next_version,
)

__all__ = [
    "UnitSchema",
    "UnitProps",
    "ToolSchema",
    "PropertySchema",
    "ParametersSchema",
    "ResponseSchema",
    "ValidationResult",
    "CompatibilityResult",
    "create_unit_schema",
    "validate_unit_id",
    "validate_unit_schema",
    "next_version",
]
