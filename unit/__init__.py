"""
Unit - self-contained, teachable components

Runtime component model for units that carry their own identity,
capabilities and tool schemas, and that can share them with each other.

Core Concepts:
- DNA (UnitSchema): Immutable identity plus evolution lineage
- Capabilities: Named operations a unit can execute
- Schema: Tool schemas describing each capability's parameters
- Validator: Keeps capabilities and schemas consistent
- Unit: Base class tying them together (teach / learn / evolve)

Usage:
    from unit import Unit, UnitCore, UnitProps, Capabilities, Schema, Validator

    calculator = CalculatorUnit.create()
    math = MathUnit.create()

    # Learn everything the calculator can teach
    math.learn([calculator.teach()])

    # Learned capabilities are namespaced by the teaching unit's id
    result = await math.execute("calculator.add", 2, 3)
"""

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
from unit.core.errors import (
    UnitError,
    InvalidIdentityError,
    InconsistentConsciousnessError,
    PostLearningInconsistencyError,
    IncompatibleContractError,
    InvalidCapabilityError,
    DuplicateCapabilityError,
    UnknownCapabilityError,
    UnknownCommandError,
    CapabilityExecutionError,
    InvalidSchemaError,
    SchemaNameMismatchError,
    DuplicateSchemaError,
    InvalidInputError,
    InvalidOutputError,
)
from unit.registry.capabilities import Capabilities
from unit.registry.schema import Schema
from unit.runtime.validator import Validator, ValidatorConfig
from unit.runtime.events import Event, EventEmitter, EventError
from unit.unit import Unit, UnitCore, TeachingContract

__version__ = "0.1.0"

__all__ = [
    # Core models
    "UnitSchema",
    "UnitProps",
    "ToolSchema",
    "PropertySchema",
    "ParametersSchema",
    "ResponseSchema",
    "ValidationResult",
    "CompatibilityResult",
    # Identity
    "create_unit_schema",
    "validate_unit_id",
    "validate_unit_schema",
    "next_version",
    # Errors
    "UnitError",
    "InvalidIdentityError",
    "InconsistentConsciousnessError",
    "PostLearningInconsistencyError",
    "IncompatibleContractError",
    "InvalidCapabilityError",
    "DuplicateCapabilityError",
    "UnknownCapabilityError",
    "UnknownCommandError",
    "CapabilityExecutionError",
    "InvalidSchemaError",
    "SchemaNameMismatchError",
    "DuplicateSchemaError",
    "InvalidInputError",
    "InvalidOutputError",
    # Registries
    "Capabilities",
    "Schema",
    # Runtime
    "Validator",
    "ValidatorConfig",
    "Event",
    "EventEmitter",
    "EventError",
    # Unit
    "Unit",
    "UnitCore",
    "TeachingContract",
]
