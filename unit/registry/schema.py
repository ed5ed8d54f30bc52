"""
Schema - tool schema registry, parallel to Capabilities.

Schemas describe each capability's parameters (and optionally its response)
and are exported in three deterministic shapes for tool-calling consumers:
- to_json(): {name: {name, description, parameters, response?}}
- to_array(): [{name, description, parameters, response?}, ...]
- to_record(): {name: ToolSchema}
"""

from __future__ import annotations

import logging
from collections.abc import Mapping as MappingABC
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union, TYPE_CHECKING

from pydantic import ValidationError

from unit.core.errors import DuplicateSchemaError, InvalidSchemaError, SchemaNameMismatchError
from unit.core.identity import namespaced
from unit.core.models import ToolSchema, ValidationResult

if TYPE_CHECKING:
    from unit.unit import TeachingContract

logger = logging.getLogger(__name__)

SchemaLike = Union[ToolSchema, Mapping[str, Any]]


# ============================================================
# Structural checks
# ============================================================

def check_type(value: Any, expected: Optional[str]) -> bool:
    """Runtime type check for a JSON-schema type name. Unknown types pass."""
    if expected == "string":
        return isinstance(value, str)
    if expected == "number":
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if expected == "boolean":
        return isinstance(value, bool)
    if expected == "object":
        return isinstance(value, MappingABC)
    if expected == "array":
        return isinstance(value, (list, tuple))
    return True


def check_value(value: Any, descriptor: Mapping[str, Any]) -> List[str]:
    """
    Check a value against a parameter or response descriptor.

    Object descriptors check required properties, declared property types
    and enum membership; extra properties are allowed. Other descriptors
    check only the top-level type.

    Returns:
        List of error messages (empty when valid)
    """
    expected = descriptor.get("type")
    if expected != "object":
        if check_type(value, expected):
            return []
        return [f"Expected {expected}, got {type(value).__name__}"]

    if not isinstance(value, MappingABC):
        return [f"Expected object, got {type(value).__name__}"]

    errors = []
    for field in descriptor.get("required") or []:
        if field not in value:
            errors.append(f"Missing required parameter: {field}")

    for key, prop in (descriptor.get("properties") or {}).items():
        if key not in value:
            continue
        prop_value = value[key]
        prop_type = prop.get("type")
        if not check_type(prop_value, prop_type):
            errors.append(
                f"Parameter '{key}' must be of type {prop_type}, got {type(prop_value).__name__}"
            )
            continue
        allowed = prop.get("enum")
        if allowed is not None and prop_value not in allowed:
            errors.append(
                f"Parameter '{key}' must be one of: {', '.join(str(a) for a in allowed)}"
            )

    return errors


def contract_schemas(contract: "TeachingContract") -> Dict[str, SchemaLike]:
    """Schemas of a contract, whether it carries a registry or a plain mapping."""
    source = contract.schema
    if source is None:
        return {}
    if hasattr(source, "to_record"):
        return source.to_record()
    return dict(source)


# ============================================================
# Registry
# ============================================================

class Schema:
    """
    Tool schema registry for a single unit.

    Usage:
        schema = Schema.create("calculator", {
            "add": {
                "name": "add",
                "description": "Add two numbers",
                "parameters": {
                    "type": "object",
                    "properties": {"a": {"type": "number", "description": "First"}},
                    "required": ["a"],
                },
            },
        })

        schema.validate("add", {"a": 1})
        tools = schema.to_array()
    """

    def __init__(self, unit_id: str):
        self.unit_id = unit_id
        self._schemas: Dict[str, ToolSchema] = {}

    @classmethod
    def create(cls, unit_id: str, schemas: Optional[Mapping[str, SchemaLike]] = None) -> "Schema":
        """Create a registry with an initial, validated schema set."""
        instance = cls(unit_id)
        for name, schema in (schemas or {}).items():
            instance.add(name, schema)
        return instance

    # ==================== Core Operations ====================

    def add(self, name: str, schema: SchemaLike):
        """
        Add a schema after validating its structure.

        Raises:
            InvalidSchemaError: malformed schema
            SchemaNameMismatchError: schema.name differs from ``name``
            DuplicateSchemaError: name already registered
        """
        tool = self._coerce(name, schema)
        if name in self._schemas:
            raise DuplicateSchemaError(name, unit_id=self.unit_id)
        self._schemas[name] = tool
        logger.debug(f"[{self.unit_id}] Registered schema: {name}")

    def set(self, name: str, schema: SchemaLike):
        """Validated add-or-overwrite."""
        self._schemas[name] = self._coerce(name, schema)

    def get(self, name: str) -> Optional[ToolSchema]:
        return self._schemas.get(name)

    def has(self, name: str) -> bool:
        return name in self._schemas

    def list(self) -> List[str]:
        return list(self._schemas.keys())

    def size(self) -> int:
        return len(self._schemas)

    def remove(self, name: str) -> bool:
        return self._schemas.pop(name, None) is not None

    def clear(self):
        self._schemas.clear()

    def copy(self) -> "Schema":
        clone = Schema(self.unit_id)
        clone._schemas = dict(self._schemas)
        return clone

    # ==================== Export ====================

    def to_json(self) -> Dict[str, Dict[str, Any]]:
        """Plain dict keyed by tool name."""
        return {name: schema.to_dict() for name, schema in self._schemas.items()}

    def to_array(self) -> List[Dict[str, Any]]:
        """Plain dicts in registration order."""
        return [schema.to_dict() for schema in self._schemas.values()]

    def to_record(self) -> Dict[str, ToolSchema]:
        """Copy of the name -> ToolSchema mapping."""
        return dict(self._schemas)

    def to_yaml(self) -> str:
        """Export all schemas as a YAML document keyed by name."""
        import yaml
        return yaml.safe_dump(self.to_json(), default_flow_style=False, allow_unicode=True, sort_keys=False)

    @classmethod
    def from_yaml(cls, unit_id: str, yaml_str: str) -> "Schema":
        """Create from a YAML document mapping names to schemas."""
        import yaml
        data = yaml.safe_load(yaml_str) or {}
        if not isinstance(data, dict):
            raise InvalidSchemaError(
                "Schema document must be a mapping of tool name to schema", unit_id=unit_id
            )
        return cls.create(unit_id, data)

    @classmethod
    def load(cls, unit_id: str, path: Union[str, Path]) -> "Schema":
        """Load schemas from a YAML file."""
        content = Path(path).read_text(encoding="utf-8")
        return cls.from_yaml(unit_id, content)

    # ==================== Learning ====================

    def learn(self, contracts: Iterable["TeachingContract"]):
        """
        Absorb schemas from teaching contracts.

        Keys become ``<contract.unit_id>.<name>`` and the embedded name is
        rewritten to match, so exported tool names stay globally unique.

        Raises:
            SchemaNameMismatchError: a contract schema's name differs from its key
        """
        for contract in contracts:
            for name, schema in contract_schemas(contract).items():
                tool = self._coerce(name, schema, source=contract.unit_id)
                key = namespaced(contract.unit_id, name)
                self._schemas[key] = tool.model_copy(update={"name": key})
            logger.debug(f"[{self.unit_id}] Learned schemas from {contract.unit_id}")

    # ==================== Validation ====================

    def validate(self, name: str, value: Any) -> ValidationResult:
        """
        Check a candidate parameter value against a registered schema.

        Never raises; problems are reported in the result.
        """
        schema = self._schemas.get(name)
        if schema is None:
            return ValidationResult(valid=False, errors=[f"Schema '{name}' not found"])

        errors = check_value(value, schema.parameters.model_dump(exclude_none=True))
        return ValidationResult(valid=not errors, errors=errors)

    def validate_response(self, name: str, value: Any) -> ValidationResult:
        """Check a result against the response schema; schemas without one accept anything."""
        schema = self._schemas.get(name)
        if schema is None:
            return ValidationResult(valid=False, errors=[f"Schema '{name}' not found"])
        if schema.response is None:
            return ValidationResult(valid=True)

        errors = check_value(value, schema.response.model_dump(exclude_none=True))
        return ValidationResult(valid=not errors, errors=errors)

    # ==================== Internals ====================

    def _coerce(self, name: str, schema: SchemaLike, source: Optional[str] = None) -> ToolSchema:
        """Validate structure and name/key agreement."""
        if isinstance(schema, ToolSchema):
            tool = schema
        else:
            if not isinstance(schema, MappingABC):
                raise InvalidSchemaError(
                    f"Schema '{name}' must be a mapping, got {type(schema).__name__}",
                    unit_id=self.unit_id,
                    name=name,
                )
            try:
                tool = ToolSchema.model_validate(dict(schema))
            except ValidationError as e:
                fields = ", ".join(
                    ".".join(str(p) for p in err["loc"]) or "schema" for err in e.errors()
                )
                raise InvalidSchemaError(
                    f"Schema '{name}' is invalid (check: {fields})",
                    unit_id=self.unit_id,
                    name=name,
                ) from e

        if tool.name != name:
            if source:
                message = f"Tool schema name '{tool.name}' must match capability '{name}' in unit '{source}'"
            else:
                message = f"Schema name '{tool.name}' must match key '{name}'"
            raise SchemaNameMismatchError(message, unit_id=self.unit_id, name=name)
        return tool

    def restore(self, snapshot: Dict[str, ToolSchema]):
        """Replace all schemas with a snapshot taken by ``to_record()``."""
        self._schemas = dict(snapshot)

    def __contains__(self, name: str) -> bool:
        return name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._schemas))

    def __repr__(self) -> str:
        return f"Schema(unit_id='{self.unit_id}', size={len(self._schemas)})"
