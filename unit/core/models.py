"""
Unit Core Models - identity and tool schema data structures.

A Unit is described by two kinds of records:
- DNA (UnitSchema): immutable identity plus evolution lineage
- Tool schemas (ToolSchema): machine-readable descriptions of each capability,
  exported as-is to tool-calling consumers (field names are part of the contract)
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from unit.core.identity import validate_unit_id, validate_version


# ============================================================
# Identity
# ============================================================

class UnitSchema(BaseModel):
    """
    Unit DNA - immutable identity and evolution lineage.

    The id is the namespace root used when other units learn from this one,
    so it is validated strictly and never contains dots.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unit id (e.g., 'calculator')")
    version: str = "1.0.0"
    description: Optional[str] = None
    parent: Optional["UnitSchema"] = Field(
        None,
        description="DNA this unit evolved from"
    )

    # InvalidIdentityError is not a ValueError, so pydantic lets it through as-is
    @field_validator("id", mode="before")
    @classmethod
    def check_id(cls, v: Any) -> str:
        return validate_unit_id(v)

    @field_validator("version", mode="before")
    @classmethod
    def check_version(cls, v: Any) -> str:
        return validate_version(v)

    @property
    def generation(self) -> int:
        """Number of ancestors."""
        return len(self.lineage()) - 1

    def lineage(self) -> List["UnitSchema"]:
        """This record followed by its ancestors, nearest first."""
        chain = []
        node: Optional[UnitSchema] = self
        while node is not None:
            chain.append(node)
            node = node.parent
        return chain

    def __str__(self) -> str:
        return f"{self.id}@{self.version}"


class UnitProps(BaseModel):
    """
    Construction properties of a unit.

    Concrete units subclass this to carry their own configuration; evolution
    copies the props and swaps the DNA.
    """
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    dna: UnitSchema
    created: datetime = Field(default_factory=datetime.now)
    metadata: Dict[str, Any] = Field(default_factory=dict)


# ============================================================
# Tool Schemas
# ============================================================

PropertyType = Literal["string", "number", "boolean", "object", "array"]


class PropertySchema(BaseModel):
    """A single parameter property."""
    model_config = ConfigDict(frozen=True, extra="allow")

    type: PropertyType
    description: str = ""
    enum: Optional[List[Any]] = None


class ParametersSchema(BaseModel):
    """Parameter structure - always an object, JSON Schema style."""
    model_config = ConfigDict(frozen=True, extra="allow")

    type: Literal["object"]
    properties: Dict[str, PropertySchema] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)


class ResponseSchema(BaseModel):
    """Shape of a capability's return value."""
    model_config = ConfigDict(frozen=True, extra="allow")

    type: PropertyType
    properties: Optional[Dict[str, Dict[str, Any]]] = None
    required: Optional[List[str]] = None
    description: Optional[str] = None


class ToolSchema(BaseModel):
    """
    Tool schema for one capability.

    ``name`` must equal the key the schema is registered under; after
    learning, both become ``<teaching-unit-id>.<name>``.
    """
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    parameters: ParametersSchema
    response: Optional[ResponseSchema] = None

    def to_dict(self) -> Dict[str, Any]:
        """Export shape: name, description, parameters and (if set) response."""
        return self.model_dump(exclude_none=True)

    @classmethod
    def minimal(cls, name: str, description: Optional[str] = None) -> "ToolSchema":
        """Schema with no parameters, for capabilities declared without one."""
        return cls(
            name=name,
            description=description or f"Capability {name}",
            parameters=ParametersSchema(type="object"),
        )


# ============================================================
# Results
# ============================================================

class ValidationResult(BaseModel):
    """Outcome of a structural check; a query result, not an exception."""
    valid: bool
    errors: List[str] = Field(default_factory=list)


class CompatibilityResult(BaseModel):
    """Outcome of checking a foreign teaching contract before learning it."""
    is_compatible: bool
    reason: Optional[str] = None
