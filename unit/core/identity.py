"""
Unit identity helpers - id validation, DNA creation, version bumps.
"""

from __future__ import annotations

import re
from typing import Any, Optional, TYPE_CHECKING

from unit.core.errors import InvalidIdentityError

if TYPE_CHECKING:
    from unit.core.models import UnitSchema

UNIT_ID_PATTERN = re.compile(r"^[a-z][a-z0-9-]*$")
VERSION_PATTERN = re.compile(r"^\d+(\.\d+)*$")

# Separator between teaching unit id and capability name in learned keys
NAMESPACE_SEPARATOR = "."


def validate_unit_id(unit_id: Any) -> str:
    """
    Validate a unit id, raising on the first violation.

    Ids must be lowercase, start with a letter, and contain only letters,
    digits and hyphens. Dots are reserved for capability namespacing.
    """
    if not isinstance(unit_id, str) or not unit_id.strip():
        raise InvalidIdentityError("Unit ID cannot be empty", value=unit_id)
    if unit_id != unit_id.lower():
        raise InvalidIdentityError("Unit ID must be lowercase", value=unit_id)
    if NAMESPACE_SEPARATOR in unit_id:
        raise InvalidIdentityError(
            "Unit ID cannot contain dots (breaks capability resolution)", value=unit_id
        )
    if not UNIT_ID_PATTERN.match(unit_id):
        raise InvalidIdentityError(
            "Unit ID must be alphanumeric + hyphens, starting with letter", value=unit_id
        )
    return unit_id


def validate_version(version: Any) -> str:
    if not isinstance(version, str) or not VERSION_PATTERN.match(version):
        raise InvalidIdentityError(
            f"Unit version must be a dotted numeric string, got {version!r}", value=version
        )
    return version


def next_version(version: str) -> str:
    """Bump the patch component ("1.0.0" -> "1.0.1"); shorter versions get ".1" appended."""
    parts = version.split(".")
    if len(parts) >= 3:
        parts[2] = str(int(parts[2]) + 1)
        return ".".join(parts)
    return f"{version}.1"


def namespaced(unit_id: str, name: str) -> str:
    return f"{unit_id}{NAMESPACE_SEPARATOR}{name}"


def create_unit_schema(
    id: str,
    version: Optional[str] = None,
    parent: Optional["UnitSchema"] = None,
    description: Optional[str] = None,
) -> "UnitSchema":
    """
    Create a unit DNA record.

    Fails fast on a malformed id before anything else is built. The parent
    record is copied by value.
    """
    from unit.config import get_settings
    from unit.core.models import UnitSchema

    validate_unit_id(id)
    return UnitSchema(
        id=id,
        version=version or get_settings().default_version,
        parent=parent.model_copy(deep=True) if parent is not None else None,
        description=description,
    )


def validate_unit_schema(schema: Any) -> bool:
    """Non-raising structural check of a DNA record (or anything shaped like one)."""
    if schema is None:
        return False
    unit_id = getattr(schema, "id", None)
    version = getattr(schema, "version", None)
    if not isinstance(unit_id, str) or not unit_id.strip() or " " in unit_id:
        return False
    if not isinstance(version, str) or not version.strip():
        return False
    parent = getattr(schema, "parent", None)
    return parent is None or validate_unit_schema(parent)
