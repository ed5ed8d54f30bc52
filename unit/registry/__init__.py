"""Unit registries - capabilities and tool schemas."""

from unit.registry.capabilities import Capabilities
from unit.registry.schema import Schema

__all__ = [
    "Capabilities",
    "Schema",
]
