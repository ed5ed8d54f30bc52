"""
Capabilities - name -> implementation registry owned by one unit.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional, TYPE_CHECKING

from unit.core.errors import (
    CapabilityExecutionError,
    DuplicateCapabilityError,
    InvalidCapabilityError,
    UnknownCapabilityError,
)
from unit.core.identity import namespaced

if TYPE_CHECKING:
    from unit.unit import TeachingContract

logger = logging.getLogger(__name__)

Capability = Callable[..., Any]


def contract_capabilities(contract: "TeachingContract") -> Dict[str, Capability]:
    """Capability bindings of a contract, whether it carries a registry or a plain mapping."""
    source = contract.capabilities
    if source is None:
        return {}
    if hasattr(source, "to_record"):
        return source.to_record()
    return dict(source)


class Capabilities:
    """
    Capability registry for a single unit.

    Responsibilities:
    - Register native capabilities (add fails on duplicates, set overwrites)
    - Execute capabilities uniformly, whether they are sync or async
    - Absorb capabilities from teaching contracts under ``<unit-id>.<name>``

    Usage:
        caps = Capabilities.create("calculator", {"add": lambda a, b: a + b})

        result = await caps.execute("add", 2, 3)

        caps.learn([other_unit.teach()])
        caps.has("other-unit.greet")
    """

    def __init__(self, unit_id: str):
        self.unit_id = unit_id
        self._map: Dict[str, Capability] = {}

    @classmethod
    def create(cls, unit_id: str, capabilities: Optional[Mapping[str, Capability]] = None) -> "Capabilities":
        """Create a registry with an initial capability set."""
        instance = cls(unit_id)
        for name, fn in (capabilities or {}).items():
            instance.add(name, fn)
        return instance

    # ==================== Core Operations ====================

    def add(self, name: str, fn: Capability):
        """
        Add a capability.

        Raises:
            DuplicateCapabilityError: if the name is already registered
        """
        self._check(name, fn)
        if name in self._map:
            raise DuplicateCapabilityError(name, unit_id=self.unit_id)
        self._map[name] = fn
        logger.debug(f"[{self.unit_id}] Registered capability: {name}")

    def set(self, name: str, fn: Capability):
        """Add or overwrite a capability."""
        self._check(name, fn)
        self._map[name] = fn

    def get(self, name: str) -> Optional[Capability]:
        return self._map.get(name)

    def has(self, name: str) -> bool:
        return name in self._map

    def list(self) -> List[str]:
        """Capability names in insertion order."""
        return list(self._map.keys())

    def size(self) -> int:
        return len(self._map)

    def remove(self, name: str) -> bool:
        """Remove a capability; removing an unknown name is a no-op."""
        return self._map.pop(name, None) is not None

    def clear(self):
        self._map.clear()

    def to_record(self) -> Dict[str, Capability]:
        """Copy of the name -> implementation mapping."""
        return dict(self._map)

    def copy(self) -> "Capabilities":
        """Independent registry holding the same bindings."""
        clone = Capabilities(self.unit_id)
        clone._map = dict(self._map)
        return clone

    # ==================== Execution ====================

    async def execute(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """
        Execute a capability by name.

        Sync implementations are called directly; awaitable results are awaited.

        Raises:
            UnknownCapabilityError: name is not registered
            CapabilityExecutionError: the implementation raised
        """
        fn = self._map.get(name)
        if fn is None:
            raise UnknownCapabilityError(name, self.list(), unit_id=self.unit_id)

        try:
            result = fn(*args, **kwargs)
            if inspect.isawaitable(result):
                result = await result
            return result
        except Exception as e:
            logger.error(f"[{self.unit_id}] Capability '{name}' failed: {e}")
            raise CapabilityExecutionError(name, e, unit_id=self.unit_id) from e

    # ==================== Learning ====================

    def learn(self, contracts: Iterable["TeachingContract"]):
        """
        Absorb capabilities from teaching contracts.

        Each capability lands under ``<contract.unit_id>.<name>``. Re-learning
        overwrites, so the newest binding from a teaching unit wins.
        """
        for contract in contracts:
            for name, fn in contract_capabilities(contract).items():
                self.set(namespaced(contract.unit_id, name), fn)
            logger.debug(f"[{self.unit_id}] Learned capabilities from {contract.unit_id}")

    # ==================== Internals ====================

    def _check(self, name: str, fn: Capability):
        if not isinstance(name, str) or not name:
            raise InvalidCapabilityError("Capability name cannot be empty", unit_id=self.unit_id)
        if not callable(fn):
            raise InvalidCapabilityError(f"Capability '{name}' must be callable", unit_id=self.unit_id)

    def restore(self, snapshot: Dict[str, Capability]):
        """Replace all bindings with a snapshot taken by ``to_record()``."""
        self._map = dict(snapshot)

    def __contains__(self, name: str) -> bool:
        return name in self._map

    def __len__(self) -> int:
        return len(self._map)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._map))

    def __repr__(self) -> str:
        return f"Capabilities(unit_id='{self.unit_id}', size={len(self._map)})"
