"""
Unit - base class for self-contained components.

A unit owns exactly one capability registry, one schema registry and one
validator (its trinity). It can:
- execute its capabilities (native or learned)
- teach: export a read-only contract describing its capabilities and schemas
- learn: absorb other units' contracts under ``<unit-id>.<name>``
- evolve: produce a new unit with a bumped version and a parent-linked DNA
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from unit.config import get_settings
from unit.core.errors import IncompatibleContractError, InconsistentConsciousnessError, UnitError
from unit.core.identity import NAMESPACE_SEPARATOR, create_unit_schema, next_version
from unit.core.models import ToolSchema, UnitProps, UnitSchema
from unit.registry.capabilities import Capabilities
from unit.registry.schema import Schema, SchemaLike
from unit.runtime.events import Event, EventEmitter, EventError
from unit.runtime.validator import Validator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeachingContract:
    """
    What one unit hands to another when teaching.

    ``capabilities`` and ``schema`` are normally registries, but plain
    mappings (name -> function, name -> schema) are accepted as well.
    """
    unit_id: str
    capabilities: Union[Capabilities, Mapping[str, Callable[..., Any]]]
    schema: Union[Schema, Mapping[str, SchemaLike]]
    validator: Optional[Validator] = None


@dataclass
class UnitCore:
    """The trinity a unit is built from."""
    capabilities: Capabilities
    schema: Schema
    validator: Validator


class Unit(ABC):
    """
    Base class for units.

    Concrete units implement ``build()`` and expose a ``create()`` classmethod
    as their only public entry point; the constructor is internal.
    Construction fails if the trinity is inconsistent, so every unit that
    exists is valid.

    Usage:
        class CalculatorUnit(Unit):
            @classmethod
            def create(cls) -> "CalculatorUnit":
                return cls(UnitProps(dna=create_unit_schema(id="calculator")))

            def build(self) -> UnitCore:
                capabilities = Capabilities.create(self.dna.id, {"add": lambda a, b: a + b})
                schema = Schema.create(self.dna.id, {"add": {...}})
                validator = Validator.create(
                    unit_id=self.dna.id, capabilities=capabilities, schema=schema
                )
                return UnitCore(capabilities, schema, validator)

        calculator = CalculatorUnit.create()
        math = MathUnit.create()
        math.learn([calculator.teach()])
        await math.execute("calculator.add", 2, 3)  # 5
    """

    def __init__(self, props: UnitProps):
        self._props = props
        self._events = EventEmitter()

        core = self.build()
        if core.validator.capabilities is not core.capabilities or core.validator.schema is not core.schema:
            raise InconsistentConsciousnessError(
                "Validator must wrap the unit's own capability and schema registries",
                unit_id=props.dna.id,
            )
        if not core.validator.is_valid():
            raise InconsistentConsciousnessError(
                "Invalid consciousness architecture",
                unit_id=props.dna.id,
                missing_schemas=core.validator.missing_schemas(),
                orphan_schemas=core.validator.orphan_schemas(),
            )
        self._unit = core

    @abstractmethod
    def build(self) -> UnitCore:
        """Build the capability/schema/validator trinity for this unit."""

    # ==================== Identity ====================

    @property
    def props(self) -> UnitProps:
        return self._props

    @property
    def dna(self) -> UnitSchema:
        return self._props.dna

    def whoami(self) -> str:
        return f"{type(self).__name__}[{self.dna.id}@{self.dna.version}]"

    # ==================== Trinity ====================

    @property
    def capabilities(self) -> Capabilities:
        return self._unit.capabilities

    @property
    def schema(self) -> Schema:
        return self._unit.schema

    @property
    def validator(self) -> Validator:
        return self._unit.validator

    @property
    def events(self) -> EventEmitter:
        return self._events

    def can(self, name: str) -> bool:
        return self._unit.capabilities.has(name)

    def get_capabilities(self) -> List[str]:
        return self._unit.capabilities.list()

    def has_schema(self, name: str) -> bool:
        return self._unit.schema.has(name)

    def get_schema(self, name: str) -> Optional[ToolSchema]:
        return self._unit.schema.get(name)

    # ==================== Execution ====================

    async def execute(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """
        Execute a capability directly through the capability registry.

        Arguments are passed through as given; no schema checks happen here.
        Use ``unit.validator.execute(name, input)`` for schema-checked calls.
        """
        try:
            return await self._unit.capabilities.execute(name, *args, **kwargs)
        except UnitError as e:
            self._emit("error", {"capability": name}, error=EventError.from_exception(e))
            raise

    def execute_sync(self, name: str, *args: Any, **kwargs: Any) -> Any:
        """Synchronous execution wrapper."""
        return asyncio.run(self.execute(name, *args, **kwargs))

    # ==================== Teaching & Learning ====================

    def teach(self) -> TeachingContract:
        """
        Export this unit's capabilities and schemas.

        The contract holds copies taken now; later changes to this unit do
        not leak into contracts already handed out.
        """
        capabilities = self._unit.capabilities.copy()
        schema = self._unit.schema.copy()
        return TeachingContract(
            unit_id=self.dna.id,
            capabilities=capabilities,
            schema=schema,
            validator=self._unit.validator.copy(capabilities, schema),
        )

    def learn(self, contracts: Iterable[TeachingContract]):
        """
        Absorb capabilities and schemas from other units.

        Every contract is checked for compatibility before anything changes;
        learning itself is all-or-nothing across the whole call.

        Raises:
            IncompatibleContractError: a contract failed the pre-flight check
            PostLearningInconsistencyError: the merge broke consistency (rolled back)
        """
        contracts = list(contracts)
        for contract in contracts:
            check = self._unit.validator.validate_compatibility(contract)
            if not check.is_compatible:
                source = getattr(contract, "unit_id", None)
                logger.warning(f"[{self.dna.id}] Rejected contract from {source}: {check.reason}")
                raise IncompatibleContractError(
                    f"Cannot learn from '{source}': {check.reason}",
                    unit_id=self.dna.id,
                    source=source,
                )

        self._unit.validator.learn(contracts)
        self._emit("learned", {
            "sources": [c.unit_id for c in contracts],
            "capabilities": self.get_capabilities(),
        })

    # ==================== Evolution ====================

    def evolve(
        self,
        new_id: str,
        additional_capabilities: Optional[Mapping[str, Callable[..., Any]]] = None,
    ) -> "Unit":
        """
        Create an evolved unit of the same type.

        The new unit gets a bumped version, this unit's DNA as parent, learns
        everything this unit can teach, and learns any additional capabilities
        under ``<new_id>.<name>`` with a minimal schema. This unit is unchanged.

        Everything is relearned under this unit's id: natives become
        ``<id>.<name>`` and learned ones ``<id>.<teaching-id>.<name>``, so
        ``calculator.add`` learned here is ``math.calculator.add`` after evolving.
        """
        dna = create_unit_schema(
            id=new_id,
            version=next_version(self.dna.version),
            parent=self.dna,
            description=self.dna.description,
        )
        evolved = self._spawn(self._props.model_copy(update={"dna": dna}, deep=True))
        evolved.learn([self.teach()])

        if additional_capabilities:
            evolved.learn([self._evolution_contract(new_id, additional_capabilities)])

        logger.info(f"[{self.dna.id}] Evolved into {dna.id}@{dna.version}")
        self._emit("evolved", {"id": dna.id, "version": dna.version})
        return evolved

    def _spawn(self, props: UnitProps) -> "Unit":
        return type(self)(props)

    @staticmethod
    def _evolution_contract(
        unit_id: str,
        additional_capabilities: Mapping[str, Callable[..., Any]],
    ) -> TeachingContract:
        capabilities = Capabilities.create(unit_id, additional_capabilities)
        schema = Schema.create(unit_id, {
            name: ToolSchema.minimal(name, f"Capability {name} added during evolution")
            for name in additional_capabilities
        })
        validator = Validator.create(unit_id=unit_id, capabilities=capabilities, schema=schema)
        return TeachingContract(
            unit_id=unit_id,
            capabilities=capabilities,
            schema=schema,
            validator=validator,
        )

    # ==================== Introspection ====================

    def help(self) -> str:
        lines = [
            self.whoami(),
            f"Capabilities: {', '.join(self.get_capabilities()) or '(none)'}",
        ]
        for name in self.get_capabilities():
            tool = self.get_schema(name)
            if tool is not None:
                lines.append(f"  {name}: {tool.description}")
        return "\n".join(lines)

    def explain(self) -> str:
        """Identity, lineage and where each capability came from."""
        names = self.get_capabilities()
        learned = [n for n in names if NAMESPACE_SEPARATOR in n]
        native = [n for n in names if NAMESPACE_SEPARATOR not in n]
        lineage = " <- ".join(str(dna) for dna in self.dna.lineage())
        return "\n".join([
            self.whoami(),
            f"Lineage: {lineage}",
            f"Native capabilities ({len(native)}): {', '.join(native)}",
            f"Learned capabilities ({len(learned)}): {', '.join(learned)}",
            f"Consistent: {self._unit.validator.is_valid()}",
        ])

    def describe(self) -> Dict[str, Any]:
        """Plain-data summary, with schemas in export shape."""
        return {
            "id": self.dna.id,
            "version": self.dna.version,
            "parent": self.dna.parent.id if self.dna.parent else None,
            "capabilities": self.get_capabilities(),
            "tools": self._unit.schema.to_array(),
        }

    # ==================== Internals ====================

    def _emit(self, kind: str, data: Dict[str, Any], error: Optional[EventError] = None):
        if not get_settings().emit_events:
            return
        self._events.emit(Event(type=f"{self.dna.id}.{kind}", data=data, error=error))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id='{self.dna.id}', version='{self.dna.version}')"
