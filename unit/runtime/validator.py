"""
Validator - keeps a unit's capabilities and schemas consistent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, TYPE_CHECKING

from unit.config import get_settings
from unit.core.errors import (
    InconsistentConsciousnessError,
    InvalidIdentityError,
    InvalidInputError,
    InvalidOutputError,
    PostLearningInconsistencyError,
    UnknownCommandError,
)
from unit.core.identity import validate_unit_id
from unit.core.models import CompatibilityResult, ParametersSchema, ResponseSchema
from unit.registry.capabilities import Capabilities, contract_capabilities
from unit.registry.schema import Schema, check_value, contract_schemas

if TYPE_CHECKING:
    from unit.unit import TeachingContract

logger = logging.getLogger(__name__)


@dataclass
class ValidatorConfig:
    """Configuration for Validator.create()."""
    unit_id: str
    capabilities: Capabilities
    schema: Schema
    strict_mode: Optional[bool] = None


class Validator:
    """
    Consistency checker for one unit's capability and schema registries.

    The invariant it polices: every capability has a schema and every
    schema has a capability. On top of that it offers:
    - Validated execution (input/output checks in strict mode)
    - Compatibility checks for foreign teaching contracts
    - All-or-nothing learning into both registries

    Usage:
        validator = Validator.create(unit_id="calculator", capabilities=caps, schema=schema)

        validator.is_valid()
        result = await validator.execute("add", {"a": 1, "b": 2})
    """

    def __init__(
        self,
        unit_id: str,
        capabilities: Capabilities,
        schema: Schema,
        strict_mode: Optional[bool] = None,
    ):
        self.unit_id = unit_id
        self.capabilities = capabilities
        self.schema = schema
        self.strict_mode = get_settings().strict_mode if strict_mode is None else strict_mode

    @classmethod
    def create(
        cls,
        config: Optional[ValidatorConfig] = None,
        *,
        unit_id: Optional[str] = None,
        capabilities: Optional[Capabilities] = None,
        schema: Optional[Schema] = None,
        strict_mode: Optional[bool] = None,
    ) -> "Validator":
        """
        Create a validator, refusing inconsistent registries.

        Raises:
            InconsistentConsciousnessError: capability and schema names differ
        """
        if config is None:
            config = ValidatorConfig(
                unit_id=unit_id,
                capabilities=capabilities,
                schema=schema,
                strict_mode=strict_mode,
            )

        validator = cls(config.unit_id, config.capabilities, config.schema, config.strict_mode)
        if not validator.is_valid():
            raise InconsistentConsciousnessError(
                "Validator validation error - capabilities and schemas are incompatible"
                f" (missing schemas: {validator.missing_schemas()},"
                f" orphan schemas: {validator.orphan_schemas()})",
                unit_id=config.unit_id,
                missing_schemas=validator.missing_schemas(),
                orphan_schemas=validator.orphan_schemas(),
            )
        return validator

    # ==================== Consistency ====================

    def is_valid(self) -> bool:
        """Capability names and schema names are the same set."""
        return set(self.capabilities.list()) == set(self.schema.list())

    def missing_schemas(self) -> List[str]:
        """Capabilities that have no schema."""
        schemas = set(self.schema.list())
        return [name for name in self.capabilities.list() if name not in schemas]

    def orphan_schemas(self) -> List[str]:
        """Schemas that have no capability."""
        capabilities = set(self.capabilities.list())
        return [name for name in self.schema.list() if name not in capabilities]

    # ==================== Execution ====================

    async def execute(self, name: str, input: Any = None) -> Any:
        """
        Execute a capability with schema checks.

        In strict mode the input is checked against the schema parameters
        before the capability runs, and the result against the response
        schema before it is returned.

        Raises:
            UnknownCommandError: name is not registered
            InvalidInputError: strict mode, input failed the parameter schema
            InvalidOutputError: strict mode, result failed the response schema
        """
        if not self.capabilities.has(name):
            raise UnknownCommandError(name, self.capabilities.list(), unit_id=self.unit_id)

        tool = self.schema.get(name)

        if tool is not None and self.strict_mode:
            # no input is checked as an empty object
            candidate = {} if input is None else input
            errors = check_value(candidate, tool.parameters.model_dump(exclude_none=True))
            if errors:
                raise InvalidInputError(
                    f"Invalid input for {name}", errors, unit_id=self.unit_id, name=name
                )

        if input is None:
            result = await self.capabilities.execute(name)
        else:
            result = await self.capabilities.execute(name, input)

        if tool is not None and tool.response is not None and self.strict_mode:
            errors = check_value(result, tool.response.model_dump(exclude_none=True))
            if errors:
                raise InvalidOutputError(
                    f"Invalid output from {name}", errors, unit_id=self.unit_id, name=name
                )

        return result

    def validate_input(self, value: Any, parameters: Any) -> bool:
        return not check_value(value, _descriptor(parameters))

    def validate_output(self, value: Any, response: Any) -> bool:
        return not check_value(value, _descriptor(response))

    # ==================== Contracts ====================

    def validate_compatibility(self, contract: "TeachingContract") -> CompatibilityResult:
        """
        Pre-flight check of a foreign contract before learning it.

        Never raises; the learner decides what to do with the result.
        """
        if contract is None:
            return CompatibilityResult(is_compatible=False, reason="No contract given")

        if getattr(contract, "capabilities", None) is None or getattr(contract, "schema", None) is None:
            return CompatibilityResult(
                is_compatible=False,
                reason="Missing required consciousness components",
            )

        source = getattr(contract, "unit_id", None)
        try:
            validate_unit_id(source)
        except InvalidIdentityError as e:
            return CompatibilityResult(
                is_compatible=False,
                reason=f"Invalid teaching unit id {source!r}: {e}",
            )

        try:
            capabilities = list(contract_capabilities(contract))
            schemas = set(contract_schemas(contract))
        except (TypeError, ValueError) as e:
            return CompatibilityResult(is_compatible=False, reason=str(e))

        for cap_name in capabilities:
            if cap_name not in schemas:
                return CompatibilityResult(
                    is_compatible=False,
                    reason=f"Capability '{cap_name}' missing corresponding schema",
                )

        return CompatibilityResult(is_compatible=True)

    def learn(self, contracts: Iterable["TeachingContract"]):
        """
        Learn contracts into both registries, all-or-nothing.

        Both registries are snapshotted first; if learning fails or leaves
        them inconsistent, the snapshot is restored before the error propagates.

        Raises:
            PostLearningInconsistencyError: merged registries disagree
            SchemaNameMismatchError: a contract schema is keyed under the wrong name
        """
        contracts = list(contracts)
        capabilities_snapshot = self.capabilities.to_record()
        schema_snapshot = self.schema.to_record()

        try:
            self.capabilities.learn(contracts)
            self.schema.learn(contracts)

            if not self.is_valid():
                raise PostLearningInconsistencyError(
                    "Learned capabilities and schemas are inconsistent after learning"
                    f" (missing schemas: {self.missing_schemas()},"
                    f" orphan schemas: {self.orphan_schemas()})",
                    unit_id=self.unit_id,
                    missing_schemas=self.missing_schemas(),
                    orphan_schemas=self.orphan_schemas(),
                )
        except Exception:
            self.capabilities.restore(capabilities_snapshot)
            self.schema.restore(schema_snapshot)
            sources = [getattr(c, "unit_id", None) for c in contracts]
            logger.warning(f"[{self.unit_id}] Learning from {sources} rolled back")
            raise

    # ==================== Utility ====================

    def help(self) -> str:
        """Text summary of the validator state."""
        return "\n".join([
            f"Validator [{self.unit_id}]",
            f"Capabilities: {', '.join(self.capabilities.list())}",
            f"Schemas: {', '.join(self.schema.list())}",
            f"Strict mode: {self.strict_mode}",
            f"Validation Status: {'Valid' if self.is_valid() else 'Invalid'}",
        ])

    def copy(self, capabilities: Capabilities, schema: Schema) -> "Validator":
        """Validator with the same settings over other registries."""
        return Validator(self.unit_id, capabilities, schema, self.strict_mode)

    def __repr__(self) -> str:
        return f"Validator(unit_id='{self.unit_id}', valid={self.is_valid()}, strict={self.strict_mode})"


def _descriptor(schema: Any) -> Mapping[str, Any]:
    if isinstance(schema, (ParametersSchema, ResponseSchema)):
        return schema.model_dump(exclude_none=True)
    return schema
