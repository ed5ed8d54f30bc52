"""Shared concrete units for the test suite."""

import pytest

from unit import (
    Capabilities,
    Schema,
    Unit,
    UnitCore,
    UnitProps,
    Validator,
    create_unit_schema,
)
from unit.config import reset_settings


def _number_pair_schema(name: str, description: str) -> dict:
    return {
        "name": name,
        "description": description,
        "parameters": {
            "type": "object",
            "properties": {
                "a": {"type": "number", "description": "First number"},
                "b": {"type": "number", "description": "Second number"},
            },
            "required": ["a", "b"],
        },
        "response": {"type": "number"},
    }


class CalculatorProps(UnitProps):
    precision: int = 2


class CalculatorUnit(Unit):
    """Arithmetic on two positional numbers."""

    @classmethod
    def create(cls, precision: int = 2) -> "CalculatorUnit":
        return cls(CalculatorProps(
            dna=create_unit_schema(id="calculator", version="1.0.0", description="Basic arithmetic"),
            precision=precision,
        ))

    def build(self) -> UnitCore:
        capabilities = Capabilities.create(self.dna.id, {
            "add": self._add,
            "multiply": self._multiply,
        })
        schema = Schema.create(self.dna.id, {
            "add": _number_pair_schema("add", "Add two numbers"),
            "multiply": _number_pair_schema("multiply", "Multiply two numbers"),
        })
        validator = Validator.create(unit_id=self.dna.id, capabilities=capabilities, schema=schema)
        return UnitCore(capabilities, schema, validator)

    def _add(self, a, b):
        return round(a + b, self.props.precision)

    def _multiply(self, a, b):
        return round(a * b, self.props.precision)


class MathUnit(Unit):
    """Starts with a single native capability and learns the rest."""

    @classmethod
    def create(cls) -> "MathUnit":
        return cls(UnitProps(dna=create_unit_schema(id="math")))

    def build(self) -> UnitCore:
        capabilities = Capabilities.create(self.dna.id, {"square": lambda x: x * x})
        schema = Schema.create(self.dna.id, {
            "square": {
                "name": "square",
                "description": "Square a number",
                "parameters": {
                    "type": "object",
                    "properties": {"x": {"type": "number", "description": "Value"}},
                    "required": ["x"],
                },
            },
        })
        validator = Validator.create(unit_id=self.dna.id, capabilities=capabilities, schema=schema)
        return UnitCore(capabilities, schema, validator)


class GreeterUnit(Unit):
    """Takes a single input object; async implementation; counts calls."""

    @classmethod
    def create(cls, strict_mode: bool = True) -> "GreeterUnit":
        return cls(UnitProps(
            dna=create_unit_schema(id="greeter"),
            metadata={"strict_mode": strict_mode},
        ))

    def build(self) -> UnitCore:
        self.calls = 0
        capabilities = Capabilities.create(self.dna.id, {"greet": self._greet})
        schema = Schema.create(self.dna.id, {
            "greet": {
                "name": "greet",
                "description": "Greet someone",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "name": {"type": "string", "description": "Who to greet"},
                        "style": {
                            "type": "string",
                            "description": "Greeting style",
                            "enum": ["formal", "casual"],
                        },
                    },
                    "required": ["name"],
                },
                "response": {"type": "string"},
            },
        })
        validator = Validator.create(
            unit_id=self.dna.id,
            capabilities=capabilities,
            schema=schema,
            strict_mode=self.props.metadata.get("strict_mode", True),
        )
        return UnitCore(capabilities, schema, validator)

    async def _greet(self, input):
        self.calls += 1
        if input.get("style") == "formal":
            return f"Good day, {input['name']}."
        return f"Hello, {input['name']}!"


class BrokenUnit(Unit):
    """Builds a trinity whose validator was created without the consistency check."""

    @classmethod
    def create(cls) -> "BrokenUnit":
        return cls(UnitProps(dna=create_unit_schema(id="broken")))

    def build(self) -> UnitCore:
        capabilities = Capabilities.create(self.dna.id, {"orphan": lambda: None})
        schema = Schema(self.dna.id)
        return UnitCore(capabilities, schema, Validator(self.dna.id, capabilities, schema))



class DetachedUnit(Unit):
    """Hands back a consistent validator that wraps registries other than its own."""

    @classmethod
    def create(cls) -> "DetachedUnit":
        return cls(UnitProps(dna=create_unit_schema(id="detached")))

    def build(self) -> UnitCore:
        capabilities = Capabilities(self.dna.id)
        schema = Schema(self.dna.id)
        validator = Validator.create(
            unit_id=self.dna.id,
            capabilities=Capabilities(self.dna.id),
            schema=Schema(self.dna.id),
        )
        return UnitCore(capabilities, schema, validator)

@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test starts from default settings."""
    for name in ("UNIT_STRICT_MODE", "UNIT_DEFAULT_VERSION", "UNIT_EMIT_EVENTS"):
        monkeypatch.delenv(name, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def calculator():
    return CalculatorUnit.create()


@pytest.fixture
def math_unit():
    return MathUnit.create()


@pytest.fixture
def greeter():
    return GreeterUnit.create()


@pytest.fixture
def broken_unit_class():
    return BrokenUnit


@pytest.fixture
def add_schema():
    return _number_pair_schema("add", "Add two numbers")


@pytest.fixture
def greeter_class():
    return GreeterUnit


@pytest.fixture
def detached_unit_class():
    return DetachedUnit


@pytest.fixture
def math_unit_class():
    return MathUnit
