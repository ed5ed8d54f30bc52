"""Tests for the capability registry."""

import asyncio

import pytest

from unit.core.errors import (
    CapabilityExecutionError,
    DuplicateCapabilityError,
    InvalidCapabilityError,
    UnknownCapabilityError,
)
from unit.registry.capabilities import Capabilities
from unit.unit import TeachingContract


class TestCapabilitiesRegistry:
    """Tests for registration and lookup."""

    @pytest.fixture
    def caps(self):
        return Capabilities.create("calculator", {
            "add": lambda a, b: a + b,
            "multiply": lambda a, b: a * b,
        })

    def test_create(self, caps):
        assert caps.size() == 2
        assert caps.list() == ["add", "multiply"]
        assert caps.has("add")
        assert "multiply" in caps
        assert len(caps) == 2
        assert list(caps) == ["add", "multiply"]

    def test_add_duplicate(self, caps):
        with pytest.raises(DuplicateCapabilityError, match=r"\[calculator\] Capability 'add' already exists"):
            caps.add("add", lambda a, b: 0)

    def test_set_overwrites(self, caps):
        replacement = lambda a, b: a - b
        caps.set("add", replacement)
        assert caps.get("add") is replacement
        assert caps.size() == 2

    def test_empty_name_rejected(self, caps):
        with pytest.raises(InvalidCapabilityError, match="cannot be empty"):
            caps.add("", lambda: None)

    def test_non_callable_rejected(self, caps):
        with pytest.raises(InvalidCapabilityError, match="must be callable"):
            caps.add("divide", 42)

    def test_remove(self, caps):
        assert caps.remove("add") is True
        assert not caps.has("add")
        assert caps.remove("add") is False

    def test_clear(self, caps):
        caps.clear()
        assert caps.size() == 0

    def test_get_unknown(self, caps):
        assert caps.get("divide") is None

    def test_to_record_is_a_copy(self, caps):
        record = caps.to_record()
        record["divide"] = lambda a, b: a / b
        assert not caps.has("divide")

    def test_restore(self, caps):
        snapshot = caps.to_record()
        caps.add("divide", lambda a, b: a / b)
        caps.remove("add")

        caps.restore(snapshot)

        assert caps.list() == ["add", "multiply"]

    def test_copy_is_independent(self, caps):
        clone = caps.copy()
        clone.add("divide", lambda a, b: a / b)
        caps.remove("add")

        assert clone.has("add")
        assert not caps.has("divide")
        assert clone.unit_id == "calculator"


class TestCapabilitiesExecution:
    """Tests for uniform sync/async execution."""

    @pytest.mark.asyncio
    async def test_execute_sync_function(self):
        caps = Capabilities.create("calculator", {"add": lambda a, b: a + b})
        assert await caps.execute("add", 2, 3) == 5

    @pytest.mark.asyncio
    async def test_execute_async_function(self):
        async def fetch(key, default=None):
            await asyncio.sleep(0)
            return {"key": key, "default": default}

        caps = Capabilities.create("store", {"fetch": fetch})
        result = await caps.execute("fetch", "a", default=1)
        assert result == {"key": "a", "default": 1}

    @pytest.mark.asyncio
    async def test_execute_unknown(self):
        caps = Capabilities.create("calculator", {"add": lambda a, b: a + b, "sub": lambda a, b: a - b})
        with pytest.raises(UnknownCapabilityError) as exc_info:
            await caps.execute("divide", 1, 2)

        assert str(exc_info.value) == "[calculator] Capability 'divide' not found. Available: add, sub"
        assert exc_info.value.available == ["add", "sub"]

    @pytest.mark.asyncio
    async def test_execution_failure_wrapped(self):
        def divide(a, b):
            return a / b

        caps = Capabilities.create("calculator", {"divide": divide})
        with pytest.raises(CapabilityExecutionError) as exc_info:
            await caps.execute("divide", 1, 0)

        error = exc_info.value
        assert error.capability == "divide"
        assert isinstance(error.__cause__, ZeroDivisionError)
        assert str(error).startswith("[calculator] Capability 'divide' execution failed:")

    @pytest.mark.asyncio
    async def test_async_failure_wrapped(self):
        async def explode():
            raise RuntimeError("boom")

        caps = Capabilities.create("bomb", {"explode": explode})
        with pytest.raises(CapabilityExecutionError, match="boom"):
            await caps.execute("explode")

    def test_execute_from_sync_code(self):
        caps = Capabilities.create("calculator", {"add": lambda a, b: a + b})
        assert asyncio.run(caps.execute("add", 1, 1)) == 2


class TestCapabilitiesLearning:
    """Tests for namespaced learning."""

    def test_learn_from_registry(self):
        source = Capabilities.create("calculator", {"add": lambda a, b: a + b})
        learner = Capabilities.create("math", {"square": lambda x: x * x})

        learner.learn([TeachingContract(unit_id="calculator", capabilities=source, schema={})])

        assert learner.list() == ["square", "calculator.add"]

    def test_learn_from_plain_mapping(self):
        learner = Capabilities("math")
        contract = TeachingContract(
            unit_id="greeter",
            capabilities={"greet": lambda name: f"Hello, {name}"},
            schema={},
        )
        learner.learn([contract])
        assert learner.has("greeter.greet")

    def test_relearn_overwrites(self):
        learner = Capabilities("math")
        first = lambda a, b: a + b
        second = lambda a, b: b + a

        learner.learn([TeachingContract(unit_id="calculator", capabilities={"add": first}, schema={})])
        learner.learn([TeachingContract(unit_id="calculator", capabilities={"add": second}, schema={})])

        assert learner.size() == 1
        assert learner.get("calculator.add") is second
