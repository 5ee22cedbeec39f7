"""Tests for the utility tools."""

from __future__ import annotations

import json
import re
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from chatmcp.tools.registry import ToolContext
from chatmcp.tools.utility import (
    calculate,
    compute_text_stats,
    echo,
    generate_uuid,
    get_current_time,
    text_stats,
)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
UUID_V4 = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$")


@pytest.fixture
def context() -> ToolContext:
    return ToolContext()


def _payload(result: Any) -> Any:
    return json.loads(result.text)


def _epoch_ms(moment: datetime) -> int:
    return (moment - EPOCH) // timedelta(milliseconds=1)


class TestEcho:
    async def test_returns_text(self, context: ToolContext) -> None:
        result = await echo({"text": "hello"}, context)
        assert result.is_error is None
        assert _payload(result) == {"text": "hello"}

    async def test_empty_text_is_in_band_error(self, context: ToolContext) -> None:
        result = await echo({"text": ""}, context)
        assert result.is_error is True
        assert _payload(result)["error"].startswith("Invalid input: text")

    async def test_too_long(self, context: ToolContext) -> None:
        result = await echo({"text": "x" * 10_001}, context)
        assert result.is_error is True

    async def test_length_counts_utf16_units(self, context: ToolContext) -> None:
        emoji = "\U0001F600"
        assert (await echo({"text": emoji * 5_000}, context)).is_error is None

        result = await echo({"text": emoji * 5_001}, context)
        assert result.is_error is True
        assert "at most 10000 characters" in _payload(result)["error"]

    async def test_wrong_type(self, context: ToolContext) -> None:
        result = await echo({"text": 42}, context)
        assert result.is_error is True

    async def test_non_object_arguments(self, context: ToolContext) -> None:
        result = await echo("hello", context)
        assert result.is_error is True


class TestGetCurrentTime:
    async def test_shape(self, context: ToolContext) -> None:
        before = _epoch_ms(datetime.now(timezone.utc))
        payload = _payload(await get_current_time({}, context))
        after = _epoch_ms(datetime.now(timezone.utc))

        assert payload["utc"].endswith("Z")
        assert before <= payload["timestamp"] <= after
        parsed = datetime.fromisoformat(payload["utc"].replace("Z", "+00:00"))
        assert _epoch_ms(parsed) == payload["timestamp"]

    async def test_ignores_arguments(self, context: ToolContext) -> None:
        result = await get_current_time({"anything": 1}, context)
        assert result.is_error is None


class TestCalculate:
    @pytest.mark.parametrize(
        ("operation", "a", "b", "expected"),
        [
            ("add", 2, 3, 5),
            ("subtract", 2, 3, -1),
            ("multiply", 7, 6, 42),
            ("divide", 7, 2, 3.5),
        ],
    )
    async def test_operations(
        self, context: ToolContext, operation: str, a: float, b: float, expected: float
    ) -> None:
        payload = _payload(await calculate({"operation": operation, "a": a, "b": b}, context))
        assert payload == {"operation": operation, "a": a, "b": b, "result": expected}

    async def test_division_by_zero(self, context: ToolContext) -> None:
        result = await calculate({"operation": "divide", "a": 1, "b": 0}, context)
        assert result.is_error is True
        assert _payload(result) == {"error": "Division by zero"}

    async def test_unknown_operation(self, context: ToolContext) -> None:
        result = await calculate({"operation": "modulo", "a": 1, "b": 2}, context)
        assert result.is_error is True
        assert "Invalid input" in _payload(result)["error"]

    async def test_string_operand_rejected(self, context: ToolContext) -> None:
        result = await calculate({"operation": "add", "a": "1", "b": 2}, context)
        assert result.is_error is True

    async def test_boolean_operand_rejected(self, context: ToolContext) -> None:
        result = await calculate({"operation": "add", "a": True, "b": 2}, context)
        assert result.is_error is True

    async def test_overflow_is_not_finite(self, context: ToolContext) -> None:
        result = await calculate({"operation": "multiply", "a": 1e308, "b": 10.0}, context)
        assert result.is_error is True
        assert _payload(result) == {"error": "Result is not a finite number"}

    @pytest.mark.parametrize(
        ("operation", "a", "b"),
        [
            ("divide", 10**400, 3),
            ("multiply", 10**400, 2.0),
            ("add", 10**400, 1),
            ("subtract", -(10**400), 0.5),
        ],
    )
    async def test_integer_beyond_double_range(
        self, context: ToolContext, operation: str, a: int, b: float
    ) -> None:
        result = await calculate({"operation": operation, "a": a, "b": b}, context)
        assert result.is_error is True
        assert _payload(result) == {"error": "Result is not a finite number"}

    async def test_large_integers_within_range(self, context: ToolContext) -> None:
        payload = _payload(
            await calculate({"operation": "multiply", "a": 2**62, "b": 4}, context)
        )
        assert payload["result"] == 2**64


class TestGenerateUuid:
    async def test_format(self, context: ToolContext) -> None:
        payload = _payload(await generate_uuid({}, context))
        assert UUID_V4.match(payload["uuid"])

    async def test_unique(self, context: ToolContext) -> None:
        first = _payload(await generate_uuid({}, context))["uuid"]
        second = _payload(await generate_uuid({}, context))["uuid"]
        assert first != second


class TestTextStats:
    async def test_example(self, context: ToolContext) -> None:
        payload = _payload(await text_stats({"text": "Hello world. This is a test."}, context))
        assert payload == {
            "characters": 28,
            "words": 6,
            "sentences": 2,
            "averageWordLength": 3.83,
        }

    async def test_length_counts_utf16_units(self, context: ToolContext) -> None:
        result = await text_stats({"text": "\U0001F600" * 25_001}, context)
        assert result.is_error is True

    async def test_empty_is_in_band_error(self, context: ToolContext) -> None:
        result = await text_stats({"text": ""}, context)
        assert result.is_error is True

    def test_whitespace_only(self) -> None:
        stats = compute_text_stats("   \n\t ")
        assert stats["words"] == 0
        assert stats["sentences"] == 0
        assert stats["averageWordLength"] == 0

    def test_punctuation_runs_are_one_break(self) -> None:
        assert compute_text_stats("Wait... what?! Yes.")["sentences"] == 3

    def test_characters_count_utf16_units(self) -> None:
        assert compute_text_stats("a\U0001F600")["characters"] == 3
