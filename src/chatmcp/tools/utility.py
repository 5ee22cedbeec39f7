"""Utility tools — echo, clock, arithmetic, UUIDs and text statistics.

Argument violations are reported in-band as ``isError`` results.
"""

from __future__ import annotations

import math
import re
import sys
import uuid
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError

from chatmcp.protocol.errors import describe_violations
from chatmcp.protocol.models import ToolDefinition, ToolResult
from chatmcp.tools._fields import bounded_text, utf16_len
from chatmcp.tools.registry import Tool

if TYPE_CHECKING:
    from chatmcp.tools.registry import ToolContext

Number = StrictInt | Annotated[float, Field(strict=True, allow_inf_nan=False)]
EchoText = bounded_text(1, 10_000)
StatsText = bounded_text(1, 50_000)

_SENTENCE_BREAK = re.compile(r"[.!?]+")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLISECOND = timedelta(milliseconds=1)

# ---------------------------------------------------------------------------
# Input models
# ---------------------------------------------------------------------------


class EchoInput(BaseModel):
    model_config = ConfigDict(strict=True)

    text: EchoText


class CalculateInput(BaseModel):
    model_config = ConfigDict(strict=True)

    operation: Literal["add", "subtract", "multiply", "divide"]
    a: Number
    b: Number


class TextStatsInput(BaseModel):
    model_config = ConfigDict(strict=True)

    text: StatsText


def _invalid(exc: ValidationError) -> ToolResult:
    return ToolResult.failure(f"Invalid input: {describe_violations(exc)}")


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def echo(arguments: Any, context: ToolContext) -> ToolResult:
    try:
        args = EchoInput.model_validate(arguments)
    except ValidationError as exc:
        return _invalid(exc)
    return ToolResult.from_payload({"text": args.text})


async def get_current_time(arguments: Any, context: ToolContext) -> ToolResult:
    now = datetime.now(timezone.utc)
    return ToolResult.from_payload({
        "utc": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        "timestamp": (now - _EPOCH) // _MILLISECOND,
    })


async def calculate(arguments: Any, context: ToolContext) -> ToolResult:
    try:
        args = CalculateInput.model_validate(arguments)
    except ValidationError as exc:
        return _invalid(exc)

    a, b = args.a, args.b
    if args.operation == "divide" and b == 0:
        return ToolResult.failure("Division by zero")
    try:
        result = _apply(args.operation, a, b)
    except OverflowError:
        # int operands beyond double range
        return ToolResult.failure("Result is not a finite number")

    # ints compare exactly against the double range, so check magnitude first
    if abs(result) > sys.float_info.max or not math.isfinite(result):
        return ToolResult.failure("Result is not a finite number")

    return ToolResult.from_payload({"operation": args.operation, "a": a, "b": b, "result": result})


def _apply(operation: str, a: float, b: float) -> float:
    if operation == "add":
        return a + b
    if operation == "subtract":
        return a - b
    if operation == "multiply":
        return a * b
    return a / b


async def generate_uuid(arguments: Any, context: ToolContext) -> ToolResult:
    # uuid4 draws from os.urandom; version and variant bits are fixed by the stdlib.
    return ToolResult.from_payload({"uuid": str(uuid.uuid4())})


async def text_stats(arguments: Any, context: ToolContext) -> ToolResult:
    try:
        args = TextStatsInput.model_validate(arguments)
    except ValidationError as exc:
        return _invalid(exc)
    return ToolResult.from_payload(compute_text_stats(args.text))


def compute_text_stats(text: str) -> dict[str, Any]:
    """Character, word and sentence counts plus mean word length.

    Lengths are measured in UTF-16 code units so that counts agree with
    JavaScript clients.
    """
    words = text.split()
    sentences = [s for s in _SENTENCE_BREAK.split(text) if s.strip()]
    average = round(sum(utf16_len(w) for w in words) / len(words), 2) if words else 0
    return {
        "characters": utf16_len(text),
        "words": len(words),
        "sentences": len(sentences),
        "averageWordLength": average,
    }


# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------

_NO_ARGS: dict[str, Any] = {"type": "object", "properties": {}, "required": []}

UTILITY_TOOLS: list[Tool] = [
    Tool(
        ToolDefinition(
            name="echo",
            description="Returns the input text back. Useful for testing connectivity.",
            input_schema={
                "type": "object",
                "properties": {
                    "text": {
                        "type": "string",
                        "description": "The text to echo back",
                        "minLength": 1,
                        "maxLength": 10000,
                    },
                },
                "required": ["text"],
            },
        ),
        echo,
    ),
    Tool(
        ToolDefinition(
            name="get_current_time",
            description="Returns the current UTC timestamp in ISO 8601 format.",
            input_schema=_NO_ARGS,
        ),
        get_current_time,
    ),
    Tool(
        ToolDefinition(
            name="calculate",
            description="Performs basic arithmetic operations: add, subtract, multiply, divide.",
            input_schema={
                "type": "object",
                "properties": {
                    "operation": {
                        "type": "string",
                        "enum": ["add", "subtract", "multiply", "divide"],
                        "description": "The arithmetic operation to perform",
                    },
                    "a": {"type": "number", "description": "First operand"},
                    "b": {"type": "number", "description": "Second operand"},
                },
                "required": ["operation", "a", "b"],
            },
        ),
        calculate,
    ),
    Tool(
        ToolDefinition(
            name="generate_uuid",
            description="Generates a random UUID v4.",
            input_schema=_NO_ARGS,
        ),
        generate_uuid,
    ),
    Tool(
        ToolDefinition(
            name="text_stats",
            description=(
                "Analyzes text and returns statistics: character count, word count, "
                "sentence count, and average word length."
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "text": {
                        "type": "string",
                        "description": "The text to analyze",
                        "minLength": 1,
                        "maxLength": 50000,
                    },
                },
                "required": ["text"],
            },
        ),
        text_stats,
    ),
]
