"""Protocol-level error types and the JSON-RPC error code vocabulary."""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pydantic import ValidationError

_VALUE_ERROR_PREFIX = "Value error, "


class ErrorCode(IntEnum):
    """Fixed JSON-RPC 2.0 error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class ProtocolError(Exception):
    """Base error for failures that surface as a JSON-RPC ``error`` object."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, data: Any = None) -> None:
        self.message = message
        self.data = data
        super().__init__(message)


class ParseError(ProtocolError):
    """The request body is not valid JSON."""

    code = ErrorCode.PARSE_ERROR

    def __init__(self, detail: str = "") -> None:
        super().__init__("Invalid JSON", data=detail or None)


class InvalidRequestError(ProtocolError):
    """The decoded payload is not a well-formed JSON-RPC request."""

    code = ErrorCode.INVALID_REQUEST

    def __init__(self, violations: list[dict[str, Any]] | None = None) -> None:
        self.violations = violations or []
        super().__init__("Invalid JSON-RPC request", data=self.violations or None)


class InvalidParamsError(ProtocolError):
    """Tool arguments failed validation and must escalate to ``INVALID_PARAMS``."""

    code = ErrorCode.INVALID_PARAMS

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


def violations_from(exc: ValidationError) -> list[dict[str, Any]]:
    """Flatten a pydantic ``ValidationError`` into JSON-safe violation records."""
    records: list[dict[str, Any]] = []
    for err in exc.errors(include_url=False):
        message = err["msg"]
        # Messages raised from our own validators arrive as "Value error, <text>".
        if err["type"] == "value_error" and message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        records.append({"path": list(err["loc"]), "message": message, "type": err["type"]})
    return records


def describe_violations(exc: ValidationError) -> str:
    """Render violations as a single comma-separated message."""
    parts: list[str] = []
    for violation in violations_from(exc):
        path = ".".join(str(p) for p in violation["path"])
        parts.append(f"{path}: {violation['message']}" if path else violation["message"])
    return ", ".join(parts)
