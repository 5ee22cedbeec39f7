"""Envelope validation — raw body to a well-formed :class:`JsonRpcRequest`.

Parsing and structural validation are separate steps so that the caller can
map each to its own error code (``PARSE_ERROR`` vs ``INVALID_REQUEST``).
"""

from __future__ import annotations

import json
import math
from typing import Any

from pydantic import ValidationError

from chatmcp.protocol.errors import InvalidRequestError, ParseError, violations_from
from chatmcp.protocol.models import JsonRpcRequest


def _reject_constant(name: str) -> Any:
    raise ParseError(f"{name} is not valid JSON")


def _finite_float(text: str) -> float:
    value = float(text)
    if not math.isfinite(value):
        raise ParseError(f"{text} is out of range for a double")
    return value


def parse_body(raw: bytes | str | None) -> Any:
    """Decode a request body into a Python value.

    An empty body decodes as an empty object, which then fails envelope
    validation rather than parsing.

    Raises:
        ParseError: If the body is not UTF-8 or not valid JSON. The
            non-standard literals ``NaN`` and ``Infinity`` are rejected, as are
            numbers that overflow a double.
    """
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError(str(exc)) from exc
    if raw is None or not raw.strip():
        return {}
    try:
        return json.loads(raw, parse_constant=_reject_constant, parse_float=_finite_float)
    except ValueError as exc:
        # JSONDecodeError, or an integer literal past the int-to-str digit limit
        raise ParseError(str(exc)) from exc


def validate_envelope(payload: Any) -> JsonRpcRequest:
    """Check *payload* against the JSON-RPC 2.0 request shape.

    Raises:
        InvalidRequestError: With the list of violations attached as ``data``.
    """
    try:
        return JsonRpcRequest.model_validate(payload)
    except ValidationError as exc:
        raise InvalidRequestError(violations_from(exc)) from exc
