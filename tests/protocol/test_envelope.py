"""Tests for request body parsing and envelope validation."""

from __future__ import annotations

import pytest

from chatmcp.protocol.envelope import parse_body, validate_envelope
from chatmcp.protocol.errors import ErrorCode, InvalidRequestError, ParseError


class TestParseBody:
    def test_object(self) -> None:
        assert parse_body(b'{"a": 1}') == {"a": 1}

    def test_str_input(self) -> None:
        assert parse_body('[1, 2]') == [1, 2]

    def test_empty_body_is_empty_object(self) -> None:
        assert parse_body(b"") == {}
        assert parse_body(None) == {}

    def test_invalid_json(self) -> None:
        with pytest.raises(ParseError) as exc_info:
            parse_body(b"{not json")
        assert exc_info.value.code is ErrorCode.PARSE_ERROR
        assert exc_info.value.message == "Invalid JSON"

    def test_invalid_utf8(self) -> None:
        with pytest.raises(ParseError):
            parse_body(b"\xff\xfe{")

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    def test_non_standard_constants_rejected(self, literal: str) -> None:
        body = f'{{"jsonrpc": "2.0", "id": {literal}, "method": "ping"}}'
        with pytest.raises(ParseError) as exc_info:
            parse_body(body.encode())
        assert exc_info.value.code is ErrorCode.PARSE_ERROR
        assert literal in exc_info.value.data

    def test_overflowing_number_rejected(self) -> None:
        with pytest.raises(ParseError):
            parse_body(b'{"jsonrpc": "2.0", "id": 1e400, "method": "ping"}')

    def test_integer_past_digit_limit_rejected(self) -> None:
        with pytest.raises(ParseError):
            parse_body(b'{"id": ' + b"9" * 5000 + b"}")

    def test_large_finite_number_accepted(self) -> None:
        assert parse_body(b'{"a": 1e300}') == {"a": 1e300}


class TestValidateEnvelope:
    def test_valid(self) -> None:
        req = validate_envelope({"jsonrpc": "2.0", "method": "tools/list", "id": 1})
        assert req.method == "tools/list"

    def test_missing_method(self) -> None:
        with pytest.raises(InvalidRequestError) as exc_info:
            validate_envelope({"jsonrpc": "2.0", "id": 1})
        err = exc_info.value
        assert err.code is ErrorCode.INVALID_REQUEST
        assert err.message == "Invalid JSON-RPC request"
        assert any(v["path"] == ["method"] for v in err.violations)

    def test_batch_rejected(self) -> None:
        with pytest.raises(InvalidRequestError):
            validate_envelope([{"jsonrpc": "2.0", "method": "ping", "id": 1}])

    def test_empty_object_rejected(self) -> None:
        with pytest.raises(InvalidRequestError):
            validate_envelope(parse_body(b""))
