"""Pure constructors for JSON-RPC success and error envelopes."""

from __future__ import annotations

from typing import Any

from chatmcp.protocol.errors import ProtocolError
from chatmcp.protocol.models import JsonRpcError, JsonRpcResponse, RequestId


def success(request_id: RequestId, result: Any) -> JsonRpcResponse:
    """Build a response carrying *result*."""
    return JsonRpcResponse(id=request_id, result=result)


def failure(
    request_id: RequestId,
    code: int,
    message: str,
    data: Any = None,
) -> JsonRpcResponse:
    """Build a response carrying an error object."""
    return JsonRpcResponse(
        id=request_id,
        error=JsonRpcError(code=int(code), message=message, data=data),
    )


def from_error(request_id: RequestId, exc: ProtocolError) -> JsonRpcResponse:
    """Build an error response from a :class:`ProtocolError`."""
    return failure(request_id, exc.code, exc.message, exc.data)
