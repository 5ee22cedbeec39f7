"""Protocol layer — JSON-RPC 2.0 envelope, MCP models and the method dispatcher."""

from chatmcp.protocol.dispatcher import McpDispatcher
from chatmcp.protocol.envelope import parse_body, validate_envelope
from chatmcp.protocol.errors import (
    ErrorCode,
    InvalidParamsError,
    InvalidRequestError,
    ParseError,
    ProtocolError,
)
from chatmcp.protocol.models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    McpMethod,
    ToolContent,
    ToolDefinition,
    ToolResult,
)

__all__ = [
    "ErrorCode",
    "InvalidParamsError",
    "InvalidRequestError",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "McpDispatcher",
    "McpMethod",
    "ParseError",
    "ProtocolError",
    "ToolContent",
    "ToolDefinition",
    "ToolResult",
    "parse_body",
    "validate_envelope",
]
