"""MCP models — JSON-RPC 2.0 messages, tool definitions and tool results.

Implements the message format used by the Model Context Protocol for
server initialization, tool discovery (``tools/list``) and execution
(``tools/call``).
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"

RequestId = str | int | float | None

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class McpMethod(str, Enum):
    """Protocol methods the server routes."""

    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    PING = "ping"


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message.

    An absent or ``null`` ``id`` marks a notification.
    """

    model_config = ConfigDict(strict=True)

    jsonrpc: Literal["2.0"]
    method: str
    id: RequestId = None
    params: dict[str, Any] | None = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message carrying either ``result`` or ``error``."""

    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    id: RequestId = None
    result: Any = None
    error: JsonRpcError | None = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> JsonRpcResponse:
        if (self.result is None) == (self.error is None):
            msg = "a response carries exactly one of 'result' or 'error'"
            raise ValueError(msg)
        return self

    def to_wire(self) -> dict[str, Any]:
        """Render the envelope as sent on the wire."""
        wire: dict[str, Any] = {"jsonrpc": self.jsonrpc, "id": self.id}
        if self.error is not None:
            wire["error"] = self.error.model_dump(exclude_none=True)
        else:
            wire["result"] = self.result
        return wire


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class ServerInfo(BaseModel):
    name: str
    version: str


class InitializeResult(BaseModel):
    """Result of the ``initialize`` handshake."""

    model_config = ConfigDict(populate_by_name=True)

    protocol_version: str = Field(default=PROTOCOL_VERSION, alias="protocolVersion")
    capabilities: dict[str, Any] = Field(
        default_factory=lambda: {"tools": {"listChanged": False}}
    )
    server_info: ServerInfo = Field(alias="serverInfo")


class ToolDefinition(BaseModel):
    """A tool definition as returned by ``tools/list``."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(alias="inputSchema")

    @model_validator(mode="after")
    def _check_schema(self) -> ToolDefinition:
        schema = self.input_schema
        if schema.get("type") != "object":
            msg = f"inputSchema for '{self.name}' must describe an object"
            raise ValueError(msg)
        properties = schema.get("properties")
        if not isinstance(properties, dict):
            msg = f"inputSchema for '{self.name}' must declare 'properties'"
            raise ValueError(msg)
        missing = [req for req in schema.get("required", []) if req not in properties]
        if missing:
            msg = f"inputSchema for '{self.name}' requires undeclared properties: {missing}"
            raise ValueError(msg)
        return self

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ToolContent(BaseModel):
    """A single content part of a tool result."""

    model_config = ConfigDict(populate_by_name=True)

    type: Literal["text", "image", "resource"] = "text"
    text: str | None = None
    data: str | None = None
    mime_type: str | None = Field(default=None, alias="mimeType")


class ToolResult(BaseModel):
    """The result of executing a tool.

    ``is_error`` marks an in-band domain failure; it never turns into a
    JSON-RPC ``error``.
    """

    model_config = ConfigDict(populate_by_name=True)

    content: list[ToolContent] = []
    is_error: bool | None = Field(default=None, alias="isError")

    @classmethod
    def from_text(cls, text: str) -> ToolResult:
        """Create a successful ToolResult with a single text content part."""
        return cls(content=[ToolContent(text=text)])

    @classmethod
    def from_payload(cls, payload: Any) -> ToolResult:
        """Create a successful ToolResult whose text is *payload* encoded as JSON."""
        return cls.from_text(json.dumps(payload))

    @classmethod
    def failure(cls, message: str) -> ToolResult:
        """Create an in-band error result."""
        return cls(content=[ToolContent(text=json.dumps({"error": message}))], is_error=True)

    @property
    def text(self) -> str:
        """Concatenated text of all text parts."""
        return "".join(part.text or "" for part in self.content if part.type == "text")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
