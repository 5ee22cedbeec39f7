"""chatmcp — JSON-RPC 2.0 MCP server exposing utility and memory tools."""

from __future__ import annotations

__version__ = "1.0.0"

SERVER_NAME = "chatmcp"
