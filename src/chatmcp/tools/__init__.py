"""Tool catalog — registry, utility tools and memory tools."""

from chatmcp.tools.registry import Tool, ToolContext, ToolRegistry, build_registry

__all__ = ["Tool", "ToolContext", "ToolRegistry", "build_registry"]
