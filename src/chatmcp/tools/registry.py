"""ToolRegistry — the fixed catalog of tools and their handlers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any, NoReturn

from chatmcp.protocol.models import ToolDefinition, ToolResult
from chatmcp.storage.errors import StorageConfigError
from chatmcp.storage.provider import StoreProvider


def _unconfigured_store() -> NoReturn:
    raise StorageConfigError("No storage backend configured")


@dataclass(frozen=True)
class ToolContext:
    """Collaborators handed to every tool handler."""

    store: StoreProvider = field(default_factory=lambda: StoreProvider(_unconfigured_store))


ToolHandler = Callable[[Any, ToolContext], Awaitable[ToolResult]]


@dataclass(frozen=True)
class Tool:
    """A tool definition paired with the handler that implements it."""

    definition: ToolDefinition
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.definition.name


class ToolRegistry:
    """Maintains the name-to-tool map and dispatches tool calls.

    Content is fixed at construction; there is no dynamic registration.

    Usage::

        registry = ToolRegistry([*UTILITY_TOOLS, *MEMORY_TOOLS], context=ctx)

        registry.list_definitions()                    # ordered, for tools/list
        result = await registry.dispatch("echo", {"text": "hi"})
    """

    def __init__(self, tools: Iterable[Tool], *, context: ToolContext | None = None) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                msg = f"Duplicate tool name: {tool.name}"
                raise ValueError(msg)
            self._tools[tool.name] = tool
        self._context = context or ToolContext()

    @property
    def context(self) -> ToolContext:
        return self._context

    def list_definitions(self) -> list[ToolDefinition]:
        """Return all tool definitions in registration order."""
        return [tool.definition for tool in self._tools.values()]

    def names(self) -> list[str]:
        return list(self._tools)

    def exists(self, name: str) -> bool:
        return name in self._tools

    async def dispatch(self, name: str, arguments: Any) -> ToolResult:
        """Invoke the named tool, or return an in-band error for an unknown name.

        Exceptions raised by the handler propagate to the caller.
        """
        tool = self._tools.get(name)
        if tool is None:
            return ToolResult.failure(f"Unknown tool: {name}")
        return await tool.handler(arguments, self._context)


def build_registry(context: ToolContext | None = None) -> ToolRegistry:
    """Build the registry holding every tool the server exposes."""
    from chatmcp.tools.memory import MEMORY_TOOLS
    from chatmcp.tools.utility import UTILITY_TOOLS

    return ToolRegistry([*UTILITY_TOOLS, *MEMORY_TOOLS], context=context)
