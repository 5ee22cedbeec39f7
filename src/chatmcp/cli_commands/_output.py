"""Shared CLI output formatters."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from chatmcp.protocol.models import ToolDefinition, ToolResult

console = Console()


def print_tools_table(definitions: list[ToolDefinition]) -> None:
    """Pretty-print tool definitions as a table."""
    table = Table(title="Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Required")
    table.add_column("Description")

    for definition in definitions:
        required = definition.input_schema.get("required", [])
        table.add_row(
            definition.name,
            ", ".join(required) or "-",
            _truncate(definition.description),
        )

    console.print(table)


def print_tool_result(result: ToolResult) -> None:
    """Print a tool result, decoding its JSON text payload when possible."""
    style = "red" if result.is_error else "green"
    console.print(f"[{style}]{'error' if result.is_error else 'ok'}[/{style}]")
    try:
        console.print_json(result.text)
    except json.JSONDecodeError:
        console.print(result.text)


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
