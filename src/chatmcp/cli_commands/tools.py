"""``chatmcp tools`` — list and invoke tools in-process."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import click

from chatmcp.cli_commands._output import console, print_tool_result, print_tools_table


@click.group()
def tools() -> None:
    """List and invoke tools."""


@tools.command("list")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print raw definitions.")
def list_tools(as_json: bool) -> None:
    """List the tools the server exposes."""
    from chatmcp.tools.registry import build_registry

    definitions = build_registry().list_definitions()
    if as_json:
        console.print_json(json.dumps([d.to_wire() for d in definitions]))
        return
    print_tools_table(definitions)


@tools.command("call")
@click.argument("name")
@click.option("--args", "raw_args", default="{}", help="Tool arguments as a JSON object.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML settings file.",
)
def call(name: str, raw_args: str, config_path: str | None) -> None:
    """Invoke tool NAME once and print its result."""
    from chatmcp.config import ConfigError, load_settings
    from chatmcp.protocol.errors import InvalidParamsError
    from chatmcp.storage.provider import StoreProvider
    from chatmcp.tools.registry import ToolContext, build_registry

    try:
        arguments: Any = json.loads(raw_args)
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid --args JSON:[/red] {exc}")
        return

    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        return

    registry = build_registry(ToolContext(store=StoreProvider.from_settings(settings)))
    if not registry.exists(name):
        console.print(f"[red]Unknown tool:[/red] {name}")
        return

    async def _call() -> Any:
        try:
            return await registry.dispatch(name, arguments)
        finally:
            await registry.context.store.aclose()

    try:
        result = asyncio.run(_call())
    except InvalidParamsError as exc:
        console.print(f"[red]Invalid params:[/red] {exc.detail}")
        return

    print_tool_result(result)
