"""chatmcp CLI entrypoint."""

from __future__ import annotations

import click

from chatmcp import __version__


@click.group()
@click.version_option(version=__version__, prog_name="chatmcp")
def main() -> None:
    """chatmcp — JSON-RPC MCP server with utility and memory tools."""


# Register subcommands
from chatmcp.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
