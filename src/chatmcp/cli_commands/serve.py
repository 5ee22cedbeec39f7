"""``chatmcp serve`` — run the HTTP server with uvicorn."""

from __future__ import annotations

import logging

import click

from chatmcp.cli_commands._output import console


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML settings file.",
)
@click.option("--host", default=None, help="Bind address (overrides settings).")
@click.option("--port", type=int, default=None, help="Bind port (overrides settings).")
@click.option(
    "--storage",
    type=click.Choice(["postgrest", "memory"]),
    default=None,
    help="Storage backend (overrides settings).",
)
def serve(
    config_path: str | None,
    host: str | None,
    port: int | None,
    storage: str | None,
) -> None:
    """Serve JSON-RPC on /mcp and a health probe on /health."""
    from chatmcp.config import ConfigError, load_settings
    from chatmcp.server.app import create_app
    from chatmcp.utils.telemetry import configure_telemetry

    try:
        settings = load_settings(config_path)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        raise SystemExit(1) from exc

    overrides = {"host": host, "port": port, "storage": storage}
    settings = settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if settings.otlp_endpoint:
        try:
            configure_telemetry(otlp_endpoint=settings.otlp_endpoint)
        except ImportError as exc:
            console.print(f"[yellow]Tracing disabled:[/yellow] {exc}")

    import uvicorn

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
