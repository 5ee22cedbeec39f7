"""Tracing for the RPC path.

Spans are opened through the OpenTelemetry *API* only, so without an SDK
installed they cost nothing. :func:`configure_telemetry` wires an SDK
``TracerProvider`` for ``chatmcp serve`` when an OTLP endpoint is configured
(``pip install chatmcp[otel]``).

Usage::

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("tool.call") as span:
        span.set_attribute(ATTR_TOOL_NAME, "echo")
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

from chatmcp import SERVER_NAME, __version__

# Span attribute keys
ATTR_RPC_METHOD = "chatmcp.rpc.method"
ATTR_RPC_ID = "chatmcp.rpc.id"
ATTR_RPC_ERROR_CODE = "chatmcp.rpc.error_code"
ATTR_TOOL_NAME = "chatmcp.tool.name"
ATTR_TOOL_IS_ERROR = "chatmcp.tool.is_error"

_INSTRUMENTATION_NAME = SERVER_NAME

_SDK_HINT = "Install it with: pip install chatmcp[otel]"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Tracer for *name*; a no-op tracer until :func:`configure_telemetry` runs."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME, __version__)


def configure_telemetry(
    *,
    service_name: str = SERVER_NAME,
    otlp_endpoint: str | None = None,
    export_to_console: bool = False,
) -> None:
    """Install a global SDK tracer provider.

    Spans go to the OTLP/gRPC collector at *otlp_endpoint* (batched) and,
    when *export_to_console* is set, to stdout as they end.

    Raises:
        ImportError: If ``opentelemetry-sdk`` (or, for OTLP export,
            ``opentelemetry-exporter-otlp``) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = f"opentelemetry-sdk is required to export traces. {_SDK_HINT}"
        raise ImportError(msg) from exc

    resource = Resource.create({"service.name": service_name, "service.version": __version__})
    provider = TracerProvider(resource=resource)
    for processor in _span_processors(otlp_endpoint, export_to_console):
        provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)


def _span_processors(otlp_endpoint: str | None, export_to_console: bool) -> list[Any]:
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    processors: list[Any] = []
    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            msg = f"opentelemetry-exporter-otlp is required for OTLP export. {_SDK_HINT}"
            raise ImportError(msg) from exc
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    if export_to_console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter()))
    return processors
