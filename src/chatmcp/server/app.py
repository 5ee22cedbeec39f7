"""HTTP transport — FastAPI application serving JSON-RPC over POST.

One JSON-RPC request per HTTP request. JSON-RPC errors are a payload
concern and ride on HTTP 200; only transport-level failures (bad HTTP
method, unparseable or malformed envelope) change the status code.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from chatmcp import SERVER_NAME, __version__
from chatmcp.config import ServerSettings, load_settings
from chatmcp.protocol.dispatcher import McpDispatcher
from chatmcp.protocol.envelope import parse_body, validate_envelope
from chatmcp.protocol.errors import ErrorCode, ProtocolError
from chatmcp.protocol.models import JsonRpcResponse
from chatmcp.protocol.responses import failure, from_error
from chatmcp.storage.provider import StoreProvider
from chatmcp.tools.registry import ToolContext, ToolRegistry, build_registry

logger = logging.getLogger(__name__)

RPC_PATHS = ("/mcp", "/")

_HEALTH_CORS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def cors_headers(allowed_origins: list[str], origin: str | None) -> dict[str, str]:
    """CORS headers for the RPC endpoint.

    Echoes *origin* when it is allowed, otherwise the first allowed origin.
    """
    if origin and origin in allowed_origins:
        allow_origin = origin
    else:
        allow_origin = allowed_origins[0] if allowed_origins else "*"
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": "POST, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type, Authorization",
        "Access-Control-Allow-Credentials": "true",
    }


def create_app(
    settings: ServerSettings | None = None,
    *,
    registry: ToolRegistry | None = None,
) -> FastAPI:
    """Build the ASGI application.

    When *registry* is omitted the full tool catalog is built around a
    :class:`StoreProvider` derived from *settings*.
    """
    settings = settings or load_settings()
    if registry is None:
        registry = build_registry(ToolContext(store=StoreProvider.from_settings(settings)))
    dispatcher = McpDispatcher(registry)
    started = time.monotonic()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("%s %s starting (storage=%s)", SERVER_NAME, __version__, settings.storage)
        yield
        await registry.context.store.aclose()
        logger.info("%s stopped.", SERVER_NAME)

    app = FastAPI(title=SERVER_NAME, version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.dispatcher = dispatcher

    def _rpc_response(
        status_code: int, response: JsonRpcResponse, headers: dict[str, str]
    ) -> JSONResponse:
        return JSONResponse(content=response.to_wire(), status_code=status_code, headers=headers)

    async def preflight(request: Request) -> Response:
        headers = cors_headers(settings.allowed_origins, request.headers.get("origin"))
        return Response(status_code=204, headers=headers)

    async def rpc(request: Request) -> Response:
        headers = cors_headers(settings.allowed_origins, request.headers.get("origin"))
        body = await request.body()
        try:
            rpc_request = validate_envelope(parse_body(body))
        except ProtocolError as exc:
            logger.info("Rejected request envelope: %s", exc.message)
            return _rpc_response(400, from_error(None, exc), headers)

        response = await dispatcher.dispatch(rpc_request)
        if response is None:
            return Response(status_code=204, headers=headers)
        return _rpc_response(200, response, headers)

    async def method_not_allowed(request: Request) -> Response:
        headers = cors_headers(settings.allowed_origins, request.headers.get("origin"))
        response = failure(None, ErrorCode.INVALID_REQUEST, "Method not allowed")
        return _rpc_response(405, response, headers)

    for path in RPC_PATHS:
        app.add_api_route(path, rpc, methods=["POST"], include_in_schema=False)
        app.add_api_route(path, preflight, methods=["OPTIONS"], include_in_schema=False)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException) -> Response:
        # Any verb other than POST and OPTIONS on an RPC path.
        if exc.status_code == 405 and request.url.path in RPC_PATHS:
            return await method_not_allowed(request)
        return await http_exception_handler(request, exc)

    @app.get("/health")
    async def health() -> JSONResponse:
        """Process status probe; not part of the JSON-RPC surface."""
        status = {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace(
                "+00:00", "Z"
            ),
            "server": SERVER_NAME,
            "version": __version__,
            "uptime": round(time.monotonic() - started, 3),
        }
        return JSONResponse(content=status, headers=_HEALTH_CORS)

    return app
