"""McpDispatcher — routes validated JSON-RPC requests to protocol methods.

The dispatcher is state-free: every call depends only on the request and
the fixed :class:`~chatmcp.tools.registry.ToolRegistry`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from chatmcp import SERVER_NAME, __version__
from chatmcp.protocol.errors import ErrorCode, InvalidParamsError
from chatmcp.protocol.models import (
    PROTOCOL_VERSION,
    InitializeResult,
    JsonRpcRequest,
    JsonRpcResponse,
    McpMethod,
    ServerInfo,
)
from chatmcp.protocol.responses import failure, success
from chatmcp.utils.telemetry import (
    ATTR_RPC_ERROR_CODE,
    ATTR_RPC_ID,
    ATTR_RPC_METHOD,
    ATTR_TOOL_IS_ERROR,
    ATTR_TOOL_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from chatmcp.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)


class McpDispatcher:
    """Maps each :class:`McpMethod` to its handler and builds the response.

    Usage::

        dispatcher = McpDispatcher(build_registry(context))
        response = await dispatcher.dispatch(request)   # None for notifications
    """

    def __init__(
        self,
        registry: ToolRegistry,
        *,
        server_info: ServerInfo | None = None,
        protocol_version: str = PROTOCOL_VERSION,
    ) -> None:
        self._registry = registry
        self._server_info = server_info or ServerInfo(name=SERVER_NAME, version=__version__)
        self._protocol_version = protocol_version

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def dispatch(self, request: JsonRpcRequest) -> JsonRpcResponse | None:
        """Route *request*; notifications are acknowledged with ``None``."""
        if request.is_notification:
            logger.debug("Notification received: %s", request.method)
            return None

        with _tracer.start_as_current_span("rpc.dispatch") as span:
            span.set_attribute(ATTR_RPC_METHOD, request.method)
            span.set_attribute(ATTR_RPC_ID, str(request.id))

            response = await self._route(request)

            if response.error is not None:
                span.set_attribute(ATTR_RPC_ERROR_CODE, response.error.code)
            return response

    async def _route(self, request: JsonRpcRequest) -> JsonRpcResponse:
        try:
            method = McpMethod(request.method)
        except ValueError:
            return failure(
                request.id, ErrorCode.METHOD_NOT_FOUND, f"Method not found: {request.method}"
            )

        if method is McpMethod.INITIALIZE:
            return self._initialize(request)
        if method is McpMethod.TOOLS_LIST:
            return self._tools_list(request)
        if method is McpMethod.TOOLS_CALL:
            return await self._tools_call(request)
        return success(request.id, {})

    def _initialize(self, request: JsonRpcRequest) -> JsonRpcResponse:
        result = InitializeResult(
            protocol_version=self._protocol_version,
            server_info=self._server_info,
        )
        return success(request.id, result.model_dump(by_alias=True))

    def _tools_list(self, request: JsonRpcRequest) -> JsonRpcResponse:
        tools = [definition.to_wire() for definition in self._registry.list_definitions()]
        return success(request.id, {"tools": tools})

    async def _tools_call(self, request: JsonRpcRequest) -> JsonRpcResponse:
        params: dict[str, Any] = request.params or {}
        name = params.get("name")
        if not isinstance(name, str):
            return failure(
                request.id, ErrorCode.INVALID_PARAMS, "Missing required parameter: name"
            )
        if not self._registry.exists(name):
            return failure(request.id, ErrorCode.INVALID_PARAMS, f"Unknown tool: {name}")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}

        with _tracer.start_as_current_span("tool.call") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            try:
                result = await self._registry.dispatch(name, arguments)
            except InvalidParamsError as exc:
                logger.info("Invalid params for tool %s: %s", name, exc.detail)
                return failure(request.id, ErrorCode.INVALID_PARAMS, "Invalid params", exc.detail)
            except Exception as exc:
                logger.exception("Tool %s failed unexpectedly", name)
                return failure(request.id, ErrorCode.INTERNAL_ERROR, "Internal error", str(exc))

            span.set_attribute(ATTR_TOOL_IS_ERROR, bool(result.is_error))
        return success(request.id, result.to_wire())
