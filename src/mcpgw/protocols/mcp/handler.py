"""MCPHandler: validates JSON-RPC 2.0 messages and dispatches MCP methods.

Every outcome, including malformed requests and unexpected failures, is
returned as a JSON-RPC response dict. The handler never raises.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from mcpgw.errors import (
    GatewayError,
    InternalError,
    InvalidParamsError,
    MethodNotFoundError,
    ProtocolValidationError,
)
from mcpgw.protocols.mcp.models import (
    JSONRPC_VERSION,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPMethod,
    RequestId,
    ServerInfo,
)
from mcpgw.protocols.prompts import PromptRegistry
from mcpgw.protocols.registry import ToolRegistry, render_result
from mcpgw.protocols.resources import ResourceReader
from mcpgw.utils.telemetry import ATTR_METHOD, get_tracer, record_error

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

MethodHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]

SERVER_CAPABILITIES: dict[str, Any] = {
    "tools": {},
    "resources": {},
    "prompts": {},
    "completions": {},
}


class MCPHandler:
    """Serves MCP over JSON-RPC from the gateway's registries.

    Usage::

        handler = MCPHandler(tools, resources=reader, prompts=prompts)
        response = await handler.handle({"jsonrpc": "2.0", "id": 1, "method": "tools/list"})
    """

    def __init__(
        self,
        tools: ToolRegistry,
        *,
        resources: ResourceReader | None = None,
        prompts: PromptRegistry | None = None,
        server_info: ServerInfo | None = None,
    ) -> None:
        self._tools = tools
        self._resources = resources or ResourceReader()
        self._prompts = prompts or PromptRegistry()
        self._server_info = server_info or ServerInfo()
        self._handlers: dict[MCPMethod, MethodHandler] = {
            MCPMethod.INITIALIZE: self._initialize,
            MCPMethod.INITIALIZED: self._empty,
            MCPMethod.NOTIFICATIONS_INITIALIZED: self._empty,
            MCPMethod.PING: self._empty,
            MCPMethod.TOOLS_LIST: self._tools_list,
            MCPMethod.TOOLS_CALL: self._tools_call,
            MCPMethod.RESOURCES_LIST: self._resources_list,
            MCPMethod.RESOURCES_TEMPLATES_LIST: self._resources_templates_list,
            MCPMethod.RESOURCES_READ: self._resources_read,
            MCPMethod.RESOURCES_SUBSCRIBE: self._resources_subscribe,
            MCPMethod.RESOURCES_UNSUBSCRIBE: self._resources_subscribe,
            MCPMethod.PROMPTS_LIST: self._prompts_list,
            MCPMethod.PROMPTS_GET: self._prompts_get,
            MCPMethod.COMPLETION_COMPLETE: self._completion_complete,
        }
        missing = set(MCPMethod) - set(self._handlers)
        if missing:
            msg = f"No handler for MCP methods: {sorted(m.value for m in missing)}"
            raise RuntimeError(msg)

    async def handle(self, payload: Any) -> dict[str, Any]:
        """Validate *payload*, dispatch it, and return the response envelope."""
        request_id = _echo_id(payload)
        with _tracer.start_as_current_span("mcp.dispatch") as span:
            try:
                request = self.validate(payload)
                span.set_attribute(ATTR_METHOD, request.method)
                result = await self._dispatch(request)
            except GatewayError as exc:
                record_error(span, exc)
                logger.debug("MCP request failed: %s (%d)", exc.message, exc.code)
                return _error_response(request_id, exc)
            except Exception as exc:
                logger.exception("Unhandled error while dispatching MCP request")
                error = InternalError(f"Internal error: {exc}")
                record_error(span, error)
                return _error_response(request_id, error)
            return JsonRpcResponse.success(request.id, result).to_wire()

    @staticmethod
    def validate(payload: Any) -> JsonRpcRequest:
        """Check the JSON-RPC 2.0 envelope shape.

        Raises:
            ProtocolValidationError: Any structural violation (-32600).
        """
        if not isinstance(payload, dict):
            raise ProtocolValidationError("Invalid Request: expected a JSON object")
        if payload.get("jsonrpc") != JSONRPC_VERSION:
            raise ProtocolValidationError('Invalid Request: "jsonrpc" must be exactly "2.0"')
        method = payload.get("method")
        if not isinstance(method, str) or not method:
            raise ProtocolValidationError('Invalid Request: "method" must be a non-empty string')
        params = payload.get("params")
        if params is not None and not isinstance(params, (dict, list)):
            raise ProtocolValidationError('Invalid Request: "params" must be an object or array')
        request_id = payload.get("id")
        if request_id is not None and _echo_id(payload) is None:
            raise ProtocolValidationError('Invalid Request: "id" must be a string or number')
        return JsonRpcRequest(method=method, params=params, id=request_id)

    async def _dispatch(self, request: JsonRpcRequest) -> dict[str, Any]:
        method = MCPMethod.lookup(request.method)
        if method is None:
            raise MethodNotFoundError(
                f"Method not found: {request.method}", data={"method": request.method}
            )
        return await self._handlers[method](request.named_params)

    # -- lifecycle -----------------------------------------------------------

    async def _initialize(self, params: dict[str, Any]) -> dict[str, Any]:
        requested = params.get("protocolVersion")
        version = requested if isinstance(requested, str) and requested else None
        return {
            "protocolVersion": version or self._server_info.protocol_version,
            "capabilities": SERVER_CAPABILITIES,
            "serverInfo": {
                "name": self._server_info.name,
                "version": self._server_info.version,
            },
        }

    async def _empty(self, params: dict[str, Any]) -> dict[str, Any]:
        return {}

    # -- tools ---------------------------------------------------------------

    async def _tools_list(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"tools": [d.to_mcp() for d in self._tools.definitions()]}

    async def _tools_call(self, params: dict[str, Any]) -> dict[str, Any]:
        name = _require_str(params, "name")
        arguments = params.get("arguments")
        result = await self._tools.execute(name, {} if arguments is None else arguments)
        return {
            "content": [{"type": "text", "text": render_result(result)}],
            "isError": False,
        }

    # -- resources -----------------------------------------------------------

    async def _resources_list(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"resources": [d.to_mcp() for d in self._resources.list_resources()]}

    async def _resources_templates_list(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"resourceTemplates": [d.to_mcp() for d in self._resources.list_templates()]}

    async def _resources_read(self, params: dict[str, Any]) -> dict[str, Any]:
        uri = _require_str(params, "uri")
        content = await self._resources.read(uri)
        return {"contents": [content.to_mcp()]}

    async def _resources_subscribe(self, params: dict[str, Any]) -> dict[str, Any]:
        raise MethodNotFoundError(
            "Resource subscriptions are not supported: resources are read on demand"
        )

    # -- prompts -------------------------------------------------------------

    async def _prompts_list(self, params: dict[str, Any]) -> dict[str, Any]:
        return {"prompts": [d.to_mcp() for d in self._prompts.definitions()]}

    async def _prompts_get(self, params: dict[str, Any]) -> dict[str, Any]:
        name = _require_str(params, "name")
        arguments = params.get("arguments")
        if arguments is not None and not isinstance(arguments, dict):
            raise InvalidParamsError('Invalid params: "arguments" must be an object')
        return self._prompts.render(name, arguments)

    async def _completion_complete(self, params: dict[str, Any]) -> dict[str, Any]:
        ref = params.get("ref")
        if not isinstance(ref, dict) or ref.get("type") != "ref/prompt":
            raise InvalidParamsError(
                'Invalid params: only "ref/prompt" completion references are supported'
            )
        prompt_name = _require_str(ref, "name")
        argument = params.get("argument")
        if not isinstance(argument, dict):
            raise InvalidParamsError('Invalid params: "argument" must be an object')
        arg_name = _require_str(argument, "name")
        value = argument.get("value", "")
        if not isinstance(value, str):
            raise InvalidParamsError('Invalid params: "argument.value" must be a string')
        return {"completion": self._prompts.complete(prompt_name, arg_name, value)}


def _echo_id(payload: Any) -> RequestId:
    """Return the request id when it is a string or number, else ``None``."""
    if not isinstance(payload, dict):
        return None
    request_id = payload.get("id")
    if isinstance(request_id, bool):
        return None
    if isinstance(request_id, (str, int, float)):
        return request_id
    return None


def _require_str(params: dict[str, Any], key: str) -> str:
    value = params.get(key)
    if not isinstance(value, str) or not value:
        raise InvalidParamsError(f'Invalid params: "{key}" is required', data={"param": key})
    return value


def _error_response(request_id: RequestId, exc: GatewayError) -> dict[str, Any]:
    return JsonRpcResponse.failure(request_id, exc.code, exc.message, exc.data).to_wire()
