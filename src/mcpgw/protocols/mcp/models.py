"""MCP models: JSON-RPC 2.0 envelopes, the method table keys, and tool payloads."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

JSONRPC_VERSION = "2.0"
DEFAULT_PROTOCOL_VERSION = "2024-11-05"

RequestId = int | float | str | None

# ---------------------------------------------------------------------------
# JSON-RPC 2.0 envelope
# ---------------------------------------------------------------------------


class JsonRpcRequest(BaseModel):
    """A JSON-RPC 2.0 request message. ``id=None`` marks a notification."""

    jsonrpc: str = JSONRPC_VERSION
    method: str
    params: dict[str, Any] | list[Any] | None = None
    id: RequestId = None

    @property
    def named_params(self) -> dict[str, Any]:
        """Return ``params`` as a mapping (positional params yield ``{}``)."""
        return self.params if isinstance(self.params, dict) else {}


class JsonRpcError(BaseModel):
    """A JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    """A JSON-RPC 2.0 response message carrying exactly one of result/error."""

    jsonrpc: str = JSONRPC_VERSION
    id: RequestId = None
    result: Any = None
    error: JsonRpcError | None = None

    @classmethod
    def success(cls, request_id: RequestId, result: Any) -> JsonRpcResponse:
        return cls(id=request_id, result=result)

    @classmethod
    def failure(
        cls, request_id: RequestId, code: int, message: str, data: Any = None
    ) -> JsonRpcResponse:
        return cls(id=request_id, error=JsonRpcError(code=code, message=message, data=data))

    def to_wire(self) -> dict[str, Any]:
        """Render the envelope with only the applicable member present."""
        if self.error is not None:
            error: dict[str, Any] = {"code": self.error.code, "message": self.error.message}
            if self.error.data is not None:
                error["data"] = self.error.data
            return {"jsonrpc": self.jsonrpc, "error": error, "id": self.id}
        return {"jsonrpc": self.jsonrpc, "result": self.result, "id": self.id}


# ---------------------------------------------------------------------------
# MCP method table keys
# ---------------------------------------------------------------------------


class MCPMethod(str, Enum):
    """Every JSON-RPC method the gateway dispatches."""

    INITIALIZE = "initialize"
    INITIALIZED = "initialized"
    NOTIFICATIONS_INITIALIZED = "notifications/initialized"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    RESOURCES_LIST = "resources/list"
    RESOURCES_TEMPLATES_LIST = "resources/templates/list"
    RESOURCES_READ = "resources/read"
    RESOURCES_SUBSCRIBE = "resources/subscribe"
    RESOURCES_UNSUBSCRIBE = "resources/unsubscribe"
    PROMPTS_LIST = "prompts/list"
    PROMPTS_GET = "prompts/get"
    COMPLETION_COMPLETE = "completion/complete"

    @classmethod
    def lookup(cls, method: str) -> MCPMethod | None:
        try:
            return cls(method)
        except ValueError:
            return None


# ---------------------------------------------------------------------------
# MCP-specific payloads
# ---------------------------------------------------------------------------


class MCPToolDef(BaseModel):
    """A tool definition as returned by an upstream ``tools/list``."""

    model_config = {"populate_by_name": True}

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        alias="inputSchema",
    )


class ServerInfo(BaseModel):
    """Identity reported by ``initialize``."""

    name: str = "mcp-gateway"
    version: str = "0.1.0"
    protocol_version: str = DEFAULT_PROTOCOL_VERSION
