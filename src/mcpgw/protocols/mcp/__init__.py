"""MCP protocol: JSON-RPC server handler and upstream client."""

from mcpgw.protocols.mcp.client import UpstreamMCPClient, register_upstream_tools
from mcpgw.protocols.mcp.handler import MCPHandler
from mcpgw.protocols.mcp.models import (
    JsonRpcError,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPMethod,
    MCPToolDef,
    ServerInfo,
)
from mcpgw.protocols.mcp.transport import HttpTransport, MCPTransport

__all__ = [
    "HttpTransport",
    "JsonRpcError",
    "JsonRpcRequest",
    "JsonRpcResponse",
    "MCPHandler",
    "MCPMethod",
    "MCPToolDef",
    "MCPTransport",
    "ServerInfo",
    "UpstreamMCPClient",
    "register_upstream_tools",
]
