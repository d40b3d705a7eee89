"""UpstreamMCPClient: proxies tools from a remote MCP server.

Implements the ``initialize`` handshake, cached tool discovery
(``tools/list``), and execution (``tools/call``) over an
:class:`~mcpgw.protocols.mcp.transport.MCPTransport`.
"""

from __future__ import annotations

import json
import logging
from typing import Any, cast

import httpx
from pydantic import ValidationError

from mcpgw.core.interface.models import ToolDefinition
from mcpgw.errors import ToolExecutionError, ToolNetworkError, ToolParseError, ToolTimeoutError
from mcpgw.protocols.cache import ToolListCache
from mcpgw.protocols.mcp.models import (
    DEFAULT_PROTOCOL_VERSION,
    JsonRpcRequest,
    JsonRpcResponse,
    MCPToolDef,
)
from mcpgw.protocols.mcp.transport import HttpTransport, MCPTransport
from mcpgw.protocols.registry import ToolHandler, ToolRegistry

logger = logging.getLogger(__name__)


class UpstreamMCPClient:
    """Async context manager for one upstream MCP server.

    Usage::

        async with UpstreamMCPClient("https://docs.example.com/mcp", cache=cache) as client:
            tools = await client.list_tools()
            result = await client.call_tool("search_docs", {"query": "install"})
    """

    def __init__(
        self,
        url: str,
        *,
        cache: ToolListCache | None = None,
        transport: MCPTransport | None = None,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.url = url
        self._cache = cache
        self._transport = transport or HttpTransport(url, headers=headers, timeout=timeout)
        self._initialized = False
        self._next_id = 1

    async def __aenter__(self) -> UpstreamMCPClient:
        await self.connect()
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.close()

    async def connect(self) -> None:
        """Perform the MCP initialize handshake."""
        if self._initialized:
            return
        await self._send_request(
            "initialize",
            params={
                "protocolVersion": DEFAULT_PROTOCOL_VERSION,
                "capabilities": {},
                "clientInfo": {"name": "mcp-gateway", "version": "0.1.0"},
            },
        )
        self._initialized = True

    async def close(self) -> None:
        await self._transport.close()

    async def list_tools(self) -> list[ToolDefinition]:
        """Return the upstream tools, served from the shared cache when fresh."""
        if self._cache is None:
            raw_tools = await self._fetch_tools()
        else:
            raw_tools = await self._cache.get_or_fetch(self.url, self._fetch_tools)

        definitions: list[ToolDefinition] = []
        for raw in raw_tools:
            tool_def = MCPToolDef.model_validate(raw)
            definitions.append(
                ToolDefinition(
                    name=tool_def.name,
                    description=tool_def.description,
                    input_schema=tool_def.input_schema,
                )
            )
        return definitions

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> str:
        """Send ``tools/call`` and return the concatenated text content."""
        response = await self._send_request(
            "tools/call",
            params={"name": name, "arguments": arguments},
            tool_name=name,
        )
        if response.error is not None:
            raise ToolExecutionError(name, response.error.message)

        result = cast("dict[str, Any]", response.result or {})
        text = self._extract_content(result)
        if result.get("isError"):
            raise ToolExecutionError(name, text)
        return text

    async def _fetch_tools(self) -> list[dict[str, Any]]:
        await self.connect()
        response = await self._send_request("tools/list")
        if response.error is not None:
            raise ToolExecutionError("tools/list", response.error.message)
        result = cast("dict[str, Any]", response.result or {})
        return cast("list[dict[str, Any]]", result.get("tools", []))

    async def _send_request(
        self,
        method: str,
        params: dict[str, Any] | None = None,
        *,
        tool_name: str | None = None,
    ) -> JsonRpcResponse:
        """Send a JSON-RPC request and map transport failures onto tool errors."""
        label = tool_name or method
        request_id = self._next_id
        self._next_id += 1

        request = JsonRpcRequest(method=method, id=request_id, params=params or {})
        try:
            raw = await self._transport.request(request.model_dump())
            return JsonRpcResponse.model_validate(raw)
        except httpx.TimeoutException as exc:
            raise ToolTimeoutError(label, f"upstream MCP server timed out: {self.url}") from exc
        except httpx.HTTPError as exc:
            raise ToolNetworkError(label, f"upstream MCP server unreachable: {exc}") from exc
        except (json.JSONDecodeError, ValidationError) as exc:
            raise ToolParseError(label, f"malformed upstream response: {exc}") from exc

    @staticmethod
    def _extract_content(result: dict[str, Any]) -> str:
        """Extract text from a tools/call result."""
        content = cast("list[dict[str, Any]]", result.get("content", []))
        parts = [str(item.get("text", "")) for item in content if item.get("type") == "text"]
        return "\n".join(parts) if parts else json.dumps(result)


async def register_upstream_tools(registry: ToolRegistry, client: UpstreamMCPClient) -> int:
    """Discover *client*'s tools and register proxy handlers for them.

    Returns:
        The number of tools registered.
    """
    definitions = await client.list_tools()
    for definition in definitions:
        registry.register(definition, _proxy_handler(client, definition.name))
    logger.info("Registered %d tools from upstream %s", len(definitions), client.url)
    return len(definitions)


def _proxy_handler(client: UpstreamMCPClient, name: str) -> ToolHandler:
    async def handler(arguments: dict[str, Any]) -> str:
        return await client.call_tool(name, arguments)

    return handler
