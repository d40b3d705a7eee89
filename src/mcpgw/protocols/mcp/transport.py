"""MCP transports: how the upstream client reaches an MCP server.

Each transport satisfies the :class:`MCPTransport` protocol. The gateway
talks to upstream servers over HTTP: one JSON-RPC request per POST.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import httpx


@runtime_checkable
class MCPTransport(Protocol):
    """Abstract request/response transport for MCP JSON-RPC."""

    async def request(self, data: dict[str, Any]) -> dict[str, Any]: ...
    async def close(self) -> None: ...


class HttpTransport:
    """POSTs JSON-RPC messages to an MCP server's HTTP endpoint."""

    def __init__(
        self,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = url
        self._headers = {"Accept": "application/json", **(headers or {})}
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    @property
    def url(self) -> str:
        return self._url

    async def request(self, data: dict[str, Any]) -> dict[str, Any]:
        """Send one JSON-RPC message and return the decoded response."""
        response = await self._client.post(self._url, json=data, headers=self._headers)
        response.raise_for_status()
        if not response.content:
            return {}
        return response.json()  # type: ignore[no-any-return]

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()
