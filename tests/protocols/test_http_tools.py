"""Tests for HTTP-backed tools and the built-in fetch_resource tool."""

from __future__ import annotations

import json
from collections.abc import Callable

import httpx
import pytest

from mcpgw.errors import (
    ResourceReadError,
    ToolNetworkError,
    ToolParseError,
    ToolTimeoutError,
)
from mcpgw.protocols.http_tools import (
    FETCH_RESOURCE,
    HttpParamMapping,
    HttpToolDef,
    HttpToolExecutor,
    fetch_resource_tool,
    register_http_tools,
)
from mcpgw.protocols.registry import ToolRegistry
from mcpgw.protocols.resources import ResourceDescriptor, ResourceReader


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


SEARCH = HttpToolDef(
    name="search_docs",
    description="Search the docs",
    url_template="https://api.example.com/v1/{index}/search",
    method="POST",
    headers={"X-Client": "mcpgw"},
    params=[
        HttpParamMapping(name="index", location="path"),
        HttpParamMapping(name="q", location="query"),
        HttpParamMapping(name="trace", location="header", required=False),
        HttpParamMapping(name="limit", location="body", type="integer", default=5),
    ],
    body_template={"highlight": True},
)


class TestDefinition:
    def test_schema_from_params(self) -> None:
        definition = SEARCH.to_definition()
        assert definition.name == "search_docs"
        assert definition.input_schema["properties"]["limit"] == {"type": "integer", "description": ""}
        # params with defaults are optional
        assert definition.input_schema["required"] == ["index", "q"]

    def test_no_required_key_when_all_optional(self) -> None:
        tool = HttpToolDef(name="t", url_template="https://x", params=[HttpParamMapping(name="a", required=False)])
        assert "required" not in tool.to_definition().input_schema


class TestExecutor:
    async def test_request_assembly(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"hits": [{"title": "Install"}]})

        executor = HttpToolExecutor(SEARCH, http_client=_client(handler))
        result = await executor({"index": "guides v2", "q": "setup", "trace": "abc"})

        assert result == {"hits": [{"title": "Install"}]}
        [request] = seen
        assert request.method == "POST"
        assert request.url.raw_path.startswith(b"/v1/guides%20v2/search")
        assert request.url.params["q"] == "setup"
        assert request.headers["X-Client"] == "mcpgw"
        assert request.headers["trace"] == "abc"
        assert json.loads(request.content) == {"highlight": True, "limit": 5}

    async def test_plain_text_response(self) -> None:
        tool = HttpToolDef(name="t", url_template="https://x/status")
        executor = HttpToolExecutor(tool, http_client=_client(lambda r: httpx.Response(200, text="ok")))
        assert await executor({}) == "ok"

    async def test_response_path(self) -> None:
        tool = HttpToolDef(name="t", url_template="https://x", response_path="data.items.0.name")
        body = {"data": {"items": [{"name": "first"}]}}
        executor = HttpToolExecutor(tool, http_client=_client(lambda r: httpx.Response(200, json=body)))
        assert await executor({}) == "first"

    async def test_response_path_missing(self) -> None:
        tool = HttpToolDef(name="t", url_template="https://x", response_path="data.missing")
        executor = HttpToolExecutor(tool, http_client=_client(lambda r: httpx.Response(200, json={"data": {}})))
        with pytest.raises(ToolParseError, match="not found"):
            await executor({})

    async def test_malformed_json(self) -> None:
        tool = HttpToolDef(name="t", url_template="https://x")

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=b"{oops", headers={"content-type": "application/json"})

        with pytest.raises(ToolParseError) as exc_info:
            await HttpToolExecutor(tool, http_client=_client(handler))({})
        assert exc_info.value.code == -32700

    async def test_error_status(self) -> None:
        tool = HttpToolDef(name="t", url_template="https://x")
        executor = HttpToolExecutor(tool, http_client=_client(lambda r: httpx.Response(503, text="down")))
        with pytest.raises(ToolNetworkError, match="HTTP 503") as exc_info:
            await executor({})
        assert exc_info.value.data["status"] == 503
        assert exc_info.value.code == -32000

    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("slow", request=request)

        tool = HttpToolDef(name="t", url_template="https://x")
        with pytest.raises(ToolTimeoutError):
            await HttpToolExecutor(tool, http_client=_client(handler))({})

    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        tool = HttpToolDef(name="t", url_template="https://x")
        with pytest.raises(ToolNetworkError, match="refused"):
            await HttpToolExecutor(tool, http_client=_client(handler))({})


class TestRegistration:
    async def test_registered_tools_execute_through_registry(self) -> None:
        registry = ToolRegistry()
        register_http_tools(
            registry,
            [SEARCH],
            http_client=_client(lambda r: httpx.Response(200, json={"ok": True})),
        )
        assert await registry.execute("search_docs", {"index": "a", "q": "b"}) == {"ok": True}

    async def test_fetch_resource_tool(self) -> None:
        reader = ResourceReader([ResourceDescriptor(uri="notes://faq", name="faq", text="Q&A")])
        registry = ToolRegistry()
        registry.register(*fetch_resource_tool(reader))

        assert FETCH_RESOURCE in registry
        assert await registry.execute(FETCH_RESOURCE, {"uri": "notes://faq"}) == "Q&A"
        with pytest.raises(ResourceReadError):
            await registry.execute(FETCH_RESOURCE, {"uri": "notes://missing"})
