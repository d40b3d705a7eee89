"""Tests for request classification and routing."""

from __future__ import annotations

import json
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from mcpgw.core.interface.models import CompletionResult
from mcpgw.core.orchestration.agent import AgentHandler
from mcpgw.errors import ProtocolValidationError
from mcpgw.protocols.mcp.handler import MCPHandler
from mcpgw.protocols.registry import ToolRegistry
from mcpgw.router import REQUEST_KIND_AGENT, REQUEST_KIND_MCP, RequestRouter, classify


@pytest.fixture
def router(mock_client: MagicMock, registry: ToolRegistry) -> RequestRouter:
    return RequestRouter(MCPHandler(registry), AgentHandler(mock_client, registry))


class TestClassify:
    @pytest.mark.parametrize(
        ("payload", "kind"),
        [
            ({"jsonrpc": "2.0", "method": "ping"}, REQUEST_KIND_MCP),
            ({"method": "tools/list"}, REQUEST_KIND_MCP),
            ({"input": "hi"}, REQUEST_KIND_AGENT),
            ({"mode": "agent", "input": "hi"}, REQUEST_KIND_AGENT),
            ({"jsonrpc": "2.0", "method": "ping", "input": "x"}, REQUEST_KIND_MCP),
            ({"mode": "agent"}, REQUEST_KIND_AGENT),
        ],
    )
    def test_kinds(self, payload: dict[str, object], kind: str) -> None:
        assert classify(payload) == kind

    @pytest.mark.parametrize("payload", [{}, {"foo": 1}, [1, 2], "text", 3])
    def test_unrecognized(self, payload: object) -> None:
        with pytest.raises(ProtocolValidationError) as exc_info:
            classify(payload)
        assert exc_info.value.error_code == "UNRECOGNIZED_REQUEST"


class TestRoute:
    async def test_invalid_json(self, router: RequestRouter) -> None:
        response = await router.route(b"{not json")
        assert response["response"] is None
        assert response["errorType"] == "ParseError"
        assert response["errorCode"] == "INVALID_JSON"

    async def test_deeply_nested_json(self, router: RequestRouter) -> None:
        response = await router.route(b"[" * 200000)
        assert response["response"] is None
        assert response["errorCode"] == "INVALID_JSON"

    async def test_unrecognized_shape(self, router: RequestRouter) -> None:
        response = await router.route('{"hello": "world"}')
        assert response["errorCode"] == "UNRECOGNIZED_REQUEST"
        assert response["errorType"] == "ProtocolValidationError"

    async def test_mcp_request(self, router: RequestRouter) -> None:
        response = await router.route(json.dumps({"jsonrpc": "2.0", "id": 1, "method": "tools/list"}))
        assert [t["name"] for t in response["result"]["tools"]] == ["echo", "add", "boom"]

    async def test_method_only_gets_version_injected(self, router: RequestRouter) -> None:
        response = await router.route('{"method": "ping", "id": "p"}')
        assert response == {"jsonrpc": "2.0", "result": {}, "id": "p"}

    async def test_wrong_version_not_rewritten(self, router: RequestRouter) -> None:
        response = await router.route('{"jsonrpc": "1.0", "method": "ping", "id": 2}')
        assert response["error"]["code"] == -32600

    async def test_agent_request_with_headers(
        self,
        router: RequestRouter,
        mock_client: MagicMock,
        make_completion: Callable[..., CompletionResult],
    ) -> None:
        mock_client.complete.return_value = make_completion("Hello!")
        response = await router.route(
            '{"mode": "agent", "input": "Say hi"}', {"Authorization": "Bearer sk-req"}
        )
        assert response["response"] == "Hello!"
        assert response["error"] is None
        assert mock_client.complete.call_args.kwargs["api_key"] == "sk-req"

    async def test_unexpected_handler_failure(self, router: RequestRouter) -> None:
        router.mcp.handle = AsyncMock(side_effect=RuntimeError("crashed"))  # type: ignore[method-assign]
        response = await router.route('{"jsonrpc": "2.0", "method": "ping", "id": 1}')
        assert response["errorType"] == "InternalError"
        assert "crashed" in response["error"]
