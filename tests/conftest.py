"""Shared fixtures for the mcpgw test suite."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from mcpgw.core.interface.client import CompletionClient
from mcpgw.core.interface.config import ProviderConfig
from mcpgw.core.interface.models import (
    CanonicalMessage,
    CompletionResult,
    TokenUsage,
    ToolCall,
    ToolDefinition,
)
from mcpgw.protocols.registry import ToolRegistry

ECHO_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {"text": {"type": "string"}},
    "required": ["text"],
}


@pytest.fixture
def registry() -> ToolRegistry:
    """A registry with ``echo``, ``add`` and an always-failing ``boom`` tool."""
    reg = ToolRegistry()

    async def echo(args: dict[str, Any]) -> str:
        return args["text"]

    def add(args: dict[str, Any]) -> dict[str, Any]:
        return {"sum": args["a"] + args["b"]}

    async def boom(args: dict[str, Any]) -> str:
        msg = "kaboom"
        raise RuntimeError(msg)

    reg.register(ToolDefinition(name="echo", description="Echo text", inputSchema=ECHO_SCHEMA), echo)
    reg.register(
        ToolDefinition(
            name="add",
            description="Add two numbers",
            inputSchema={
                "type": "object",
                "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
                "required": ["a", "b"],
            },
        ),
        add,
    )
    reg.register(ToolDefinition(name="boom", description="Always fails"), boom)
    return reg


@pytest.fixture
def make_completion() -> Callable[..., CompletionResult]:
    """Build a CompletionResult, optionally carrying tool calls."""

    def _make(
        text: str = "",
        tool_calls: list[ToolCall] | None = None,
        *,
        total_tokens: int = 15,
        model: str = "gpt-4o-mini",
    ) -> CompletionResult:
        return CompletionResult(
            message=CanonicalMessage.assistant(text, tool_calls=tool_calls),
            usage=TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=total_tokens),
            model=model,
            finish_reason="tool_calls" if tool_calls else "stop",
        )

    return _make


@pytest.fixture
def mock_client() -> MagicMock:
    """A CompletionClient stand-in whose ``complete`` is an AsyncMock."""
    client = MagicMock(spec=CompletionClient)
    client.config = ProviderConfig(api_key="sk-config")
    client.complete = AsyncMock()
    client.with_model.return_value = client
    return client


@pytest.fixture
def openai_payload() -> Callable[..., dict[str, Any]]:
    """Build a raw OpenAI chat completion response body."""

    def _make(
        content: str | None = "Hello!",
        tool_calls: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        message: dict[str, Any] = {"role": "assistant", "content": content}
        if tool_calls:
            message["tool_calls"] = [
                {
                    "id": call["id"],
                    "type": "function",
                    "function": {
                        "name": call["name"],
                        "arguments": call["arguments"]
                        if isinstance(call["arguments"], str)
                        else json.dumps(call["arguments"]),
                    },
                }
                for call in tool_calls
            ]
        return {
            "id": "chatcmpl-1",
            "model": "gpt-4o-mini",
            "choices": [
                {
                    "index": 0,
                    "message": message,
                    "finish_reason": "tool_calls" if tool_calls else "stop",
                }
            ],
            "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        }

    return _make


@pytest.fixture
def scripted_http() -> Callable[..., tuple[httpx.AsyncClient, list[httpx.Request]]]:
    """Build an AsyncClient on MockTransport that replays scripted responses.

    Returns the client and the list that captures every request sent.
    """

    def _make(*responses: httpx.Response) -> tuple[httpx.AsyncClient, list[httpx.Request]]:
        queue = list(responses)
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if not queue:
                return httpx.Response(500, json={"error": "no scripted response left"})
            return queue.pop(0)

        return httpx.AsyncClient(transport=httpx.MockTransport(handler)), seen

    return _make
