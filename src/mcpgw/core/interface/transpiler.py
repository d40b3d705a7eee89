"""Transpiler protocol: the provider capability interface.

Each provider (OpenAI, Azure OpenAI, Anthropic) has a concrete transpiler
that owns everything dialect-specific: the tool schema shape, the request
body, the response parsing, and the transport details (endpoint URL and
auth headers). The :class:`~mcpgw.core.interface.client.CompletionClient`
selects one through :func:`~mcpgw.core.interface.client.get_transpiler` and
never branches on the provider itself.
"""

from typing import Any, Protocol

from mcpgw.core.interface.config import ProviderConfig
from mcpgw.core.interface.models import (
    CompletionResult,
    ConversationHistory,
    ToolCall,
    ToolDefinition,
)


class Transpiler(Protocol):
    """Protocol for provider-specific wire format transpilers."""

    def format_tools(self, tools: list[ToolDefinition]) -> list[dict[str, Any]]:
        """Convert neutral tool definitions to the provider's tool schema list."""
        ...

    def to_provider(
        self,
        history: ConversationHistory,
        tools: list[ToolDefinition] | None = None,
        *,
        model: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Build the JSON request body for one completion call."""
        ...

    def from_provider(self, response: dict[str, Any]) -> CompletionResult:
        """Convert a provider's raw response into a :class:`CompletionResult`."""
        ...

    def extract_tool_calls(self, response: dict[str, Any]) -> list[ToolCall]:
        """Return the tool calls requested by a raw provider response."""
        ...

    def endpoint(self, config: ProviderConfig) -> str:
        """Return the completion endpoint URL for *config*."""
        ...

    def headers(self, config: ProviderConfig, api_key: str) -> dict[str, str]:
        """Return the auth (and version) headers for *api_key*."""
        ...
