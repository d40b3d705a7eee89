"""Azure OpenAI transpiler: OpenAI's body, Azure's transport.

Key differences from OpenAI:
- The deployment name lives in the URL, so the body carries no ``model``.
- The API version is a mandatory ``api-version`` query parameter.
- Authentication uses an ``api-key`` header instead of a bearer token.
"""

from typing import Any

from mcpgw.core.interface.config import ProviderConfig
from mcpgw.core.interface.models import ConversationHistory, ToolDefinition
from mcpgw.core.interface.transpilers.openai import OpenAITranspiler


class AzureOpenAITranspiler(OpenAITranspiler):
    """Converts between CMS and Azure OpenAI's chat completion format."""

    def to_provider(
        self,
        history: ConversationHistory,
        tools: list[ToolDefinition] | None = None,
        *,
        model: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        body = super().to_provider(
            history, tools, model=model, temperature=temperature, max_tokens=max_tokens
        )
        body.pop("model", None)
        return body

    def endpoint(self, config: ProviderConfig) -> str:
        return (
            f"{config.resolved_base_url}/openai/deployments/{config.model}"
            f"/chat/completions?api-version={config.api_version}"
        )

    def headers(self, config: ProviderConfig, api_key: str) -> dict[str, str]:
        return {"api-key": api_key}
