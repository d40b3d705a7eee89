"""OpenAI transpiler: CMS is closest to ChatML so this is the simplest mapping."""

import json
import logging
from typing import Any

from mcpgw.core.interface.config import ProviderConfig
from mcpgw.core.interface.models import (
    CanonicalMessage,
    CompletionResult,
    ConversationHistory,
    TextContent,
    TokenUsage,
    ToolCall,
    ToolDefinition,
)

logger = logging.getLogger(__name__)


class OpenAITranspiler:
    """Converts between CMS and OpenAI's chat completion format."""

    def format_tools(self, tools: list[ToolDefinition]) -> list[dict[str, Any]]:
        return [
            {
                "type": "function",
                "function": {
                    "name": tool.name,
                    "description": tool.description,
                    "parameters": tool.input_schema,
                },
            }
            for tool in tools
        ]

    def to_provider(
        self,
        history: ConversationHistory,
        tools: list[ToolDefinition] | None = None,
        *,
        model: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> dict[str, Any]:
        """Convert CMS history to an OpenAI chat completion request body.

        System messages stay inline in ``messages``.
        """
        body: dict[str, Any] = {
            "model": model,
            "messages": [self._message_to_openai(msg) for msg in history],
        }
        if temperature is not None:
            body["temperature"] = temperature
        if max_tokens is not None:
            body["max_tokens"] = max_tokens
        if tools:
            body["tools"] = self.format_tools(tools)
            body["tool_choice"] = "auto"
        return body

    def from_provider(self, response: dict[str, Any]) -> CompletionResult:
        """Convert an OpenAI chat completion response to a CompletionResult."""
        choice = response["choices"][0]
        message = choice["message"]

        content: list[TextContent] = []
        if message.get("content"):
            content = [TextContent(text=message["content"])]

        tool_calls = self.extract_tool_calls(response) or None

        usage_raw = response.get("usage") or {}
        usage = TokenUsage(
            prompt_tokens=int(usage_raw.get("prompt_tokens", 0)),
            completion_tokens=int(usage_raw.get("completion_tokens", 0)),
            total_tokens=int(usage_raw.get("total_tokens", 0)),
        )

        return CompletionResult(
            message=CanonicalMessage(role="assistant", content=content, tool_calls=tool_calls),
            usage=usage,
            model=str(response.get("model", "")),
            finish_reason=choice.get("finish_reason"),
        )

    def extract_tool_calls(self, response: dict[str, Any]) -> list[ToolCall]:
        message = response["choices"][0]["message"]
        return [
            ToolCall(
                id=tc["id"],
                name=tc["function"]["name"],
                arguments=parse_arguments(tc["function"].get("arguments", "{}")),
            )
            for tc in message.get("tool_calls") or []
        ]

    def endpoint(self, config: ProviderConfig) -> str:
        return f"{config.resolved_base_url}/chat/completions"

    def headers(self, config: ProviderConfig, api_key: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    def _message_to_openai(self, msg: CanonicalMessage) -> dict[str, Any]:
        """Convert a single CMS message to OpenAI format."""
        result: dict[str, Any] = {"role": msg.role}

        if msg.role == "tool":
            result["tool_call_id"] = msg.tool_call_id
            result["content"] = msg.text
            return result

        result["content"] = msg.text if msg.content else None

        if msg.tool_calls:
            result["tool_calls"] = [
                {
                    "id": tc.id,
                    "type": "function",
                    "function": {
                        "name": tc.name,
                        "arguments": json.dumps(tc.arguments),
                    },
                }
                for tc in msg.tool_calls
            ]

        return result


def parse_arguments(raw: Any) -> dict[str, Any]:
    """Parse a tool call argument payload.

    Malformed JSON (or a JSON value that is not an object) degrades to an
    empty argument object so a single bad call never aborts the turn.
    """
    if isinstance(raw, dict):
        return raw
    if raw is None or raw == "":
        return {}
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError):
        logger.warning("Malformed tool call arguments, using {}: %r", raw)
        return {}
    if not isinstance(parsed, dict):
        logger.warning("Tool call arguments are not an object, using {}: %r", raw)
        return {}
    return parsed
