"""Anthropic transpiler: handles system message extraction and role alternation.

Key differences from CMS:
- System message is a separate top-level parameter, not in the messages array.
- Tools use ``input_schema`` instead of ``parameters``.
- Messages must strictly alternate between user and assistant roles.
- Consecutive same-role messages must be merged.
- Tool results are embedded as user messages with tool_result content blocks.
"""

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
from mcpgw.core.interface.transpilers.openai import parse_arguments

# Anthropic requires max_tokens on every request.
_DEFAULT_MAX_TOKENS = 1024


class AnthropicTranspiler:
    """Converts between CMS and Anthropic's messages API format."""

    def format_tools(self, tools: list[ToolDefinition]) -> list[dict[str, Any]]:
        return [
            {
                "name": tool.name,
                "description": tool.description,
                "input_schema": tool.input_schema,
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
        """Convert CMS history to an Anthropic messages request body.

        The system prompt is extracted into the top-level ``system`` field
        and consecutive same-role messages are merged.
        """
        body: dict[str, Any] = {
            "model": model,
            "max_tokens": max_tokens or _DEFAULT_MAX_TOKENS,
        }

        system_parts = [msg.text for msg in history.system_messages]
        if system_parts:
            body["system"] = "\n\n".join(system_parts)

        raw_messages = [self._message_to_anthropic(msg) for msg in history.non_system_messages]
        body["messages"] = _merge_consecutive_roles(raw_messages)

        if temperature is not None:
            body["temperature"] = temperature
        if tools:
            body["tools"] = self.format_tools(tools)
        return body

    def from_provider(self, response: dict[str, Any]) -> CompletionResult:
        """Convert an Anthropic messages API response to a CompletionResult."""
        content: list[TextContent] = [
            TextContent(text=block["text"])
            for block in response["content"]
            if block.get("type") == "text"
        ]
        tool_calls = self.extract_tool_calls(response) or None

        usage_raw = response.get("usage") or {}
        prompt = int(usage_raw.get("input_tokens", 0))
        completion = int(usage_raw.get("output_tokens", 0))
        usage = TokenUsage(
            prompt_tokens=prompt,
            completion_tokens=completion,
            total_tokens=prompt + completion,
        )

        return CompletionResult(
            message=CanonicalMessage(role="assistant", content=content, tool_calls=tool_calls),
            usage=usage,
            model=str(response.get("model", "")),
            finish_reason=response.get("stop_reason"),
        )

    def extract_tool_calls(self, response: dict[str, Any]) -> list[ToolCall]:
        return [
            ToolCall(
                id=block["id"],
                name=block["name"],
                arguments=parse_arguments(block.get("input")),
            )
            for block in response["content"]
            if block.get("type") == "tool_use"
        ]

    def endpoint(self, config: ProviderConfig) -> str:
        return f"{config.resolved_base_url}/v1/messages"

    def headers(self, config: ProviderConfig, api_key: str) -> dict[str, str]:
        return {"x-api-key": api_key, "anthropic-version": config.anthropic_version}

    def _message_to_anthropic(self, msg: CanonicalMessage) -> dict[str, Any]:
        """Convert a single CMS message to Anthropic format."""
        if msg.role == "tool":
            # Tool results become user messages with tool_result content blocks
            block: dict[str, Any] = {
                "type": "tool_result",
                "tool_use_id": msg.tool_call_id,
                "content": msg.text,
            }
            if msg.is_error:
                block["is_error"] = True
            return {"role": "user", "content": [block]}

        if msg.role == "assistant":
            content_blocks: list[dict[str, Any]] = []
            if msg.text:
                content_blocks.append({"type": "text", "text": msg.text})
            for tc in msg.tool_calls or []:
                content_blocks.append(
                    {
                        "type": "tool_use",
                        "id": tc.id,
                        "name": tc.name,
                        "input": tc.arguments,
                    }
                )
            return {"role": "assistant", "content": content_blocks}

        return {"role": "user", "content": msg.text}


def _merge_consecutive_roles(
    messages: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Merge consecutive messages with the same role.

    Anthropic requires strict user/assistant alternation. Several tool
    results from one turn therefore collapse into a single user message.
    """
    merged: list[dict[str, Any]] = []
    for msg in messages:
        if merged and merged[-1]["role"] == msg["role"]:
            merged[-1]["content"] = _merge_content(merged[-1]["content"], msg["content"])
        else:
            merged.append(msg)
    return merged


def _merge_content(
    existing: str | list[dict[str, Any]], new: str | list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Merge two content values (str or list of blocks) into a single list."""
    result: list[dict[str, Any]] = []
    for item in (existing, new):
        if isinstance(item, str):
            result.append({"type": "text", "text": item})
        else:
            result.extend(item)
    return result
