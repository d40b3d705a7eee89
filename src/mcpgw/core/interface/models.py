"""Canonical Message Schema (CMS): the provider-neutral transcript format.

Orchestration logic only ever touches these types. Provider transpilers
convert CMS messages to and from each wire dialect.
"""

from typing import Any, Literal
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Content parts
# ---------------------------------------------------------------------------


class TextContent(BaseModel):
    """Plain text content part."""

    type: Literal["text"] = "text"
    text: str


# ---------------------------------------------------------------------------
# Tool calling: definitions, invocations and results
# ---------------------------------------------------------------------------


class ToolDefinition(BaseModel):
    """Provider-neutral tool schema, rendered as-is by ``tools/list``."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    input_schema: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        alias="inputSchema",
    )

    def to_mcp(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ToolCall(BaseModel):
    """A tool invocation emitted by an assistant message.

    ``id`` correlates the call with its result across every provider format.
    """

    id: str = Field(default_factory=lambda: f"call_{uuid4().hex[:12]}")
    name: str
    arguments: dict[str, Any] = {}


class ToolResult(BaseModel):
    """The result of executing a tool, returned as a tool-role message."""

    tool_call_id: str
    content: list[TextContent] = []
    is_error: bool = False

    @classmethod
    def from_text(cls, tool_call_id: str, text: str, *, is_error: bool = False) -> "ToolResult":
        """Create a ToolResult with a single text content part."""
        return cls(tool_call_id=tool_call_id, content=[TextContent(text=text)], is_error=is_error)

    @property
    def text(self) -> str:
        return "".join(part.text for part in self.content)


# ---------------------------------------------------------------------------
# Canonical Message: the core message type
# ---------------------------------------------------------------------------


class CanonicalMessage(BaseModel):
    """A single message in the canonical format.

    Roles:
    - system: instruction/context messages
    - user: human input
    - assistant: model-generated messages (may include tool_calls)
    - tool: tool execution results (must include tool_call_id)
    """

    role: Literal["system", "user", "assistant", "tool"]
    content: list[TextContent] = []
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None
    is_error: bool = False
    metadata: dict[str, Any] = {}

    @property
    def text(self) -> str:
        """Concatenated text of all content parts."""
        return "".join(part.text for part in self.content)

    @classmethod
    def system(cls, text: str, **metadata: Any) -> "CanonicalMessage":
        """Create a system message."""
        return cls(role="system", content=[TextContent(text=text)], metadata=metadata)

    @classmethod
    def user(cls, text: str, **metadata: Any) -> "CanonicalMessage":
        """Create a user message."""
        return cls(role="user", content=[TextContent(text=text)], metadata=metadata)

    @classmethod
    def assistant(
        cls,
        text: str = "",
        tool_calls: list[ToolCall] | None = None,
        **metadata: Any,
    ) -> "CanonicalMessage":
        """Create an assistant message."""
        content = [TextContent(text=text)] if text else []
        return cls(role="assistant", content=content, tool_calls=tool_calls, metadata=metadata)

    @classmethod
    def tool(cls, result: ToolResult, **metadata: Any) -> "CanonicalMessage":
        """Create a tool-result message."""
        return cls(
            role="tool",
            content=list(result.content),
            tool_call_id=result.tool_call_id,
            is_error=result.is_error,
            metadata=metadata,
        )


# ---------------------------------------------------------------------------
# Conversation History: ordered container of messages
# ---------------------------------------------------------------------------


class ConversationHistory(BaseModel):
    """An ordered sequence of canonical messages forming a transcript."""

    messages: list[CanonicalMessage] = []

    def append(self, message: CanonicalMessage) -> None:
        """Append a message to the history."""
        self.messages.append(message)

    def copy_owned(self) -> "ConversationHistory":
        """Return a deep copy that the caller exclusively owns."""
        return self.model_copy(deep=True)

    @property
    def system_messages(self) -> list[CanonicalMessage]:
        """Return all system messages."""
        return [m for m in self.messages if m.role == "system"]

    @property
    def non_system_messages(self) -> list[CanonicalMessage]:
        """Return all non-system messages (for providers that separate system prompts)."""
        return [m for m in self.messages if m.role != "system"]

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self):  # type: ignore[override]
        return iter(self.messages)


# ---------------------------------------------------------------------------
# Completion results
# ---------------------------------------------------------------------------


class TokenUsage(BaseModel):
    """Token counts normalized across providers."""

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            prompt_tokens=self.prompt_tokens + other.prompt_tokens,
            completion_tokens=self.completion_tokens + other.completion_tokens,
            total_tokens=self.total_tokens + other.total_tokens,
        )


class CompletionResult(BaseModel):
    """One provider round trip, converted to CMS."""

    message: CanonicalMessage
    usage: TokenUsage = Field(default_factory=TokenUsage)
    model: str = ""
    finish_reason: str | None = None

    @property
    def text(self) -> str:
        return self.message.text

    @property
    def tool_calls(self) -> list[ToolCall]:
        return list(self.message.tool_calls or [])

    @property
    def is_terminal(self) -> bool:
        """A response without tool calls ends the orchestration loop."""
        return not self.message.tool_calls
