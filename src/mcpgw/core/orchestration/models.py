"""Orchestration models: agent request envelope and tool-loop results.

The agent envelope uses camelCase keys on the wire; the models accept
either spelling and expose snake_case attributes.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mcpgw.core.interface.models import ConversationHistory, TokenUsage, ToolCall

MAX_ITERATIONS_MESSAGE = "Maximum tool call iterations reached without a final answer."


class StopReason(str, Enum):
    """Why an orchestration run ended."""

    COMPLETED = "completed"
    TOOL_CALLS_PENDING = "tool_calls_pending"
    MAX_ITERATIONS = "max_iterations"


# ---------------------------------------------------------------------------
# Agent request envelope
# ---------------------------------------------------------------------------


class AgentOptions(BaseModel):
    """Per-request knobs for the tool-calling loop."""

    model_config = ConfigDict(populate_by_name=True)

    auto_execute_tools: bool = Field(default=True, alias="autoExecuteTools")
    max_tool_calls: int | None = Field(default=None, alias="maxToolCalls", ge=1)
    include_tool_results: bool = Field(default=True, alias="includeToolResults")
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, alias="maxTokens", ge=1)
    model: str | None = None
    system_prompt: str | None = Field(default=None, alias="systemPrompt")


class HistoryMessage(BaseModel):
    """A prior conversation turn supplied by the caller."""

    role: Literal["system", "user", "assistant"]
    content: str


class AgentRequest(BaseModel):
    """A natural-language agent request."""

    model_config = ConfigDict(populate_by_name=True)

    input: str
    mode: str | None = None
    options: AgentOptions = Field(default_factory=AgentOptions)
    history: list[HistoryMessage] = []

    @field_validator("input")
    @classmethod
    def _input_not_blank(cls, value: str) -> str:
        if not value.strip():
            msg = "input must be a non-empty string"
            raise ValueError(msg)
        return value


# ---------------------------------------------------------------------------
# Tool-loop results
# ---------------------------------------------------------------------------


class ToolCallRecord(BaseModel):
    """Audit entry for one executed tool call."""

    id: str
    name: str
    arguments: dict[str, Any] = {}
    result: str | None = None
    error: str | None = None
    success: bool = True

    def to_agent(self, *, include_result: bool = True) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "arguments": self.arguments,
            "success": self.success,
        }
        if include_result:
            record["result"] = self.result
        if self.error is not None:
            record["error"] = self.error
        return record


class OrchestrationResult(BaseModel):
    """Outcome of one :class:`ToolCallOrchestrator` run."""

    response: str
    stop_reason: StopReason
    iterations: int
    tool_calls: list[ToolCallRecord] = []
    pending_tool_calls: list[ToolCall] = []
    usage: TokenUsage = Field(default_factory=TokenUsage)
    model: str = ""
    transcript: ConversationHistory = Field(default_factory=ConversationHistory)

    @property
    def tools_executed(self) -> int:
        return len(self.tool_calls)
