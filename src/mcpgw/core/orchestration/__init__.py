"""Orchestration: the tool-calling loop and agent request handling."""

from mcpgw.core.orchestration.agent import AgentHandler, extract_api_key
from mcpgw.core.orchestration.models import (
    MAX_ITERATIONS_MESSAGE,
    AgentOptions,
    AgentRequest,
    HistoryMessage,
    OrchestrationResult,
    StopReason,
    ToolCallRecord,
)
from mcpgw.core.orchestration.orchestrator import ToolCallOrchestrator

__all__ = [
    "MAX_ITERATIONS_MESSAGE",
    "AgentHandler",
    "AgentOptions",
    "AgentRequest",
    "HistoryMessage",
    "OrchestrationResult",
    "StopReason",
    "ToolCallOrchestrator",
    "ToolCallRecord",
    "extract_api_key",
]
