"""Provider-neutral model interface & transpilation."""

from mcpgw.core.interface.client import CompletionClient, get_transpiler
from mcpgw.core.interface.config import ProviderConfig, ProviderKind
from mcpgw.core.interface.models import (
    CanonicalMessage,
    CompletionResult,
    ConversationHistory,
    TextContent,
    TokenUsage,
    ToolCall,
    ToolDefinition,
    ToolResult,
)
from mcpgw.core.interface.transpiler import Transpiler

__all__ = [
    "CanonicalMessage",
    "CompletionClient",
    "CompletionResult",
    "ConversationHistory",
    "ProviderConfig",
    "ProviderKind",
    "TextContent",
    "TokenUsage",
    "ToolCall",
    "ToolDefinition",
    "ToolResult",
    "Transpiler",
    "get_transpiler",
]
