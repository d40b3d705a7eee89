"""Provider-specific transpiler implementations."""

from mcpgw.core.interface.transpilers.anthropic import AnthropicTranspiler
from mcpgw.core.interface.transpilers.azure import AzureOpenAITranspiler
from mcpgw.core.interface.transpilers.openai import OpenAITranspiler

__all__ = ["AnthropicTranspiler", "AzureOpenAITranspiler", "OpenAITranspiler"]
