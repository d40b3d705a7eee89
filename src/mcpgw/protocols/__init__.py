"""Protocol layer: tool registry, resources, prompts, and MCP."""

from mcpgw.protocols.cache import ToolListCache
from mcpgw.protocols.http_tools import HttpParamMapping, HttpToolDef, HttpToolExecutor
from mcpgw.protocols.prompts import PromptDefinition, PromptRegistry, TemplatePromptBuilder
from mcpgw.protocols.registry import RegisteredTool, ToolRegistry
from mcpgw.protocols.resources import ResourceDescriptor, ResourceReader

__all__ = [
    "HttpParamMapping",
    "HttpToolDef",
    "HttpToolExecutor",
    "PromptDefinition",
    "PromptRegistry",
    "RegisteredTool",
    "ResourceDescriptor",
    "ResourceReader",
    "TemplatePromptBuilder",
    "ToolListCache",
    "ToolRegistry",
]
