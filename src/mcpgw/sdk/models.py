"""Pydantic models for the gateway YAML consumed by ``mcpgw``."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, model_validator

from mcpgw.core.interface.config import ProviderConfig
from mcpgw.core.orchestration.orchestrator import DEFAULT_MAX_ITERATIONS
from mcpgw.protocols.http_tools import FETCH_RESOURCE, HttpToolDef
from mcpgw.protocols.mcp.models import DEFAULT_PROTOCOL_VERSION
from mcpgw.protocols.prompts import PromptArgument, PromptMessageTemplate
from mcpgw.protocols.resources import ResourceDescriptor


class ServerSettings(BaseModel):
    """Identity reported by ``initialize``."""

    name: str = "mcp-gateway"
    version: str = "0.1.0"
    protocol_version: str = DEFAULT_PROTOCOL_VERSION


class AgentSettings(BaseModel):
    """Defaults for agent requests; per-request options override them."""

    max_iterations: int = Field(default=DEFAULT_MAX_ITERATIONS, ge=1)
    temperature: float | None = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=1024, ge=1)
    system_prompt: str | None = None
    parallel_tools: bool = False


class CacheSettings(BaseModel):
    """Upstream tool-list cache bounds."""

    ttl: float = Field(default=300.0, gt=0)
    max_entries: int = Field(default=100, ge=1)


class UpstreamMCPRef(BaseModel):
    """An upstream MCP server whose tools are proxied by the gateway."""

    name: str
    url: str
    headers: dict[str, str] = {}
    timeout: float = 30.0


class PromptSpec(BaseModel):
    """A prompt declared in YAML with ``string.Template`` message bodies."""

    name: str
    description: str = ""
    arguments: list[PromptArgument] = []
    messages: list[PromptMessageTemplate] = []


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None
    export_to_console: bool = False


class GatewaySpec(BaseModel):
    """Top-level gateway specification parsed from YAML."""

    server: ServerSettings = Field(default_factory=ServerSettings)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    agent: AgentSettings = Field(default_factory=AgentSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    builtin_tools: list[Literal["fetch_resource"]] = []
    http_tools: list[HttpToolDef] = []
    upstream_mcp: list[UpstreamMCPRef] = []
    resources: list[ResourceDescriptor] = []
    prompts: list[PromptSpec] = []
    telemetry: TelemetrySettings | None = None

    @model_validator(mode="after")
    def _validate_names(self) -> GatewaySpec:
        tool_names = [t.name for t in self.http_tools]
        if FETCH_RESOURCE in self.builtin_tools:
            tool_names.append(FETCH_RESOURCE)
        _check_unique("tool", tool_names)
        _check_unique("prompt", [p.name for p in self.prompts])
        _check_unique("resource", [r.uri for r in self.resources])
        _check_unique("upstream_mcp", [u.name for u in self.upstream_mcp])
        return self


def _check_unique(kind: str, names: list[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            msg = f"duplicate {kind} '{name}'"
            raise ValueError(msg)
        seen.add(name)
