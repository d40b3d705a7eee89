"""mcpgw SDK: load a gateway YAML and wire it into a request router."""

from mcpgw.sdk.errors import GatewayConfigError
from mcpgw.sdk.gateway import Gateway, GatewayLoader, build_gateway
from mcpgw.sdk.models import (
    AgentSettings,
    CacheSettings,
    GatewaySpec,
    PromptSpec,
    ServerSettings,
    TelemetrySettings,
    UpstreamMCPRef,
)

__all__ = [
    "AgentSettings",
    "CacheSettings",
    "Gateway",
    "GatewayConfigError",
    "GatewayLoader",
    "GatewaySpec",
    "PromptSpec",
    "ServerSettings",
    "TelemetrySettings",
    "UpstreamMCPRef",
    "build_gateway",
]
