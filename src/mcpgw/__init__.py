"""MCP Gateway: JSON-RPC and agent request routing with provider-neutral tool calling."""

from __future__ import annotations

from typing import TYPE_CHECKING

__version__ = "0.1.0"

if TYPE_CHECKING:
    from mcpgw.router import RequestRouter as RequestRouter
    from mcpgw.sdk.gateway import Gateway as Gateway
    from mcpgw.sdk.gateway import GatewayLoader as GatewayLoader

_LAZY_EXPORTS = {
    "Gateway": "mcpgw.sdk.gateway",
    "GatewayLoader": "mcpgw.sdk.gateway",
    "RequestRouter": "mcpgw.router",
}


def __getattr__(name: str) -> object:
    module_path = _LAZY_EXPORTS.get(name)
    if module_path is not None:
        import importlib

        mod = importlib.import_module(module_path)
        return getattr(mod, name)
    raise AttributeError(f"module 'mcpgw' has no attribute {name!r}")
