"""Shared CLI output formatters."""

from __future__ import annotations

import json
import logging
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from mcpgw.core.interface.models import ToolDefinition  # noqa: TC001
from mcpgw.sdk.models import GatewaySpec  # noqa: TC001

console = Console()
err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    """Route ``mcpgw`` log records to stderr through rich."""
    logger = logging.getLogger("mcpgw")
    logger.handlers.clear()
    if not verbose:
        logger.setLevel(logging.WARNING)
        logger.addHandler(logging.NullHandler())
        return
    logger.setLevel(logging.DEBUG)
    logger.addHandler(RichHandler(console=err_console, show_path=False, rich_tracebacks=True))


def print_response(response: dict[str, Any]) -> None:
    """Pretty-print a response envelope as JSON."""
    console.print_json(json.dumps(response, default=str))


def print_tools_table(tools: list[ToolDefinition]) -> None:
    """Pretty-print tool definitions as a table."""
    table = Table(title="Registered Tools")
    table.add_column("Name", style="cyan")
    table.add_column("Description")
    table.add_column("Parameters")

    for tool in tools:
        params = ", ".join(tool.input_schema.get("properties", {})) or "-"
        table.add_row(tool.name, _truncate(tool.description), params)

    console.print(table)


def print_spec_summary(spec: GatewaySpec) -> None:
    """Print the validated gateway configuration."""
    console.print("[green]Gateway configuration validated successfully.[/green]")
    console.print(f"  Server: {spec.server.name} {spec.server.version}")
    console.print(f"  Provider: {spec.provider.provider} ({spec.provider.model})")
    console.print(f"  Max iterations: {spec.agent.max_iterations}")
    tool_names = [*spec.builtin_tools, *(t.name for t in spec.http_tools)]
    console.print(f"  Tools: {', '.join(tool_names) or '(none)'}")
    console.print(f"  Upstream MCP servers: {', '.join(u.name for u in spec.upstream_mcp) or '(none)'}")
    console.print(f"  Resources: {len(spec.resources)}")
    console.print(f"  Prompts: {', '.join(p.name for p in spec.prompts) or '(none)'}")


def _truncate(text: str, max_len: int = 80) -> str:
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."
