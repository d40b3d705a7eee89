"""``mcpgw tools``: inspect the tools a gateway exposes."""

from __future__ import annotations

import asyncio
import json
import sys

import click

from mcpgw.cli_commands._output import console, print_tools_table
from mcpgw.core.interface.models import ToolDefinition  # noqa: TC001


@click.group()
def tools() -> None:
    """Inspect registered tools."""


@tools.command("list")
@click.argument("config", type=click.Path(exists=True))
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format.",
)
def list_tools(config: str, fmt: str) -> None:
    """List every tool registered by the gateway defined in CONFIG.

    Upstream MCP servers are contacted to discover their tools.
    """
    from mcpgw.sdk.errors import GatewayConfigError
    from mcpgw.sdk.gateway import Gateway

    async def _list() -> list[ToolDefinition]:
        async with await Gateway.from_yaml(config) as gateway:
            return gateway.tools.definitions()

    try:
        definitions = asyncio.run(_list())
    except GatewayConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    if fmt == "json":
        console.print_json(json.dumps([d.to_mcp() for d in definitions]))
        return

    if not definitions:
        console.print("[yellow]No tools registered.[/yellow]")
        return

    print_tools_table(definitions)
