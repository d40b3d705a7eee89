"""CLI subcommand registration."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all subcommands on the CLI group."""
    from mcpgw.cli_commands.handle import handle
    from mcpgw.cli_commands.serve import serve
    from mcpgw.cli_commands.tools import tools
    from mcpgw.cli_commands.validate import validate

    cli.add_command(handle)
    cli.add_command(serve)
    cli.add_command(tools)
    cli.add_command(validate)
