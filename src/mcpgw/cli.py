"""mcpgw CLI entrypoint."""

from __future__ import annotations

import click

from mcpgw import __version__
from mcpgw.cli_commands._output import configure_logging


@click.group()
@click.version_option(version=__version__, prog_name="mcpgw")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging on stderr.")
def main(verbose: bool) -> None:
    """mcpgw: MCP JSON-RPC and agent request gateway."""
    configure_logging(verbose)


# Register subcommands
from mcpgw.cli_commands import register_commands  # noqa: E402

register_commands(main)

if __name__ == "__main__":
    main()
