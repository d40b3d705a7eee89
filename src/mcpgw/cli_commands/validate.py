"""``mcpgw validate``: check a gateway YAML without starting it."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from mcpgw.cli_commands._output import console, print_spec_summary


@click.command()
@click.argument("config", type=click.Path(exists=True))
def validate(config: str) -> None:
    """Validate the gateway configuration in CONFIG."""
    from mcpgw.sdk.errors import GatewayConfigError
    from mcpgw.sdk.gateway import GatewayLoader

    try:
        spec = GatewayLoader(Path(config)).load()
    except GatewayConfigError as exc:
        console.print(f"[red]Validation error:[/red] {exc}")
        sys.exit(1)

    print_spec_summary(spec)
