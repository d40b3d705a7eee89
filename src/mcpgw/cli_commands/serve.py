"""``mcpgw serve``: newline-delimited JSON request loop on stdin/stdout."""

from __future__ import annotations

import asyncio
import json
import sys

import click

from mcpgw.cli_commands._output import err_console
from mcpgw.cli_commands.handle import parse_headers


@click.command()
@click.argument("config", type=click.Path(exists=True))
@click.option(
    "--header",
    "-H",
    "header_values",
    multiple=True,
    help="Header applied to every request, as NAME:VALUE (repeatable).",
)
def serve(config: str, header_values: tuple[str, ...]) -> None:
    """Serve the gateway defined in CONFIG over stdin/stdout.

    Each input line is one request body; each yields exactly one response
    line, notifications included. Blank lines are skipped.
    """
    from mcpgw.sdk.errors import GatewayConfigError
    from mcpgw.sdk.gateway import Gateway

    headers = parse_headers(header_values)
    stdin = click.get_text_stream("stdin")

    async def _serve() -> int:
        served = 0
        async with await Gateway.from_yaml(config) as gateway:
            while True:
                line = await asyncio.to_thread(stdin.readline)
                if not line:
                    break
                if not line.strip():
                    continue
                response = await gateway.handle(line, headers)
                click.echo(json.dumps(response, default=str))
                served += 1
        return served

    try:
        served = asyncio.run(_serve())
    except GatewayConfigError as exc:
        err_console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    err_console.print(f"Served {served} request(s).")
