"""``mcpgw handle``: route a single request through the gateway."""

from __future__ import annotations

import asyncio
import sys
from typing import IO

import click

from mcpgw.cli_commands._output import console, print_response


def parse_headers(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated ``NAME:VALUE`` options into a header mapping."""
    headers: dict[str, str] = {}
    for value in values:
        name, sep, content = value.partition(":")
        if not sep or not name.strip():
            msg = f"expected NAME:VALUE, got {value!r}"
            raise click.BadParameter(msg, param_hint="--header")
        headers[name.strip()] = content.strip()
    return headers


@click.command()
@click.argument("config", type=click.Path(exists=True))
@click.option(
    "--request",
    "-r",
    "request_file",
    type=click.File("r"),
    default="-",
    help="File holding the JSON request body ('-' reads stdin).",
)
@click.option(
    "--header",
    "-H",
    "header_values",
    multiple=True,
    help="Request header as NAME:VALUE (repeatable).",
)
def handle(config: str, request_file: IO[str], header_values: tuple[str, ...]) -> None:
    """Route one request body through the gateway defined in CONFIG."""
    from mcpgw.sdk.errors import GatewayConfigError
    from mcpgw.sdk.gateway import Gateway

    headers = parse_headers(header_values)
    body = request_file.read()

    async def _handle() -> dict[str, object]:
        async with await Gateway.from_yaml(config) as gateway:
            return await gateway.handle(body, headers)

    try:
        response = asyncio.run(_handle())
    except GatewayConfigError as exc:
        console.print(f"[red]Configuration error:[/red] {exc}")
        sys.exit(1)

    print_response(response)
