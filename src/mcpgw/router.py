"""RequestRouter: classifies an inbound body as MCP or agent and dispatches it.

The router always yields a response body: parse failures, unrecognized
shapes, and unexpected exceptions are all rendered as envelopes.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from mcpgw.core.orchestration.agent import AgentHandler  # noqa: TC001
from mcpgw.errors import GatewayError, InternalError, ParseError, ProtocolValidationError
from mcpgw.protocols.mcp.handler import MCPHandler  # noqa: TC001
from mcpgw.protocols.mcp.models import JSONRPC_VERSION
from mcpgw.utils.telemetry import ATTR_REQUEST_KIND, get_tracer, record_error

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

REQUEST_KIND_MCP = "mcp"
REQUEST_KIND_AGENT = "agent"


class RequestRouter:
    """Single entry point for the hosting transport.

    Usage::

        router = RequestRouter(mcp_handler, agent_handler)
        response = await router.route(body, headers)
    """

    def __init__(self, mcp: MCPHandler, agent: AgentHandler) -> None:
        self.mcp = mcp
        self.agent = agent

    async def route(
        self,
        body: bytes | str,
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Parse *body* and return the response envelope."""
        with _tracer.start_as_current_span("router.route") as span:
            try:
                payload = json.loads(body)
            except (ValueError, RecursionError) as exc:
                error: GatewayError = ParseError(f"Invalid JSON: {exc}")
                record_error(span, error)
                return error.to_agent()

            try:
                kind = classify(payload)
            except ProtocolValidationError as exc:
                record_error(span, exc)
                return exc.to_agent()
            span.set_attribute(ATTR_REQUEST_KIND, kind)

            try:
                if kind == REQUEST_KIND_AGENT:
                    return await self.agent.handle(payload, headers)
                if "jsonrpc" not in payload:
                    payload = {"jsonrpc": JSONRPC_VERSION, **payload}
                return await self.mcp.handle(payload)
            except Exception as exc:
                logger.exception("Unhandled error while routing %s request", kind)
                error = InternalError(f"Internal error: {exc}")
                record_error(span, error)
                return error.to_agent()


def classify(payload: Any) -> str:
    """Return the request kind for a decoded payload.

    ``jsonrpc`` wins over the agent fields; a bare ``method`` is treated as
    MCP with the version implied.

    Raises:
        ProtocolValidationError: The payload matches neither shape.
    """
    if isinstance(payload, dict):
        if "jsonrpc" in payload:
            return REQUEST_KIND_MCP
        if "mode" in payload or "input" in payload:
            return REQUEST_KIND_AGENT
        if "method" in payload:
            return REQUEST_KIND_MCP
    raise ProtocolValidationError(
        "Unrecognized request: expected a JSON object with a 'jsonrpc', 'method' or 'input' field",
        error_code="UNRECOGNIZED_REQUEST",
    )
