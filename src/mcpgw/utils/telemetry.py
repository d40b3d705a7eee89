"""Tracing for the gateway: span attribute keys, span helpers and provider setup.

Modules take a tracer from :func:`get_tracer` at import time. Until
:func:`configure_telemetry` installs an SDK provider those tracers are the
OpenTelemetry API's no-ops, so the gateway runs without the ``otel`` extra.

Usage::

    from mcpgw.utils.telemetry import get_tracer, record_error

    _tracer = get_tracer(__name__)

    with _tracer.start_as_current_span("mcp.dispatch") as span:
        try:
            ...
        except GatewayError as exc:
            record_error(span, exc)
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

if TYPE_CHECKING:
    from mcpgw.core.interface.models import TokenUsage
    from mcpgw.errors import GatewayError
    from mcpgw.sdk.models import TelemetrySettings

ATTR_REQUEST_KIND = "mcpgw.request.kind"
ATTR_METHOD = "mcpgw.method"
ATTR_ERROR_CODE = "mcpgw.error.code"
ATTR_ERROR_TYPE = "mcpgw.error.type"
ATTR_MAX_ITERATIONS = "mcpgw.max_iterations"
ATTR_ITERATIONS = "mcpgw.iterations"
ATTR_STOP_REASON = "mcpgw.stop_reason"
ATTR_MODEL = "mcpgw.model"
ATTR_PROVIDER = "mcpgw.provider"
ATTR_TOKENS_PROMPT = "mcpgw.tokens.prompt"
ATTR_TOKENS_COMPLETION = "mcpgw.tokens.completion"
ATTR_TOKENS_TOTAL = "mcpgw.tokens.total"
ATTR_FINISH_REASON = "mcpgw.finish_reason"
ATTR_TOOL_NAME = "mcpgw.tool.name"
ATTR_TOOL_SUCCESS = "mcpgw.tool.success"

_INSTRUMENTATION_NAME = "mcpgw"


def get_tracer(name: str | None = None) -> trace.Tracer:
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def record_error(span: Span, error: GatewayError) -> None:
    """Tag *span* with a gateway error's JSON-RPC code and type, and mark it failed."""
    span.set_attribute(ATTR_ERROR_CODE, error.code)
    span.set_attribute(ATTR_ERROR_TYPE, error.error_type)
    span.set_status(Status(StatusCode.ERROR, error.message))


def record_usage(span: Span, usage: TokenUsage) -> None:
    span.set_attribute(ATTR_TOKENS_PROMPT, usage.prompt_tokens)
    span.set_attribute(ATTR_TOKENS_COMPLETION, usage.completion_tokens)
    span.set_attribute(ATTR_TOKENS_TOTAL, usage.total_tokens)


def configure_telemetry(
    settings: TelemetrySettings,
    *,
    service_name: str = "mcp-gateway",
    service_version: str | None = None,
) -> Any:
    """Install an SDK tracer provider built from the gateway's telemetry block.

    Returns the installed ``TracerProvider``, or ``None`` when
    ``settings.enabled`` is false (the API's no-op provider stays in place).

    Console spans are written to stderr: ``mcpgw serve`` owns stdout for
    responses.

    Raises:
        ImportError: ``opentelemetry-sdk`` (or, for ``otlp_endpoint``, the
            OTLP exporter) is not installed. Install ``mcp-gateway[otel]``.
    """
    if not settings.enabled:
        return None
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
    except ImportError as exc:
        msg = "opentelemetry-sdk is required for gateway telemetry: pip install mcp-gateway[otel]"
        raise ImportError(msg) from exc

    attributes = {"service.name": service_name}
    if service_version:
        attributes["service.version"] = service_version
    provider = TracerProvider(resource=Resource.create(attributes))
    for processor in _span_processors(settings):
        provider.add_span_processor(processor)
    trace.set_tracer_provider(provider)
    return provider


def _span_processors(settings: TelemetrySettings) -> list[Any]:
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    processors: list[Any] = []
    if settings.export_to_console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))
    if settings.otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            msg = (
                "opentelemetry-exporter-otlp is required for otlp_endpoint: "
                "pip install mcp-gateway[otel]"
            )
            raise ImportError(msg) from exc
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))
    return processors
