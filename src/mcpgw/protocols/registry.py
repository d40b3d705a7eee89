"""ToolRegistry: maps tool names to definitions and execution handlers.

The registry is populated at startup and read-only afterwards. It is the
single execution path for both MCP ``tools/call`` and AI function calling,
so argument validation and exception classification live here.
"""

from __future__ import annotations

import inspect
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx
from jsonschema import Draft202012Validator
from jsonschema import ValidationError as SchemaValidationError
from pydantic import ValidationError as PydanticValidationError

from mcpgw.core.interface.models import ToolDefinition
from mcpgw.errors import (
    GatewayError,
    ToolExecutionError,
    ToolNetworkError,
    ToolNotFoundError,
    ToolParseError,
    ToolTimeoutError,
    ToolValidationError,
)
from mcpgw.utils.telemetry import ATTR_TOOL_NAME, ATTR_TOOL_SUCCESS, get_tracer

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[Any] | Any]


@dataclass(frozen=True)
class RegisteredTool:
    """A tool definition paired with its handler."""

    definition: ToolDefinition
    handler: ToolHandler

    @property
    def name(self) -> str:
        return self.definition.name


class ToolRegistry:
    """Name-to-tool routing table.

    Usage::

        registry = ToolRegistry()
        registry.register(ToolDefinition(name="echo", inputSchema={...}), echo_handler)

        definitions = registry.definitions()      # for tools/list and providers
        result = await registry.execute("echo", {"text": "hi"})
    """

    def __init__(self) -> None:
        self._tools: dict[str, RegisteredTool] = {}
        self._validators: dict[str, Draft202012Validator] = {}

    def register(self, definition: ToolDefinition, handler: ToolHandler) -> None:
        """Add a tool. Names are unique; a duplicate name is a configuration error."""
        if definition.name in self._tools:
            msg = f"Tool already registered: {definition.name}"
            raise ValueError(msg)
        Draft202012Validator.check_schema(definition.input_schema)
        self._tools[definition.name] = RegisteredTool(definition, handler)
        self._validators[definition.name] = Draft202012Validator(definition.input_schema)
        logger.debug("Registered tool: %s", definition.name)

    def get(self, name: str) -> RegisteredTool:
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def definitions(self) -> list[ToolDefinition]:
        """Return all tool definitions in registration order."""
        return [tool.definition for tool in self._tools.values()]

    def validate(self, name: str, arguments: Any) -> dict[str, Any]:
        """Check *arguments* against the tool's input schema.

        Raises:
            ToolNotFoundError: Unknown tool name.
            ToolValidationError: Arguments are not an object or violate the schema.
        """
        self.get(name)
        if not isinstance(arguments, dict):
            raise ToolValidationError(name, "arguments must be an object")
        errors = list(self._validators[name].iter_errors(arguments))
        if errors:
            detail = "; ".join(_format_schema_error(err) for err in errors)
            raise ToolValidationError(name, detail)
        return arguments

    async def execute(self, name: str, arguments: Any) -> Any:
        """Validate and run a tool, returning the handler's raw result.

        Handler exceptions are classified into the ``ToolExecutionError``
        family; gateway errors raised by handlers pass through unchanged.
        """
        with _tracer.start_as_current_span("tool.execute") as span:
            span.set_attribute(ATTR_TOOL_NAME, name)
            tool = self.get(name)
            validated = self.validate(name, arguments)
            try:
                result = tool.handler(validated)
                if inspect.isawaitable(result):
                    result = await result
            except GatewayError:
                span.set_attribute(ATTR_TOOL_SUCCESS, False)
                raise
            except Exception as exc:
                span.set_attribute(ATTR_TOOL_SUCCESS, False)
                raise classify_exception(name, exc) from exc
            span.set_attribute(ATTR_TOOL_SUCCESS, True)
            return result


def classify_exception(name: str, exc: BaseException) -> ToolExecutionError:
    """Map an arbitrary handler exception onto the tool error family."""
    if isinstance(exc, (SchemaValidationError, PydanticValidationError)):
        return ToolValidationError(name, str(exc))
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return ToolTimeoutError(name, str(exc) or "timed out")
    if isinstance(exc, httpx.HTTPError):
        return ToolNetworkError(name, str(exc))
    if isinstance(exc, json.JSONDecodeError):
        return ToolParseError(name, str(exc))
    if isinstance(exc, (ValueError, TypeError)):
        return ToolValidationError(name, str(exc))
    logger.exception("Unexpected failure in tool %s", name)
    return ToolExecutionError(
        name,
        str(exc),
        data={"tool": name, "kind": "unexpected", "exception": type(exc).__name__, "detail": str(exc)},
    )


def render_result(result: Any) -> str:
    """Render a handler result as the text of an MCP content block."""
    if isinstance(result, str):
        return result
    return json.dumps(result, ensure_ascii=False, default=str)


def _format_schema_error(err: SchemaValidationError) -> str:
    location = "/".join(str(p) for p in err.absolute_path)
    return f"{location}: {err.message}" if location else err.message
