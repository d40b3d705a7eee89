"""Error taxonomy shared by every layer of the gateway.

Each error class carries three renderings of the same failure:

* ``code``: the JSON-RPC 2.0 error code used on the MCP path.
* ``error_type``: the class name reported as ``errorType`` on the agent path.
* ``error_code``: the stable machine-readable ``errorCode`` on the agent path.

Errors are converted to envelopes at the nearest boundary (the MCP handler or
the agent handler); they never reach the transport as exceptions.
"""

from __future__ import annotations

from typing import Any

# JSON-RPC 2.0 standard codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Server-defined range (-32000..-32099)
SERVER_ERROR = -32000
AUTHENTICATION_FAILED = -32001
RESOURCE_READ_FAILED = -32002


class GatewayError(Exception):
    """Base error for all gateway failures."""

    code: int = INTERNAL_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        data: Any = None,
        error_code: str | None = None,
    ) -> None:
        self.message = message
        self.data = data
        if error_code is not None:
            self.error_code = error_code
        super().__init__(message)

    @property
    def error_type(self) -> str:
        return type(self).__name__

    def to_jsonrpc(self) -> dict[str, Any]:
        """Render as a JSON-RPC ``error`` object."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            error["data"] = self.data
        return error

    def to_agent(self) -> dict[str, Any]:
        """Render as an agent error envelope."""
        return {
            "response": None,
            "error": self.message,
            "errorType": self.error_type,
            "errorCode": self.error_code,
            "details": self.data if self.data is not None else {},
        }


class ParseError(GatewayError):
    """The inbound payload is not valid JSON."""

    code = PARSE_ERROR
    error_code = "INVALID_JSON"


class ProtocolValidationError(GatewayError):
    """The request does not have a valid JSON-RPC (or agent) shape."""

    code = INVALID_REQUEST
    error_code = "INVALID_REQUEST"


class RequestValidationError(ProtocolValidationError):
    """An agent request envelope failed field validation.

    Reported to agent callers as ``errorType: "ValidationError"``.
    """

    @property
    def error_type(self) -> str:
        return "ValidationError"


class MethodNotFoundError(GatewayError):
    """The JSON-RPC method is unknown or unsupported."""

    code = METHOD_NOT_FOUND
    error_code = "METHOD_NOT_FOUND"


class InvalidParamsError(GatewayError):
    """The method parameters are missing or malformed."""

    code = INVALID_PARAMS
    error_code = "INVALID_PARAMS"


class ToolNotFoundError(MethodNotFoundError):
    """Requested tool is not registered.

    Reported as method-not-found: the tool is the "method" being invoked.
    """

    error_code = "TOOL_NOT_FOUND"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tool not found: {name}", data={"tool": name})


class ToolExecutionError(GatewayError):
    """A tool invocation failed.

    The base class covers unexpected failures; subclasses narrow the kind.
    """

    code = SERVER_ERROR
    error_code = "TOOL_EXECUTION_FAILED"
    kind = "unexpected"

    def __init__(self, name: str, detail: str = "", *, data: Any = None) -> None:
        self.name = name
        self.detail = detail
        message = f"Tool execution failed: {name}" + (f": {detail}" if detail else "")
        if data is None:
            data = {"tool": name, "kind": self.kind}
            if detail:
                data["detail"] = detail
        super().__init__(message, data=data)


class ToolValidationError(ToolExecutionError):
    """Tool arguments failed validation."""

    code = INVALID_PARAMS
    error_code = "TOOL_VALIDATION_FAILED"
    kind = "validation"


class ToolNetworkError(ToolExecutionError):
    """A tool's backing service could not be reached or returned an error status."""

    error_code = "TOOL_NETWORK_ERROR"
    kind = "network"


class ToolParseError(ToolExecutionError):
    """A tool's backing service returned a malformed response."""

    code = PARSE_ERROR
    error_code = "TOOL_PARSE_ERROR"
    kind = "parse"


class ToolTimeoutError(ToolExecutionError):
    """A tool's backing service did not answer in time."""

    error_code = "TOOL_TIMEOUT"
    kind = "timeout"


class ResourceReadError(GatewayError):
    """A resource URI could not be resolved or fetched."""

    code = RESOURCE_READ_FAILED
    error_code = "RESOURCE_READ_FAILED"

    def __init__(self, uri: str, detail: str = "") -> None:
        self.uri = uri
        self.detail = detail
        message = f"Failed to read resource: {uri}" + (f": {detail}" if detail else "")
        super().__init__(message, data={"uri": uri})


class UpstreamProviderError(GatewayError):
    """The AI provider returned a non-2xx response or could not be reached."""

    code = SERVER_ERROR
    error_code = "UPSTREAM_HTTP_ERROR"

    def __init__(self, message: str, *, status: int | None = None, body: str = "") -> None:
        self.status = status
        self.body = body
        super().__init__(message, data={"status": status, "body": body})


class AuthenticationError(GatewayError):
    """The AI provider API key is missing or was rejected."""

    code = AUTHENTICATION_FAILED
    error_code = "MISSING_API_KEY"


class InternalError(GatewayError):
    """An unanticipated failure."""

    code = INTERNAL_ERROR
    error_code = "INTERNAL_ERROR"
