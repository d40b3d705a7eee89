"""Tests for the gateway error taxonomy."""

from __future__ import annotations

import pytest

from mcpgw.errors import (
    AuthenticationError,
    GatewayError,
    InternalError,
    InvalidParamsError,
    MethodNotFoundError,
    ParseError,
    ProtocolValidationError,
    RequestValidationError,
    ResourceReadError,
    ToolExecutionError,
    ToolNetworkError,
    ToolNotFoundError,
    ToolParseError,
    ToolTimeoutError,
    ToolValidationError,
    UpstreamProviderError,
)


class TestCodes:
    @pytest.mark.parametrize(
        ("error", "code", "error_code"),
        [
            (ParseError("x"), -32700, "INVALID_JSON"),
            (ProtocolValidationError("x"), -32600, "INVALID_REQUEST"),
            (MethodNotFoundError("x"), -32601, "METHOD_NOT_FOUND"),
            (InvalidParamsError("x"), -32602, "INVALID_PARAMS"),
            (ToolNotFoundError("t"), -32601, "TOOL_NOT_FOUND"),
            (ToolExecutionError("t"), -32000, "TOOL_EXECUTION_FAILED"),
            (ToolValidationError("t"), -32602, "TOOL_VALIDATION_FAILED"),
            (ToolNetworkError("t"), -32000, "TOOL_NETWORK_ERROR"),
            (ToolParseError("t"), -32700, "TOOL_PARSE_ERROR"),
            (ToolTimeoutError("t"), -32000, "TOOL_TIMEOUT"),
            (ResourceReadError("file:///x"), -32002, "RESOURCE_READ_FAILED"),
            (UpstreamProviderError("x"), -32000, "UPSTREAM_HTTP_ERROR"),
            (AuthenticationError("x"), -32001, "MISSING_API_KEY"),
            (InternalError("x"), -32603, "INTERNAL_ERROR"),
        ],
    )
    def test_code_mapping(self, error: GatewayError, code: int, error_code: str) -> None:
        assert error.code == code
        assert error.error_code == error_code

    def test_tool_not_found_is_method_not_found(self) -> None:
        assert isinstance(ToolNotFoundError("t"), MethodNotFoundError)

    def test_tool_errors_share_base(self) -> None:
        for cls in (ToolValidationError, ToolNetworkError, ToolParseError, ToolTimeoutError):
            assert issubclass(cls, ToolExecutionError)

    def test_error_code_override(self) -> None:
        err = AuthenticationError("rejected", error_code="INVALID_API_KEY")
        assert err.error_code == "INVALID_API_KEY"
        # class default untouched
        assert AuthenticationError("x").error_code == "MISSING_API_KEY"


class TestRendering:
    def test_jsonrpc_omits_absent_data(self) -> None:
        assert InvalidParamsError("bad").to_jsonrpc() == {"code": -32602, "message": "bad"}

    def test_jsonrpc_includes_data(self) -> None:
        err = ToolTimeoutError("search", "took too long")
        rendered = err.to_jsonrpc()
        assert rendered["code"] == -32000
        assert rendered["data"] == {"tool": "search", "kind": "timeout", "detail": "took too long"}
        assert rendered["message"] == "Tool execution failed: search: took too long"

    def test_agent_envelope(self) -> None:
        envelope = ParseError("Invalid JSON").to_agent()
        assert envelope == {
            "response": None,
            "error": "Invalid JSON",
            "errorType": "ParseError",
            "errorCode": "INVALID_JSON",
            "details": {},
        }

    def test_request_validation_reports_validation_error_type(self) -> None:
        envelope = RequestValidationError("missing input").to_agent()
        assert envelope["errorType"] == "ValidationError"
        assert envelope["errorCode"] == "INVALID_REQUEST"

    def test_upstream_error_carries_status_and_body(self) -> None:
        err = UpstreamProviderError("HTTP 500", status=500, body="oops")
        assert err.status == 500
        assert err.to_agent()["details"] == {"status": 500, "body": "oops"}

    def test_resource_error_message(self) -> None:
        err = ResourceReadError("https://x/y", "HTTP 404")
        assert err.message == "Failed to read resource: https://x/y: HTTP 404"
        assert err.data == {"uri": "https://x/y"}
