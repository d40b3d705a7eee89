from mcpgw.protocols.mcp.models import JsonRpcRequest, JsonRpcResponse, MCPMethod, MCPToolDef


class TestJsonRpcRequest:
    def test_positional_params_have_no_names(self) -> None:
        assert JsonRpcRequest(method="x", params=[1, 2]).named_params == {}
        assert JsonRpcRequest(method="x", params={"a": 1}).named_params == {"a": 1}


class TestJsonRpcResponse:
    def test_success_wire_has_no_error_member(self) -> None:
        wire = JsonRpcResponse.success(3, {"ok": True}).to_wire()
        assert wire == {"jsonrpc": "2.0", "result": {"ok": True}, "id": 3}

    def test_success_with_null_result_keeps_member(self) -> None:
        assert "result" in JsonRpcResponse.success(1, None).to_wire()

    def test_failure_wire_has_no_result_member(self) -> None:
        wire = JsonRpcResponse.failure("a", -32601, "Method not found").to_wire()
        assert wire == {
            "jsonrpc": "2.0",
            "error": {"code": -32601, "message": "Method not found"},
            "id": "a",
        }


class TestMCPMethod:
    def test_lookup(self) -> None:
        assert MCPMethod.lookup("tools/call") is MCPMethod.TOOLS_CALL
        assert MCPMethod.lookup("tools/delete") is None


def test_tool_def_accepts_wire_alias() -> None:
    tool = MCPToolDef.model_validate({"name": "t", "inputSchema": {"type": "object"}})
    assert tool.input_schema == {"type": "object"}
    assert MCPToolDef(name="bare").input_schema == {"type": "object", "properties": {}}
