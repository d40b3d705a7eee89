"""Tests for the gateway YAML models."""

import pytest
from pydantic import ValidationError

from mcpgw.sdk.models import GatewaySpec


class TestGatewaySpec:
    def test_defaults(self) -> None:
        spec = GatewaySpec()
        assert spec.server.protocol_version == "2024-11-05"
        assert spec.agent.max_iterations == 10
        assert spec.agent.parallel_tools is False
        assert spec.cache.ttl == 300
        assert spec.telemetry is None

    def test_unknown_builtin_tool(self) -> None:
        with pytest.raises(ValidationError):
            GatewaySpec.model_validate({"builtin_tools": ["shell"]})

    def test_duplicate_tool_names(self) -> None:
        http_tool = {"name": "fetch_resource", "url_template": "https://x"}
        with pytest.raises(ValidationError, match="duplicate tool 'fetch_resource'"):
            GatewaySpec.model_validate(
                {"builtin_tools": ["fetch_resource"], "http_tools": [http_tool]}
            )

    def test_duplicate_prompt_names(self) -> None:
        with pytest.raises(ValidationError, match="duplicate prompt 'p'"):
            GatewaySpec.model_validate({"prompts": [{"name": "p"}, {"name": "p"}]})

    def test_duplicate_resource_uris(self) -> None:
        resource = {"uri": "notes://a", "name": "a"}
        with pytest.raises(ValidationError, match="duplicate resource"):
            GatewaySpec.model_validate({"resources": [resource, resource]})

    def test_duplicate_upstreams(self) -> None:
        upstream = {"name": "docs", "url": "https://up/mcp"}
        with pytest.raises(ValidationError, match="duplicate upstream_mcp 'docs'"):
            GatewaySpec.model_validate({"upstream_mcp": [upstream, upstream]})

    def test_agent_temperature_bounds(self) -> None:
        with pytest.raises(ValidationError):
            GatewaySpec.model_validate({"agent": {"temperature": 3}})

    def test_resource_mime_alias(self) -> None:
        spec = GatewaySpec.model_validate(
            {"resources": [{"uri": "notes://a", "name": "a", "mimeType": "text/markdown"}]}
        )
        assert spec.resources[0].mime_type == "text/markdown"
