"""Tests for GatewayLoader."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from pathlib import Path

from mcpgw.core.interface.config import ProviderKind
from mcpgw.sdk.errors import GatewayConfigError
from mcpgw.sdk.gateway import GatewayLoader

_VALID_YAML = """\
server:
  name: docs-gateway
  version: "2.0.0"
provider:
  kind: anthropic
  model: claude-3-5-haiku-latest
  api_key: test-key
agent:
  max_iterations: 4
  system_prompt: You answer questions about the docs.
builtin_tools: [fetch_resource]
http_tools:
  - name: get_weather
    description: Current weather for a city
    url_template: https://api.weather.example.com/v1/current
    params:
      - name: city
        location: query
resources:
  - uri: notes://faq
    name: faq
    text: Frequently asked questions
prompts:
  - name: summarize
    arguments:
      - name: page
        required: true
    messages:
      - content: Summarize $page.
"""


class TestGatewayLoader:
    def test_load_valid(self, tmp_path: Path) -> None:
        f = tmp_path / "gateway.yaml"
        f.write_text(_VALID_YAML)
        spec = GatewayLoader(f).load()
        assert spec.server.name == "docs-gateway"
        assert spec.provider.kind is ProviderKind.ANTHROPIC
        assert spec.agent.max_iterations == 4
        assert spec.builtin_tools == ["fetch_resource"]
        assert spec.http_tools[0].params[0].location == "query"
        assert spec.resources[0].text == "Frequently asked questions"
        assert spec.prompts[0].arguments[0].required

    def test_env_var_interpolation(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GW_PROVIDER_KEY", "secret-123")
        content = _VALID_YAML.replace("test-key", "${GW_PROVIDER_KEY}")
        f = tmp_path / "gateway.yaml"
        f.write_text(content)
        assert GatewayLoader(f).load().provider.api_key == "secret-123"

    def test_unset_env_var_leaves_key_empty(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("GW_UNSET_KEY", raising=False)
        f = tmp_path / "gateway.yaml"
        f.write_text(_VALID_YAML.replace("test-key", "${GW_UNSET_KEY}"))
        assert GatewayLoader(f).load().provider.api_key is None

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        f = tmp_path / "gateway.yaml"
        f.write_text("")
        spec = GatewayLoader(f).load()
        assert spec.provider.kind is ProviderKind.OPENAI
        assert spec.http_tools == []

    def test_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(GatewayConfigError, match="Cannot read"):
            GatewayLoader(tmp_path / "missing.yaml").load()

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        f = tmp_path / "bad.yaml"
        f.write_text("server: [unclosed")
        with pytest.raises(GatewayConfigError, match="YAML parse error"):
            GatewayLoader(f).load()

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        f = tmp_path / "list.yaml"
        f.write_text("- a\n- b\n")
        with pytest.raises(GatewayConfigError, match="must be a mapping"):
            GatewayLoader(f).load()

    def test_schema_violation(self, tmp_path: Path) -> None:
        f = tmp_path / "gateway.yaml"
        f.write_text("agent:\n  max_iterations: 0\n")
        with pytest.raises(GatewayConfigError, match="max_iterations"):
            GatewayLoader(f).load()
