"""Gateway loading and wiring for the mcpgw SDK."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import yaml
from jsonschema.exceptions import SchemaError
from pydantic import ValidationError

from mcpgw.core.interface.client import CompletionClient
from mcpgw.core.orchestration.agent import AgentHandler
from mcpgw.protocols.cache import ToolListCache
from mcpgw.protocols.http_tools import FETCH_RESOURCE, fetch_resource_tool, register_http_tools
from mcpgw.protocols.mcp.client import UpstreamMCPClient, register_upstream_tools
from mcpgw.protocols.mcp.handler import MCPHandler
from mcpgw.protocols.mcp.models import ServerInfo
from mcpgw.protocols.mcp.transport import MCPTransport  # noqa: TC001
from mcpgw.protocols.prompts import PromptDefinition, PromptRegistry, TemplatePromptBuilder
from mcpgw.protocols.registry import ToolRegistry
from mcpgw.protocols.resources import HttpResourceFetcher, ResourceReader, SchemeReader
from mcpgw.router import RequestRouter
from mcpgw.sdk.errors import GatewayConfigError
from mcpgw.sdk.models import GatewaySpec
from mcpgw.utils.telemetry import configure_telemetry


class GatewayLoader:
    """Load and validate a gateway YAML file into a :class:`GatewaySpec`."""

    def __init__(self, path: Path) -> None:
        self._path = path

    def load(self) -> GatewaySpec:
        """Read YAML, interpolate env vars, and validate.

        Environment variables in the form ``${VAR}`` or ``$VAR`` are expanded
        using :func:`os.path.expandvars` before YAML parsing.

        Raises:
            GatewayConfigError: On read errors, YAML parse errors or schema
                validation failures.
        """
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise GatewayConfigError(f"Cannot read {self._path}: {exc}") from exc

        expanded = os.path.expandvars(raw)

        try:
            data: Any = yaml.safe_load(expanded)
        except yaml.YAMLError as exc:
            raise GatewayConfigError(f"YAML parse error: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise GatewayConfigError("Gateway YAML must be a mapping")

        try:
            return GatewaySpec.model_validate(data)
        except ValidationError as exc:
            raise GatewayConfigError(str(exc)) from exc


@dataclass
class Gateway:
    """A fully wired gateway: registries, handlers, and the router."""

    spec: GatewaySpec
    tools: ToolRegistry
    resources: ResourceReader
    prompts: PromptRegistry
    cache: ToolListCache
    client: CompletionClient
    mcp: MCPHandler
    agent: AgentHandler
    router: RequestRouter
    upstreams: list[UpstreamMCPClient] = field(default_factory=list)

    @classmethod
    async def from_yaml(cls, path: str | Path, **kwargs: Any) -> Gateway:
        """Load a gateway YAML and return a wired gateway."""
        spec = GatewayLoader(Path(path)).load()
        return await build_gateway(spec, **kwargs)

    async def handle(
        self, body: bytes | str, headers: Mapping[str, str] | None = None
    ) -> dict[str, Any]:
        return await self.router.route(body, headers)

    async def aclose(self) -> None:
        for upstream in self.upstreams:
            await upstream.close()

    async def __aenter__(self) -> Gateway:
        return self

    async def __aexit__(self, *_: object) -> None:
        await self.aclose()


async def build_gateway(
    spec: GatewaySpec,
    *,
    http_client: httpx.AsyncClient | None = None,
    upstream_transports: Mapping[str, MCPTransport] | None = None,
    cache: ToolListCache | None = None,
) -> Gateway:
    """Wire every component declared in *spec*.

    Steps:
    1. Build the resource reader and prompt registry.
    2. Register built-in, HTTP, and upstream MCP tools.
    3. Create the completion client, the MCP and agent handlers, and the router.
    4. Optionally configure telemetry.

    ``http_client`` is shared by the completion client, HTTP tools and the
    resource reader. ``upstream_transports`` maps upstream names to
    transports (tests inject in-memory transports).

    Raises:
        GatewayConfigError: Tool name collisions or unreachable upstreams.
    """
    readers: dict[str, SchemeReader] = {}
    if http_client is not None:
        fetcher = HttpResourceFetcher(http_client=http_client)
        readers = {"http": fetcher, "https": fetcher}
    resources = ResourceReader(spec.resources, readers=readers)

    prompts = PromptRegistry()
    for prompt in spec.prompts:
        definition = PromptDefinition(
            name=prompt.name, description=prompt.description, arguments=prompt.arguments
        )
        prompts.register(definition, TemplatePromptBuilder(prompt.messages))

    tools = ToolRegistry()
    if FETCH_RESOURCE in spec.builtin_tools:
        tools.register(*fetch_resource_tool(resources))
    try:
        register_http_tools(tools, spec.http_tools, http_client=http_client)
    except (ValueError, SchemaError) as exc:
        raise GatewayConfigError(f"http_tools: {exc}") from exc

    if cache is None:
        cache = ToolListCache(spec.cache.ttl, spec.cache.max_entries)
    upstreams: list[UpstreamMCPClient] = []
    transports = upstream_transports or {}
    for ref in spec.upstream_mcp:
        upstream = UpstreamMCPClient(
            ref.url,
            cache=cache,
            transport=transports.get(ref.name),
            headers=ref.headers,
            timeout=ref.timeout,
        )
        upstreams.append(upstream)
        try:
            await register_upstream_tools(tools, upstream)
        except Exception as exc:
            for opened in upstreams:
                await opened.close()
            raise GatewayConfigError(f"upstream_mcp '{ref.name}': {exc}") from exc

    client = CompletionClient(spec.provider, http_client=http_client)
    mcp = MCPHandler(
        tools,
        resources=resources,
        prompts=prompts,
        server_info=ServerInfo(
            name=spec.server.name,
            version=spec.server.version,
            protocol_version=spec.server.protocol_version,
        ),
    )
    agent = AgentHandler(
        client,
        tools,
        max_iterations=spec.agent.max_iterations,
        temperature=spec.agent.temperature,
        max_tokens=spec.agent.max_tokens,
        system_prompt=spec.agent.system_prompt,
        parallel_tools=spec.agent.parallel_tools,
    )

    if spec.telemetry is not None:
        configure_telemetry(
            spec.telemetry,
            service_name=spec.server.name,
            service_version=spec.server.version,
        )

    return Gateway(
        spec=spec,
        tools=tools,
        resources=resources,
        prompts=prompts,
        cache=cache,
        client=client,
        mcp=mcp,
        agent=agent,
        router=RequestRouter(mcp, agent),
        upstreams=upstreams,
    )
