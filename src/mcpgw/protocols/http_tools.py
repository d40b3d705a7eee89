"""HTTP tools: registry handlers for templated HTTP endpoints.

Tools are declared in the gateway YAML as a URL template plus a list of
parameter mappings. Each parameter lands in the path, the query string, a
header, or the JSON body of the request.
"""

from __future__ import annotations

import json
from typing import Any, Literal
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from mcpgw.core.interface.models import ToolDefinition
from mcpgw.errors import ToolNetworkError, ToolParseError, ToolTimeoutError
from mcpgw.protocols.registry import ToolHandler, ToolRegistry
from mcpgw.protocols.resources import ResourceReader

FETCH_RESOURCE = "fetch_resource"


class HttpParamMapping(BaseModel):
    """Maps a single tool argument to its location in the request."""

    name: str
    location: Literal["path", "query", "header", "body"] = "query"
    type: str = "string"
    description: str = ""
    required: bool = True
    default: Any = None


class HttpToolDef(BaseModel):
    """Definition for an HTTP-backed tool."""

    name: str
    url_template: str
    method: str = "GET"
    headers: dict[str, str] = {}
    params: list[HttpParamMapping] = []
    body_template: dict[str, Any] | None = None
    response_path: str | None = None
    timeout: float = 30.0
    description: str = ""

    def to_definition(self) -> ToolDefinition:
        """Derive the JSON Schema advertised for this tool."""
        properties: dict[str, Any] = {}
        required: list[str] = []
        for param in self.params:
            properties[param.name] = {"type": param.type, "description": param.description}
            if param.required and param.default is None:
                required.append(param.name)
        schema: dict[str, Any] = {"type": "object", "properties": properties}
        if required:
            schema["required"] = required
        return ToolDefinition(name=self.name, description=self.description, input_schema=schema)


class HttpToolExecutor:
    """Callable tool handler that performs one templated HTTP request."""

    def __init__(self, tool: HttpToolDef, *, http_client: httpx.AsyncClient | None = None) -> None:
        self.tool = tool
        self._http = http_client

    async def __call__(self, arguments: dict[str, Any]) -> Any:
        tool = self.tool
        url = self._substitute_template(tool.url_template, arguments, tool)
        headers = dict(tool.headers)
        query_params: dict[str, str] = {}
        body: dict[str, Any] | None = None

        for param in tool.params:
            value = arguments.get(param.name, param.default)
            if value is None:
                continue
            if param.location == "query":
                query_params[param.name] = str(value)
            elif param.location == "header":
                headers[param.name] = str(value)
            elif param.location == "body":
                if body is None:
                    body = {}
                body[param.name] = value

        if tool.body_template is not None:
            merged = dict(tool.body_template)
            if body:
                merged.update(body)
            body = merged

        try:
            response = await self._request(url, headers, query_params, body)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ToolTimeoutError(tool.name, f"request to {url} timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise ToolNetworkError(
                tool.name,
                f"HTTP {exc.response.status_code} from {url}",
                data={
                    "tool": tool.name,
                    "kind": "network",
                    "status": exc.response.status_code,
                    "body": exc.response.text[:2000],
                },
            ) from exc
        except httpx.HTTPError as exc:
            raise ToolNetworkError(tool.name, str(exc)) from exc

        return self._decode(response)

    async def _request(
        self,
        url: str,
        headers: dict[str, str],
        query_params: dict[str, str],
        body: dict[str, Any] | None,
    ) -> httpx.Response:
        kwargs: dict[str, Any] = {
            "method": self.tool.method,
            "url": url,
            "headers": headers,
            "params": query_params,
            "json": body if body else None,
            "timeout": self.tool.timeout,
        }
        if self._http is not None:
            return await self._http.request(**kwargs)
        async with httpx.AsyncClient() as client:
            return await client.request(**kwargs)

    def _decode(self, response: httpx.Response) -> Any:
        """Return the body, parsed when JSON, narrowed by ``response_path``."""
        tool = self.tool
        content_type = response.headers.get("content-type", "")
        is_json = "json" in content_type

        if not tool.response_path:
            if not is_json:
                return response.text
            try:
                return response.json()
            except ValueError as exc:
                raise ToolParseError(tool.name, f"invalid JSON response: {exc}") from exc

        try:
            data: Any = json.loads(response.text)
            for key in tool.response_path.split("."):
                data = data[int(key)] if isinstance(data, list) else data[key]
        except ValueError as exc:
            raise ToolParseError(tool.name, f"invalid JSON response: {exc}") from exc
        except (KeyError, IndexError, TypeError) as exc:
            raise ToolParseError(
                tool.name, f"response path {tool.response_path!r} not found"
            ) from exc
        return data

    @staticmethod
    def _substitute_template(template: str, arguments: dict[str, Any], tool: HttpToolDef) -> str:
        """Replace ``{param}`` placeholders in a URL template with argument values."""
        result = template
        for param in tool.params:
            if param.location == "path":
                value = arguments.get(param.name, param.default)
                if value is not None:
                    result = result.replace(f"{{{param.name}}}", quote(str(value), safe=""))
        return result


def register_http_tools(
    registry: ToolRegistry,
    tools: list[HttpToolDef],
    *,
    http_client: httpx.AsyncClient | None = None,
) -> None:
    """Register every HTTP tool definition with the registry."""
    for tool in tools:
        registry.register(tool.to_definition(), HttpToolExecutor(tool, http_client=http_client))


def fetch_resource_tool(reader: ResourceReader) -> tuple[ToolDefinition, ToolHandler]:
    """Build the built-in ``fetch_resource`` tool backed by *reader*."""
    definition = ToolDefinition(
        name=FETCH_RESOURCE,
        description=(
            "Fetch a registered documentation resource by URI and return its "
            "content as text."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "uri": {"type": "string", "description": "Resource URI to read"},
            },
            "required": ["uri"],
        },
    )

    async def handler(arguments: dict[str, Any]) -> str:
        content = await reader.read(arguments["uri"])
        return content.text

    return definition, handler
