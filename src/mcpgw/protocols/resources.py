"""Resource reading: descriptors, URI resolution, and per-scheme fetchers.

Only URIs that match a configured descriptor (concrete or templated) are
readable. Content is fetched by a reader chosen from the URI scheme, then
normalized: JSON is parsed and pretty-printed, text is passed through, and
anything else becomes a binary-metadata stub.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Protocol
from urllib.parse import urlsplit

import httpx
from pydantic import BaseModel, ConfigDict, Field

from mcpgw.errors import ResourceReadError

logger = logging.getLogger(__name__)

_TEMPLATE_PARAM = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")
_TEXT_TYPES = (
    "application/xml",
    "application/javascript",
    "application/x-yaml",
    "application/yaml",
)


class ResourceDescriptor(BaseModel):
    """A resource exposed over MCP, addressed by URI.

    A URI containing ``{param}`` placeholders is a template. Descriptors
    with ``text`` set are served inline without any fetch.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uri: str
    name: str
    description: str = ""
    mime_type: str = Field(default="text/plain", alias="mimeType")
    text: str | None = None

    @property
    def is_template(self) -> bool:
        return bool(_TEMPLATE_PARAM.search(self.uri))

    def matches(self, uri: str) -> bool:
        if not self.is_template:
            return uri == self.uri
        return _template_regex(self.uri).fullmatch(uri) is not None

    def to_mcp(self) -> dict[str, Any]:
        if self.is_template:
            return {
                "uriTemplate": self.uri,
                "name": self.name,
                "description": self.description,
                "mimeType": self.mime_type,
            }
        return {
            "uri": self.uri,
            "name": self.name,
            "description": self.description,
            "mimeType": self.mime_type,
        }


class ResourceContent(BaseModel):
    """Normalized resource content."""

    uri: str
    mime_type: str
    text: str
    data: Any = None

    def to_mcp(self) -> dict[str, Any]:
        return {"uri": self.uri, "mimeType": self.mime_type, "text": self.text}


class SchemeReader(Protocol):
    """Fetches raw content for one URI scheme."""

    async def fetch(self, uri: str) -> tuple[str, bytes]:
        """Return ``(content_type, body)`` for *uri*."""
        ...


class HttpResourceFetcher:
    """HTTP(S) GET reader."""

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._timeout = timeout
        self._http = http_client

    async def fetch(self, uri: str) -> tuple[str, bytes]:
        try:
            if self._http is not None:
                response = await self._http.get(uri, timeout=self._timeout, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=self._timeout, follow_redirects=True) as client:
                    response = await client.get(uri)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ResourceReadError(uri, "request timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise ResourceReadError(uri, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ResourceReadError(uri, str(exc)) from exc
        return response.headers.get("content-type", ""), response.content


class ResourceReader:
    """Resolves resource URIs against descriptors and reads their content.

    Usage::

        reader = ResourceReader([ResourceDescriptor(uri="https://x/docs/{topic}", name="docs")])
        content = await reader.read("https://x/docs/install")
    """

    def __init__(
        self,
        descriptors: list[ResourceDescriptor] | None = None,
        *,
        readers: dict[str, SchemeReader] | None = None,
    ) -> None:
        self._descriptors = list(descriptors or [])
        http = HttpResourceFetcher()
        self._readers: dict[str, SchemeReader] = {"http": http, "https": http}
        if readers:
            self._readers.update(readers)

    def list_resources(self) -> list[ResourceDescriptor]:
        """Return the concrete (non-template) descriptors."""
        return [d for d in self._descriptors if not d.is_template]

    def list_templates(self) -> list[ResourceDescriptor]:
        return [d for d in self._descriptors if d.is_template]

    def resolve(self, uri: str) -> ResourceDescriptor:
        """Return the descriptor that owns *uri*; concrete matches win over templates."""
        for descriptor in self.list_resources():
            if descriptor.matches(uri):
                return descriptor
        for descriptor in self.list_templates():
            if descriptor.matches(uri):
                return descriptor
        raise ResourceReadError(uri, "resource not found")

    async def read(self, uri: str) -> ResourceContent:
        """Fetch and normalize the content at *uri*.

        Raises:
            ResourceReadError: Unknown URI, unsupported scheme, or fetch failure.
        """
        descriptor = self.resolve(uri)
        if descriptor.text is not None:
            return ResourceContent(uri=uri, mime_type=descriptor.mime_type, text=descriptor.text)

        scheme = urlsplit(uri).scheme.lower()
        reader = self._readers.get(scheme)
        if reader is None:
            raise ResourceReadError(uri, f"unsupported URI scheme: {scheme or '(none)'}")

        content_type, body = await reader.fetch(uri)
        logger.debug("Read resource %s (%s, %d bytes)", uri, content_type, len(body))
        return normalize_content(uri, content_type or descriptor.mime_type, body)


def normalize_content(uri: str, content_type: str, body: bytes) -> ResourceContent:
    """Sniff *content_type* and convert *body* to text."""
    mime = content_type.split(";", 1)[0].strip().lower() or "application/octet-stream"

    if mime == "application/json" or mime.endswith("+json"):
        try:
            data = json.loads(body)
        except ValueError as exc:
            raise ResourceReadError(uri, f"invalid JSON body: {exc}") from exc
        return ResourceContent(
            uri=uri,
            mime_type=mime,
            text=json.dumps(data, indent=2, ensure_ascii=False),
            data=data,
        )

    if mime.startswith("text/") or mime in _TEXT_TYPES or mime.endswith("+xml"):
        return ResourceContent(uri=uri, mime_type=mime, text=body.decode("utf-8", errors="replace"))

    return ResourceContent(
        uri=uri,
        mime_type=mime,
        text=f"[binary content: {mime}, {len(body)} bytes]",
        data={"mimeType": mime, "size": len(body)},
    )


def _template_regex(template: str) -> re.Pattern[str]:
    parts = _TEMPLATE_PARAM.split(template)
    # split() alternates literal text and parameter names
    pattern = "".join(
        re.escape(part) if i % 2 == 0 else f"(?P<{part}>[^/?#]+)"
        for i, part in enumerate(parts)
    )
    return re.compile(pattern)
