"""CompletionClient: one HTTP round trip to the configured AI provider.

Everything provider-specific is delegated to a :class:`Transpiler` chosen
once from :class:`ProviderConfig`; the client itself only moves bytes and
maps transport failures onto the error taxonomy.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mcpgw.core.interface.config import ProviderConfig, ProviderKind
from mcpgw.core.interface.models import CompletionResult, ConversationHistory, ToolDefinition
from mcpgw.core.interface.transpiler import Transpiler
from mcpgw.core.interface.transpilers.anthropic import AnthropicTranspiler
from mcpgw.core.interface.transpilers.azure import AzureOpenAITranspiler
from mcpgw.core.interface.transpilers.openai import OpenAITranspiler
from mcpgw.errors import AuthenticationError, UpstreamProviderError
from mcpgw.utils.telemetry import (
    ATTR_FINISH_REASON,
    ATTR_MODEL,
    ATTR_PROVIDER,
    get_tracer,
    record_usage,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

# Upstream bodies are echoed in error details; keep them bounded.
_MAX_ERROR_BODY = 2000


def get_transpiler(kind: ProviderKind) -> Transpiler:
    """Return the transpiler for a provider kind."""
    mapping: dict[ProviderKind, Transpiler] = {
        ProviderKind.OPENAI: OpenAITranspiler(),
        ProviderKind.AZURE_OPENAI: AzureOpenAITranspiler(),
        ProviderKind.ANTHROPIC: AnthropicTranspiler(),
    }
    return mapping[kind]


class CompletionClient:
    """Async client for one provider's completion endpoint.

    Usage::

        config = ProviderConfig(kind="anthropic", model="claude-3-5-haiku-latest")
        client = CompletionClient(config)
        result = await client.complete(history, tools, api_key="sk-...")

    An ``httpx.AsyncClient`` may be injected (tests pass one built on
    ``httpx.MockTransport``); otherwise a short-lived client is opened per call.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.transpiler = get_transpiler(config.kind)
        self._http = http_client

    def with_model(self, model: str | None) -> CompletionClient:
        """Return a client for the same provider with a model override."""
        if not model or model == self.config.model:
            return self
        return CompletionClient(self.config.with_model(model), http_client=self._http)

    async def complete(
        self,
        history: ConversationHistory,
        tools: list[ToolDefinition] | None = None,
        *,
        temperature: float | None = None,
        max_tokens: int | None = None,
        api_key: str | None = None,
    ) -> CompletionResult:
        """Send *history* to the provider and return the parsed response.

        Raises:
            AuthenticationError: No API key, or the provider rejected it.
            UpstreamProviderError: Non-2xx status, transport failure, or an
                unparseable response body.
        """
        key = api_key or self.config.api_key
        if not key:
            raise AuthenticationError(
                "No API key provided for the AI provider",
                error_code="MISSING_API_KEY",
            )

        with _tracer.start_as_current_span("completion.complete") as span:
            span.set_attribute(ATTR_MODEL, self.config.model)
            span.set_attribute(ATTR_PROVIDER, self.config.provider)

            body = self.transpiler.to_provider(
                history,
                tools,
                model=self.config.model,
                temperature=temperature,
                max_tokens=max_tokens,
            )
            url = self.transpiler.endpoint(self.config)
            headers = {
                "Content-Type": "application/json",
                **self.transpiler.headers(self.config, key),
            }

            response = await self._post(url, headers, body)
            result = self._parse(response)

            record_usage(span, result.usage)
            if result.finish_reason is not None:
                span.set_attribute(ATTR_FINISH_REASON, str(result.finish_reason))

            if not result.model:
                result.model = self.config.model
            return result

    async def _post(
        self, url: str, headers: dict[str, str], body: dict[str, Any]
    ) -> httpx.Response:
        try:
            if self._http is not None:
                return await self._http.post(
                    url, headers=headers, json=body, timeout=self.config.timeout
                )
            async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                return await client.post(url, headers=headers, json=body)
        except httpx.TimeoutException as exc:
            raise UpstreamProviderError(
                f"AI provider request timed out after {self.config.timeout}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise UpstreamProviderError(f"AI provider request failed: {exc}") from exc

    def _parse(self, response: httpx.Response) -> CompletionResult:
        body_text = response.text[:_MAX_ERROR_BODY]

        if response.status_code in (401, 403):
            raise AuthenticationError(
                f"AI provider rejected the API key (HTTP {response.status_code})",
                data={"status": response.status_code, "body": body_text},
                error_code="INVALID_API_KEY",
            )
        if not response.is_success:
            logger.warning(
                "AI provider returned HTTP %d: %s", response.status_code, body_text
            )
            raise UpstreamProviderError(
                f"AI provider returned HTTP {response.status_code}",
                status=response.status_code,
                body=body_text,
            )

        try:
            payload = response.json()
            return self.transpiler.from_provider(payload)
        except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
            raise UpstreamProviderError(
                f"AI provider returned a malformed response: {exc}",
                status=response.status_code,
                body=body_text,
            ) from exc
