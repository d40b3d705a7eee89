"""AgentHandler: serves natural-language agent requests.

Validates the agent envelope, resolves the provider API key from request
headers, runs the tool-calling loop, and renders the agent response or
error envelope. Errors are always returned, never raised.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from mcpgw.core.interface.client import CompletionClient  # noqa: TC001
from mcpgw.core.interface.models import CanonicalMessage, ConversationHistory
from mcpgw.core.orchestration.models import AgentRequest, OrchestrationResult, StopReason
from mcpgw.core.orchestration.orchestrator import DEFAULT_MAX_ITERATIONS, ToolCallOrchestrator
from mcpgw.errors import AuthenticationError, GatewayError, InternalError, RequestValidationError
from mcpgw.protocols.registry import ToolRegistry  # noqa: TC001

logger = logging.getLogger(__name__)

_API_KEY_HEADERS = ("x-api-key", "api-key")


class AgentHandler:
    """Runs agent requests against one completion client and tool registry.

    Usage::

        handler = AgentHandler(client, registry, system_prompt="You are helpful.")
        envelope = await handler.handle({"input": "What's new?"}, {"x-api-key": "sk-..."})
    """

    def __init__(
        self,
        client: CompletionClient,
        registry: ToolRegistry,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        temperature: float | None = None,
        max_tokens: int | None = None,
        system_prompt: str | None = None,
        parallel_tools: bool = False,
    ) -> None:
        self.client = client
        self.registry = registry
        self.max_iterations = max_iterations
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.system_prompt = system_prompt
        self.parallel_tools = parallel_tools

    async def handle(
        self,
        payload: Mapping[str, Any],
        headers: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Process one agent request and return its response envelope."""
        started = time.perf_counter()
        try:
            request = self.parse_request(payload)
            api_key = extract_api_key(headers) or self.client.config.api_key
            if not api_key:
                raise AuthenticationError(
                    "No API key provided: send an Authorization, x-api-key or api-key header",
                    error_code="MISSING_API_KEY",
                )
            result = await self._run(request, api_key)
        except GatewayError as exc:
            logger.debug("Agent request failed: %s", exc.message)
            return exc.to_agent()
        except Exception as exc:
            logger.exception("Unhandled error while processing agent request")
            return InternalError(f"Internal error: {exc}").to_agent()

        duration_ms = round((time.perf_counter() - started) * 1000)
        return render_success(result, request, duration_ms)

    @staticmethod
    def parse_request(payload: Mapping[str, Any]) -> AgentRequest:
        """Validate the agent envelope.

        Raises:
            RequestValidationError: Missing or malformed fields.
        """
        try:
            return AgentRequest.model_validate(payload)
        except ValidationError as exc:
            errors = json.loads(exc.json(include_url=False))
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in errors)
            raise RequestValidationError(
                f"Invalid agent request: {fields}", data={"errors": errors}
            ) from exc

    async def _run(self, request: AgentRequest, api_key: str) -> OrchestrationResult:
        options = request.options
        orchestrator = ToolCallOrchestrator(
            self.client.with_model(options.model),
            self.registry,
            max_iterations=options.max_tool_calls or self.max_iterations,
            auto_execute=options.auto_execute_tools,
            parallel=self.parallel_tools,
            temperature=options.temperature if options.temperature is not None else self.temperature,
            max_tokens=options.max_tokens or self.max_tokens,
        )
        return await orchestrator.run(self.build_history(request), api_key=api_key)

    def build_history(self, request: AgentRequest) -> ConversationHistory:
        """Seed a transcript: system prompt, prior turns, then the new input."""
        history = ConversationHistory()
        system_prompt = request.options.system_prompt or self.system_prompt
        if system_prompt:
            history.append(CanonicalMessage.system(system_prompt))
        for turn in request.history:
            if turn.role == "system":
                history.append(CanonicalMessage.system(turn.content))
            elif turn.role == "assistant":
                history.append(CanonicalMessage.assistant(turn.content))
            else:
                history.append(CanonicalMessage.user(turn.content))
        history.append(CanonicalMessage.user(request.input))
        return history


def extract_api_key(headers: Mapping[str, str] | None) -> str | None:
    """Return the provider key from ``Authorization: Bearer``, ``x-api-key`` or ``api-key``."""
    if not headers:
        return None
    lowered = {key.lower(): value for key, value in headers.items()}
    authorization = lowered.get("authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    for name in _API_KEY_HEADERS:
        value = lowered.get(name, "").strip()
        if value:
            return value
    return None


def render_success(
    result: OrchestrationResult, request: AgentRequest, duration_ms: int
) -> dict[str, Any]:
    """Render the agent success envelope."""
    include_results = request.options.include_tool_results
    execution: dict[str, Any] = {
        "toolCalls": [r.to_agent(include_result=include_results) for r in result.tool_calls],
        "toolsExecuted": result.tools_executed,
        "iterations": result.iterations,
        "stopReason": result.stop_reason.value,
    }
    if result.stop_reason is StopReason.TOOL_CALLS_PENDING:
        execution["pendingToolCalls"] = [
            call.model_dump() for call in result.pending_tool_calls
        ]
    return {
        "response": result.response,
        "execution": execution,
        "metadata": {
            "tokensUsed": result.usage.total_tokens,
            "duration": duration_ms,
            "model": result.model,
        },
        "error": None,
    }
