"""ToolCallOrchestrator: the bounded completion → tool execution loop.

Each iteration sends the transcript to the completion client. A response
without tool calls ends the run; otherwise the assistant's proposal is
appended, every proposed call is executed through the tool registry, and
the results are appended in call order before the next completion.
"""

from __future__ import annotations

import asyncio
import logging

from opentelemetry.trace import Span

from mcpgw.core.interface.client import CompletionClient  # noqa: TC001
from mcpgw.core.interface.models import (
    CanonicalMessage,
    CompletionResult,
    ConversationHistory,
    TokenUsage,
    ToolCall,
    ToolResult,
)
from mcpgw.core.orchestration.models import (
    MAX_ITERATIONS_MESSAGE,
    OrchestrationResult,
    StopReason,
    ToolCallRecord,
)
from mcpgw.errors import GatewayError
from mcpgw.protocols.registry import ToolRegistry, render_result
from mcpgw.utils.telemetry import (
    ATTR_ITERATIONS,
    ATTR_MAX_ITERATIONS,
    ATTR_STOP_REASON,
    get_tracer,
)

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

DEFAULT_MAX_ITERATIONS = 10


class ToolCallOrchestrator:
    """Drives one tool-calling conversation to a final answer.

    Usage::

        orchestrator = ToolCallOrchestrator(client, registry, max_iterations=5)
        result = await orchestrator.run(history, api_key="sk-...")
        print(result.response, result.tools_executed)

    The caller's history is copied; the transcript built during the run is
    owned by the run and returned on the result.
    """

    def __init__(
        self,
        client: CompletionClient,
        registry: ToolRegistry,
        *,
        max_iterations: int = DEFAULT_MAX_ITERATIONS,
        auto_execute: bool = True,
        parallel: bool = False,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> None:
        if max_iterations < 1:
            msg = "max_iterations must be at least 1"
            raise ValueError(msg)
        self.client = client
        self.registry = registry
        self.max_iterations = max_iterations
        self.auto_execute = auto_execute
        self.parallel = parallel
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def run(
        self,
        history: ConversationHistory,
        *,
        api_key: str | None = None,
    ) -> OrchestrationResult:
        """Execute the loop until a final answer, pending calls, or the cap.

        Raises:
            AuthenticationError: Missing or rejected provider key.
            UpstreamProviderError: The provider call failed.
        """
        transcript = history.copy_owned()
        tools = self.registry.definitions() or None
        records: list[ToolCallRecord] = []
        usage = TokenUsage()
        model = self.client.config.model

        with _tracer.start_as_current_span("orchestrator.run") as span:
            span.set_attribute(ATTR_MAX_ITERATIONS, self.max_iterations)

            for iteration in range(1, self.max_iterations + 1):
                completion = await self.client.complete(
                    transcript,
                    tools,
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    api_key=api_key,
                )
                usage = usage + completion.usage
                model = completion.model or model
                transcript.append(completion.message)

                if completion.is_terminal:
                    return self._finish(
                        span,
                        response=completion.text,
                        stop_reason=StopReason.COMPLETED,
                        iterations=iteration,
                        records=records,
                        usage=usage,
                        model=model,
                        transcript=transcript,
                    )

                if not self.auto_execute:
                    return self._finish(
                        span,
                        response=completion.text,
                        stop_reason=StopReason.TOOL_CALLS_PENDING,
                        iterations=iteration,
                        records=records,
                        usage=usage,
                        model=model,
                        transcript=transcript,
                        pending=completion.tool_calls,
                    )

                for result, record in await self._execute_batch(completion):
                    transcript.append(CanonicalMessage.tool(result))
                    records.append(record)

            logger.warning(
                "Tool loop hit max_iterations=%d without a final answer", self.max_iterations
            )
            return self._finish(
                span,
                response=MAX_ITERATIONS_MESSAGE,
                stop_reason=StopReason.MAX_ITERATIONS,
                iterations=self.max_iterations,
                records=records,
                usage=usage,
                model=model,
                transcript=transcript,
            )

    async def _execute_batch(
        self, completion: CompletionResult
    ) -> list[tuple[ToolResult, ToolCallRecord]]:
        """Run every call of one assistant turn, preserving call order."""
        calls = completion.tool_calls
        if self.parallel:
            return list(await asyncio.gather(*(self._execute_one(call) for call in calls)))
        return [await self._execute_one(call) for call in calls]

    async def _execute_one(self, call: ToolCall) -> tuple[ToolResult, ToolCallRecord]:
        """Execute one call; failures become error-shaped results, not exceptions."""
        try:
            output = await self.registry.execute(call.name, call.arguments)
        except GatewayError as exc:
            return self._failure(call, exc.message)

        text = render_result(output)
        record = ToolCallRecord(
            id=call.id, name=call.name, arguments=call.arguments, result=text, success=True
        )
        return ToolResult.from_text(call.id, text), record

    @staticmethod
    def _failure(call: ToolCall, message: str) -> tuple[ToolResult, ToolCallRecord]:
        logger.debug("Tool call %s (%s) failed: %s", call.id, call.name, message)
        record = ToolCallRecord(
            id=call.id, name=call.name, arguments=call.arguments, error=message, success=False
        )
        return ToolResult.from_text(call.id, f"Error: {message}", is_error=True), record

    @staticmethod
    def _finish(
        span: Span,
        *,
        response: str,
        stop_reason: StopReason,
        iterations: int,
        records: list[ToolCallRecord],
        usage: TokenUsage,
        model: str,
        transcript: ConversationHistory,
        pending: list[ToolCall] | None = None,
    ) -> OrchestrationResult:
        span.set_attribute(ATTR_ITERATIONS, iterations)
        span.set_attribute(ATTR_STOP_REASON, stop_reason.value)
        return OrchestrationResult(
            response=response,
            stop_reason=stop_reason,
            iterations=iterations,
            tool_calls=records,
            pending_tool_calls=pending or [],
            usage=usage,
            model=model,
            transcript=transcript,
        )
