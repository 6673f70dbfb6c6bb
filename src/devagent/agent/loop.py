"""Orchestration loop for iterative tool use."""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Iterable, Sequence
from datetime import datetime
from typing import Any, Optional, Union

from devagent.agent.exceptions import (
    ConversationError,
    ErrorContext,
    MalformedModelResponseError,
    ToolLoopExceededError,
    TurnFailedError,
)
from devagent.agent.models import (
    AgentConfig,
    AgentEvent,
    AgentResult,
    Conversation,
    EventType,
    Message,
    OrchestratorState,
)
from devagent.agent.parser import ModelResponseParser
from devagent.agent.retry import RetryPolicy
from devagent.providers.exceptions import (
    FailureType,
    TransportError,
    TransportTimeoutError,
    map_provider_error,
)
from devagent.providers.models import ModelResponse, TokenUsage
from devagent.providers.transport import ModelTransport
from devagent.security.sanitizer import ErrorSanitizer
from devagent.tools.execution import ToolExecutionEngine
from devagent.tools.metrics import ExecutionEvent, TelemetrySink
from devagent.tools.models import ToolExecutionResult

logger = logging.getLogger(__name__)

_FAILURE_MESSAGES = {
    FailureType.AUTH_ERROR: (
        "The model provider rejected the credentials. "
        "Check the API key set in the environment."
    ),
    FailureType.RATE_LIMIT: (
        "The model provider is rate limiting requests. Please try again shortly."
    ),
    FailureType.CONTEXT_LENGTH: (
        "The conversation is too long for the model. Start a new request."
    ),
    FailureType.INVALID_REQUEST: "The model provider rejected the request.",
}


class AgentLoop:
    """Runs one turn: model call, tool execution, model call, ... final answer.

    The loop is an explicit bounded iteration:
    1. Call the model with the conversation and available tools
    2. If the reply has no tool requests, its text is the answer
    3. Otherwise append the reply, execute its requests, append the results
    4. Repeat, up to ``max_iterations`` model calls

    A tool result is therefore always followed by another model call; the
    caller only ever receives model-written text.
    """

    def __init__(
        self,
        transport: ModelTransport,
        engine: ToolExecutionEngine,
        config: Optional[AgentConfig] = None,
        sanitizer: Optional[ErrorSanitizer] = None,
        event_callback: Optional[Callable[[AgentEvent], None]] = None,
        telemetry: Iterable[TelemetrySink] = (),
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """Initialize the loop.

        Args:
            transport: Model transport
            engine: Tool execution engine (owns the registry)
            config: Loop limits and system prompt
            sanitizer: Sanitizer for error details
            event_callback: Optional callback receiving progress events
            telemetry: Sinks notified once per model call
            sleep: Awaitable used for backoff delays
        """
        self.transport = transport
        self.engine = engine
        self.config = config or AgentConfig()
        self.sanitizer = sanitizer or engine.sanitizer
        self.event_callback = event_callback
        self.telemetry = list(telemetry)
        self.retry_policy = RetryPolicy(
            max_retries=self.config.max_retries,
            base_delay=self.config.retry_base_delay,
            max_delay=self.config.retry_max_delay,
        )
        self.parser = ModelResponseParser()
        self._sleep = sleep
        self.state = OrchestratorState.AWAITING_MODEL

    def _emit_event(self, event_type: EventType, iteration: int, **fields: Any) -> None:
        if not self.event_callback:
            return
        try:
            self.event_callback(
                AgentEvent(
                    event_type=event_type,
                    iteration=iteration,
                    timestamp=datetime.now().isoformat(),
                    **fields,
                )
            )
        except Exception as e:
            logger.warning(f"Event callback error: {e}")

    async def run(self, request: Union[str, Message, Sequence[Message], Conversation]) -> AgentResult:
        """Run one turn to completion.

        Args:
            request: The user's text, a user message, prior messages, or a
                conversation to continue. A Conversation instance is extended
                in place and must not be shared with another running turn.

        Returns:
            AgentResult with the model's final answer

        Raises:
            ToolLoopExceededError: The model was still requesting tools at the limit
            MalformedModelResponseError: A reply could not be interpreted
            TurnFailedError: The model call failed beyond the retry budget
        """
        conversation = self._start_conversation(request)
        tools = self.engine.registry.get_tool_definitions()
        max_iterations = self.config.max_iterations

        model_calls = 0
        attempts = 0
        usage = TokenUsage()
        tool_results: list[ToolExecutionResult] = []

        logger.info(f"Starting turn with {len(tools)} tools available")

        for iteration in range(1, max_iterations + 1):
            self.state = OrchestratorState.AWAITING_MODEL
            self._emit_event(
                EventType.ITERATION_START,
                iteration,
                message=f"Starting iteration {iteration}/{max_iterations}",
            )

            response, used = await self._call_model(conversation, tools, iteration)
            model_calls += 1
            attempts += used
            usage = usage + response.usage

            message = self._parse(response, iteration)
            requests = message.tool_requests
            self._emit_event(
                EventType.MODEL_RESPONSE,
                iteration,
                message=f"Model replied with {len(requests)} tool requests",
                data={"stop_reason": response.stop_reason},
            )

            if not requests:
                self._append_model_message(conversation, message, response, iteration)
                self.state = OrchestratorState.DONE
                self._emit_event(
                    EventType.AGENT_COMPLETE,
                    iteration,
                    message=f"Completed after {iteration} iterations",
                )
                logger.info(f"Turn completed after {iteration} iterations")
                return AgentResult(
                    final_text=message.text,
                    conversation=conversation,
                    iterations=iteration,
                    model_calls=model_calls,
                    attempts=attempts,
                    tool_results=tool_results,
                    usage=usage,
                )

            if iteration == max_iterations:
                # Running these requests would produce results no model call reads
                break

            self._append_model_message(conversation, message, response, iteration)
            self.state = OrchestratorState.EXECUTING_TOOLS
            for req in requests:
                self._emit_event(
                    EventType.TOOL_START,
                    iteration,
                    tool_name=req.tool_name,
                    request_id=req.id,
                    message=f"Executing {req.tool_name}",
                )

            results = await self.engine.execute_detailed(requests)
            tool_results.extend(results)

            for result in results:
                self._emit_event(
                    EventType.TOOL_COMPLETE if result.success else EventType.TOOL_ERROR,
                    iteration,
                    tool_name=result.tool_name,
                    request_id=result.request_id,
                    message=result.error,
                    data={"elapsed": result.elapsed},
                )

            conversation.append(Message.tool_results(r.to_block() for r in results))

        self.state = OrchestratorState.FAILED
        context = ErrorContext.create(
            "tool_loop",
            f"Model requested tools in all {max_iterations} iterations",
            metadata={"iterations": max_iterations, "tool_calls": len(tool_results)},
            sanitizer=self.sanitizer,
        )
        logger.error(f"Tool loop exceeded: {context.detail}")
        self._emit_event(EventType.AGENT_ERROR, max_iterations, message="Tool loop exceeded")
        raise ToolLoopExceededError(max_iterations, context)

    def _start_conversation(
        self, request: Union[str, Message, Sequence[Message], Conversation]
    ) -> Conversation:
        if isinstance(request, Conversation):
            return request
        if isinstance(request, str):
            return Conversation([Message.user(request)])
        if isinstance(request, Message):
            return Conversation([request])
        return Conversation(request)

    def _parse(self, response: ModelResponse, iteration: int) -> Message:
        try:
            return self.parser.parse_response(response)
        except MalformedModelResponseError as e:
            self.state = OrchestratorState.FAILED
            e.context = ErrorContext.create(
                "parse_model_response",
                e.reason,
                metadata={"iteration": iteration, "model": response.model},
                sanitizer=self.sanitizer,
            )
            logger.error(f"Malformed model response: {e.context.detail}")
            self._emit_event(EventType.AGENT_ERROR, iteration, message=e.user_message)
            raise

    def _append_model_message(
        self,
        conversation: Conversation,
        message: Message,
        response: ModelResponse,
        iteration: int,
    ) -> None:
        try:
            conversation.append(message)
        except ConversationError as e:
            # e.g. a tool request id reused from an earlier iteration
            self.state = OrchestratorState.FAILED
            context = ErrorContext.create(
                "append_model_message",
                e,
                metadata={"iteration": iteration, "model": response.model},
                sanitizer=self.sanitizer,
            )
            logger.error(f"Malformed model response: {context.detail}")
            error = MalformedModelResponseError(context.detail, context)
            self._emit_event(EventType.AGENT_ERROR, iteration, message=error.user_message)
            raise error from e

    async def _call_model(
        self, conversation: Conversation, tools: list[dict[str, Any]], iteration: int
    ) -> tuple[ModelResponse, int]:
        """Call the model, retrying transient failures with backoff.

        Returns:
            The response and the number of attempts it took
        """
        policy = self.retry_policy

        for retry in range(policy.max_attempts):
            attempt = retry + 1
            self._emit_event(
                EventType.MODEL_CALL,
                iteration,
                message=f"Calling model (attempt {attempt}/{policy.max_attempts})",
            )
            start = time.perf_counter()
            try:
                response = await asyncio.wait_for(
                    self.transport.call(
                        conversation.messages, tools, self.config.system_prompt
                    ),
                    timeout=self.config.model_timeout,
                )
            except asyncio.TimeoutError:
                error: TransportError = TransportTimeoutError(
                    f"Model call timed out after {self.config.model_timeout:g}s"
                )
            except Exception as e:
                error = map_provider_error(e)
            else:
                self._record("model_call", True, time.perf_counter() - start, attempt)
                return response, attempt

            self._record("model_call", False, time.perf_counter() - start, attempt)
            failure = policy.failure_type(error)

            if failure is FailureType.MALFORMED_RESPONSE:
                self.state = OrchestratorState.FAILED
                context = ErrorContext.create(
                    "model_call", error, retry_count=retry, sanitizer=self.sanitizer
                )
                logger.error(f"Malformed model response: {context.detail}")
                raise MalformedModelResponseError(context.detail, context) from error

            if not policy.is_retryable(error) or attempt == policy.max_attempts:
                self.state = OrchestratorState.FAILED
                context = ErrorContext.create(
                    "model_call",
                    error,
                    retry_count=retry,
                    metadata={"failure_type": failure.value, "iteration": iteration},
                    sanitizer=self.sanitizer,
                )
                logger.error(
                    f"Model call failed after {attempt} attempts: {context.detail}"
                )
                self._emit_event(EventType.AGENT_ERROR, iteration, message=context.detail)
                message = _FAILURE_MESSAGES.get(
                    failure,
                    f"The model could not be reached after {attempt} attempts. "
                    "Please try again later.",
                )
                raise TurnFailedError(message, attempts=attempt, context=context) from error

            delay = policy.delay_for(retry, error)
            logger.warning(
                f"Model call attempt {attempt} failed ({failure.value}), "
                f"retrying in {delay:.2f}s"
            )
            self._emit_event(
                EventType.RETRY,
                iteration,
                message=f"Retrying in {delay:.2f}s",
                data={"attempt": attempt, "failure_type": failure.value},
            )
            await self._sleep(delay)

        # range() above always returns or raises on its final attempt
        raise AssertionError("unreachable")

    def _record(self, operation: str, success: bool, duration: float, attempt: int) -> None:
        if not self.telemetry:
            return
        event = ExecutionEvent(
            operation=operation,
            success=success,
            duration=duration,
            metadata={"attempt": attempt},
        )
        for sink in self.telemetry:
            try:
                sink.record(event)
            except Exception as e:
                logger.warning(f"Telemetry sink {type(sink).__name__} failed: {e}")
