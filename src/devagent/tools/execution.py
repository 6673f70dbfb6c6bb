"""
Tool execution engine.

Runs every tool request of one model message concurrently and returns one
result per request, in request order. Failures of any kind become error
results with a sanitized message; they never cancel sibling requests or
escape to the orchestrator.
"""

import asyncio
import logging
import time
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Optional

from devagent.constants import DEFAULT_TOOL_TIMEOUT
from devagent.exceptions import ToolError
from devagent.security.sanitizer import ErrorSanitizer
from devagent.tools.base import ToolTimeoutError
from devagent.tools.metrics import ExecutionEvent, TelemetrySink
from devagent.tools.models import ToolExecutionResult, ToolRequestBlock, ToolResultBlock
from devagent.tools.registry import ToolRegistry

if TYPE_CHECKING:
    from devagent.config.schema import ToolsConfig

logger = logging.getLogger(__name__)


class ToolExecutionEngine:
    """Dispatches tool requests and collects uniform results."""

    def __init__(
        self,
        registry: ToolRegistry,
        default_timeout: float = DEFAULT_TOOL_TIMEOUT,
        timeouts: Optional[Mapping[str, float]] = None,
        sanitizer: Optional[ErrorSanitizer] = None,
        telemetry: Iterable[TelemetrySink] = (),
    ):
        """
        Initialize the engine.

        Args:
            registry: Tools available to the model
            default_timeout: Seconds a tool may run when it has no own timeout
            timeouts: Per-tool timeouts in seconds, keyed by tool name
            sanitizer: Sanitizer applied to every error payload
            telemetry: Sinks notified once per execution
        """
        if default_timeout <= 0:
            raise ValueError("default_timeout must be positive")
        self.registry = registry
        self.default_timeout = default_timeout
        self.timeouts = dict(timeouts or {})
        self.sanitizer = sanitizer or ErrorSanitizer()
        self.telemetry = list(telemetry)

    @classmethod
    def from_config(
        cls,
        registry: ToolRegistry,
        config: "ToolsConfig",
        sanitizer: Optional[ErrorSanitizer] = None,
        telemetry: Iterable[TelemetrySink] = (),
    ) -> "ToolExecutionEngine":
        return cls(
            registry,
            default_timeout=config.default_timeout,
            timeouts=config.timeouts,
            sanitizer=sanitizer,
            telemetry=telemetry,
        )

    def timeout_for(self, tool_name: str) -> float:
        return self.timeouts.get(tool_name, self.default_timeout)

    async def execute(self, requests: Sequence[ToolRequestBlock]) -> list[ToolResultBlock]:
        """Run all requests and return their result blocks in request order."""
        results = await self.execute_detailed(requests)
        return [result.to_block() for result in results]

    async def execute_detailed(
        self, requests: Sequence[ToolRequestBlock]
    ) -> list[ToolExecutionResult]:
        """Run all requests concurrently.

        Returns:
            One ToolExecutionResult per request, ordered like ``requests``
        """
        if not requests:
            return []
        # gather keeps argument order regardless of completion order
        return list(await asyncio.gather(*(self.run_one(r) for r in requests)))

    async def run_one(self, request: ToolRequestBlock) -> ToolExecutionResult:
        """Execute a single request, converting any failure into a result."""
        start = time.perf_counter()
        payload: Optional[str] = None
        error: Optional[str] = None

        try:
            tool = self.registry.require(request.tool_name)
            timeout = self.timeout_for(tool.name)
            try:
                output = await asyncio.wait_for(
                    tool.execute(dict(request.arguments)), timeout=timeout
                )
            except asyncio.TimeoutError:
                raise ToolTimeoutError(tool.name, timeout) from None
            payload = output if isinstance(output, str) else str(output)

        except asyncio.CancelledError:
            raise

        except ToolError as e:
            error = self.sanitizer.sanitize_exception(e)
            logger.warning(f"Tool {request.tool_name} failed: {error}")

        except Exception as e:
            detail = self.sanitizer.sanitize_exception(e)
            error = self.sanitizer.sanitize(
                f"Tool '{request.tool_name}' failed unexpectedly ({type(e).__name__}): {detail}"
            )
            logger.error(f"Unexpected error in tool {request.tool_name}: {error}")

        elapsed = time.perf_counter() - start
        result = ToolExecutionResult(
            tool_name=request.tool_name,
            request_id=request.id,
            success=error is None,
            elapsed=elapsed,
            payload=payload,
            error=error,
        )

        logger.info(
            f"Tool {result.tool_name} {'succeeded' if result.success else 'failed'} "
            f"in {elapsed:.3f}s",
            extra={"tool_name": result.tool_name, "success": result.success, "duration": elapsed},
        )
        self._notify(result)
        return result

    def _notify(self, result: ToolExecutionResult) -> None:
        if not self.telemetry:
            return

        event = ExecutionEvent(
            operation=result.tool_name,
            success=result.success,
            duration=result.elapsed,
            metadata=self.sanitizer.sanitize_metadata(
                {"request_id": result.request_id, "error": result.error}
            ),
        )
        for sink in self.telemetry:
            try:
                sink.record(event)
            except Exception as e:
                logger.warning(f"Telemetry sink {type(sink).__name__} failed: {e}")
