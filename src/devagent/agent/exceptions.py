"""
Orchestration errors and their logging context.

Only these errors (and nothing raised inside a tool) escape a turn. Each one
carries an ErrorContext whose detail has already been sanitized, so it can be
logged or shown without further processing.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from devagent.exceptions import DevAgentError
from devagent.security.sanitizer import ErrorSanitizer


@dataclass(frozen=True)
class ErrorContext:
    """Sanitized description of a failure, for logging."""

    operation: str
    detail: str
    retry_count: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(
        cls,
        operation: str,
        error: BaseException | str,
        retry_count: int = 0,
        metadata: Optional[dict[str, Any]] = None,
        sanitizer: Optional[ErrorSanitizer] = None,
    ) -> "ErrorContext":
        """Build a context, sanitizing the detail and metadata.

        Args:
            operation: Name of the failing operation, e.g. "model_call"
            error: The underlying exception or message
            retry_count: Retries made before giving up
            metadata: Extra key/value details
            sanitizer: Sanitizer to use (default limits when omitted)
        """
        sanitizer = sanitizer or ErrorSanitizer()
        if isinstance(error, BaseException):
            detail = f"{type(error).__name__}: {sanitizer.sanitize_exception(error)}"
        else:
            detail = error
        return cls(
            operation=operation,
            detail=sanitizer.sanitize(detail),
            retry_count=retry_count,
            metadata=sanitizer.sanitize_metadata(metadata),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "operation": self.operation,
            "detail": self.detail,
            "retry_count": self.retry_count,
            "timestamp": self.timestamp.isoformat(),
            "metadata": dict(self.metadata),
        }


class OrchestrationError(DevAgentError):
    """Base class for errors that end a turn."""

    def __init__(self, message: str, context: Optional[ErrorContext] = None):
        super().__init__(message)
        self.user_message = message
        self.context = context


class ConversationError(OrchestrationError):
    """A message would break the conversation's structure."""

    pass


class ToolLoopExceededError(OrchestrationError):
    """The model kept requesting tools past the iteration limit."""

    def __init__(self, max_iterations: int, context: Optional[ErrorContext] = None):
        super().__init__(
            f"The assistant was still requesting tools after {max_iterations} "
            "iterations, so the request was stopped.",
            context,
        )
        self.max_iterations = max_iterations


class MalformedModelResponseError(OrchestrationError):
    """The model's reply could not be interpreted."""

    def __init__(self, reason: str, context: Optional[ErrorContext] = None):
        super().__init__(
            "The assistant returned a response that could not be understood.",
            context,
        )
        self.reason = reason


class TurnFailedError(OrchestrationError):
    """The model could not be reached within the retry budget."""

    def __init__(
        self,
        message: str,
        attempts: int,
        context: Optional[ErrorContext] = None,
    ):
        super().__init__(message, context)
        self.attempts = attempts
