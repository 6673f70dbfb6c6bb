"""Bounded exponential backoff for model calls."""

from dataclasses import dataclass

from devagent.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_RETRY_BASE_DELAY,
    DEFAULT_RETRY_MAX_DELAY,
)
from devagent.providers.exceptions import (
    FailureType,
    RateLimitError,
    classify_error,
    should_retry,
)


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how long to wait before re-calling the model.

    The delay before retry ``n`` (0-based) is ``base_delay * 2**n`` capped at
    ``max_delay``. A rate-limit error that names a retry-after interval uses
    that interval instead, under the same cap.
    """

    max_retries: int = DEFAULT_MAX_RETRIES
    base_delay: float = DEFAULT_RETRY_BASE_DELAY
    max_delay: float = DEFAULT_RETRY_MAX_DELAY

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries cannot be negative")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays cannot be negative")

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def is_retryable(self, error: Exception) -> bool:
        return should_retry(classify_error(error))

    def failure_type(self, error: Exception) -> FailureType:
        return classify_error(error)

    def delay_for(self, retry: int, error: Exception | None = None) -> float:
        """Seconds to wait before retry number ``retry`` (0-based)."""
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return min(max(error.retry_after, 0.0), self.max_delay)
        return min(self.base_delay * (2**retry), self.max_delay)
