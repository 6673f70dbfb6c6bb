"""Tests for the model call retry policy."""

import pytest

from devagent.agent.retry import RetryPolicy
from devagent.providers.exceptions import (
    AuthenticationError,
    FailureType,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    ServerError,
)


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_max_attempts(self) -> None:
        assert RetryPolicy(max_retries=3).max_attempts == 4
        assert RetryPolicy(max_retries=0).max_attempts == 1

    def test_exponential_delay(self) -> None:
        policy = RetryPolicy(base_delay=0.5, max_delay=30)

        assert [policy.delay_for(n) for n in range(4)] == [0.5, 1.0, 2.0, 4.0]

    def test_delay_is_capped(self) -> None:
        policy = RetryPolicy(base_delay=1, max_delay=5)
        assert policy.delay_for(10) == 5

    def test_retry_after_is_respected(self) -> None:
        policy = RetryPolicy(base_delay=0.5, max_delay=30)

        assert policy.delay_for(0, RateLimitError("slow down", retry_after=7)) == 7
        assert policy.delay_for(0, RateLimitError("slow down", retry_after=120)) == 30
        assert policy.delay_for(1, RateLimitError("slow down")) == 1.0

    @pytest.mark.parametrize(
        ("error", "retryable"),
        [
            (RateLimitError("x"), True),
            (NetworkError("x"), True),
            (ServerError("x"), True),
            (AuthenticationError("x"), False),
            (MalformedResponseError("x"), False),
            (ConnectionError("x"), True),
            (ValueError("x"), False),
        ],
    )
    def test_is_retryable(self, error: Exception, retryable: bool) -> None:
        assert RetryPolicy().is_retryable(error) is retryable

    def test_failure_type(self) -> None:
        assert RetryPolicy().failure_type(AuthenticationError("x")) is FailureType.AUTH_ERROR

    def test_validation(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(max_retries=-1)
        with pytest.raises(ValueError):
            RetryPolicy(base_delay=-1)
