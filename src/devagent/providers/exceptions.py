"""
Model transport exceptions for DevAgent.

Defines the TransportError hierarchy and the classification used to decide
whether a failed model call is worth retrying.
"""

from enum import Enum

from litellm import exceptions as litellm_exceptions

from devagent.exceptions import DevAgentError


class FailureType(Enum):
    """Classification of transport failures for retry decisions."""

    RATE_LIMIT = "rate_limit"
    AUTH_ERROR = "auth_error"
    NETWORK_ERROR = "network_error"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    CONTEXT_LENGTH = "context_length"
    INVALID_REQUEST = "invalid_request"
    MALFORMED_RESPONSE = "malformed_response"
    UNKNOWN = "unknown"


class TransportError(DevAgentError):
    """Base exception for model transport errors."""

    failure_type = FailureType.UNKNOWN

    def __init__(self, message: str, provider: str | None = None):
        super().__init__(message)
        self.provider = provider


class AuthenticationError(TransportError):
    """API key invalid or missing."""

    failure_type = FailureType.AUTH_ERROR


class RateLimitError(TransportError):
    """Provider rate limit exceeded."""

    failure_type = FailureType.RATE_LIMIT

    def __init__(
        self,
        message: str,
        provider: str | None = None,
        retry_after: float | None = None,
    ):
        super().__init__(message, provider)
        self.retry_after = retry_after


class NetworkError(TransportError):
    """Connection-level failure."""

    failure_type = FailureType.NETWORK_ERROR


class ServerError(TransportError):
    """Provider server error (5xx status codes)."""

    failure_type = FailureType.SERVER_ERROR


class TransportTimeoutError(TransportError):
    """The model call did not complete in time."""

    failure_type = FailureType.TIMEOUT


class ContextLengthExceededError(TransportError):
    """Request exceeded the model's context length."""

    failure_type = FailureType.CONTEXT_LENGTH


class InvalidRequestError(TransportError):
    """Invalid request sent to provider."""

    failure_type = FailureType.INVALID_REQUEST


class MalformedResponseError(TransportError):
    """The provider answered with something that cannot be interpreted."""

    failure_type = FailureType.MALFORMED_RESPONSE


def _retry_after_seconds(error: Exception) -> float | None:
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None)
    if not headers:
        return None
    try:
        value = headers.get("retry-after")
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


def map_provider_error(error: Exception, provider: str | None = None) -> TransportError:
    """
    Convert a litellm (or other) exception into a TransportError.

    Args:
        error: The exception raised by the provider client.
        provider: Provider name for the error.

    Returns:
        The matching TransportError subclass instance.
    """
    if isinstance(error, TransportError):
        return error

    message = str(error) or type(error).__name__

    if isinstance(error, litellm_exceptions.RateLimitError):
        return RateLimitError(message, provider, retry_after=_retry_after_seconds(error))
    if isinstance(error, litellm_exceptions.AuthenticationError):
        return AuthenticationError(message, provider)
    if isinstance(error, litellm_exceptions.ContextWindowExceededError):
        return ContextLengthExceededError(message, provider)
    if isinstance(error, litellm_exceptions.Timeout):
        return TransportTimeoutError(message, provider)
    if isinstance(error, (litellm_exceptions.APIConnectionError, litellm_exceptions.ServiceUnavailableError)):
        return NetworkError(message, provider)
    if isinstance(error, litellm_exceptions.InternalServerError):
        return ServerError(message, provider)
    if isinstance(error, litellm_exceptions.BadRequestError):
        return InvalidRequestError(message, provider)
    if isinstance(error, litellm_exceptions.APIError):
        status = getattr(error, "status_code", None)
        if status and 400 <= status < 500:
            return InvalidRequestError(message, provider)
        return ServerError(message, provider)
    if isinstance(error, (TimeoutError, ConnectionError)):
        return NetworkError(message, provider)

    return TransportError(message, provider)


def classify_error(error: Exception) -> FailureType:
    """
    Classify an exception into a failure type for retry decisions.

    Args:
        error: The exception to classify.

    Returns:
        The failure type classification.
    """
    if isinstance(error, TransportError):
        return error.failure_type
    return map_provider_error(error).failure_type


def should_retry(failure_type: FailureType) -> bool:
    """
    Determine if a failure type is worth another attempt.

    Args:
        failure_type: The classified failure type.

    Returns:
        True for transient failures.
    """
    # Auth, invalid requests and unreadable responses will fail the same way again
    return failure_type in {
        FailureType.RATE_LIMIT,
        FailureType.NETWORK_ERROR,
        FailureType.SERVER_ERROR,
        FailureType.TIMEOUT,
    }
