"""
DevAgent model transport layer.

Provides the ModelTransport interface the orchestrator depends on and a
LiteLLM-backed implementation with:
- Multi-provider support (Anthropic, OpenAI, Ollama, ...)
- Error classification for retry decisions
"""

from devagent.providers.exceptions import (
    AuthenticationError,
    ContextLengthExceededError,
    FailureType,
    InvalidRequestError,
    MalformedResponseError,
    NetworkError,
    RateLimitError,
    ServerError,
    TransportError,
    TransportTimeoutError,
    classify_error,
    map_provider_error,
    should_retry,
)
from devagent.providers.litellm_transport import LiteLLMTransport
from devagent.providers.models import ModelResponse, TokenUsage
from devagent.providers.transport import ModelTransport

__all__ = [
    # Transport
    "ModelTransport",
    "LiteLLMTransport",
    # Models
    "ModelResponse",
    "TokenUsage",
    # Exceptions
    "TransportError",
    "AuthenticationError",
    "RateLimitError",
    "NetworkError",
    "ServerError",
    "TransportTimeoutError",
    "ContextLengthExceededError",
    "InvalidRequestError",
    "MalformedResponseError",
    "FailureType",
    "classify_error",
    "map_provider_error",
    "should_retry",
]
