"""Model transport interface consumed by the orchestrator."""

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from devagent.providers.models import ModelResponse

if TYPE_CHECKING:
    from devagent.agent.models import Message


@runtime_checkable
class ModelTransport(Protocol):
    """Sends a conversation to a model and returns its reply.

    Implementations raise TransportError subclasses on failure. Credentials
    are the transport's own concern (read from the environment); the
    orchestrator never sees them.
    """

    async def call(
        self,
        conversation: Sequence["Message"],
        tools: list[dict[str, Any]],
        system_prompt: str,
    ) -> ModelResponse: ...
