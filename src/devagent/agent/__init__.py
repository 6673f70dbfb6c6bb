"""Conversation orchestration for tool use.

This package runs a turn end to end:
- Send the conversation to the model
- Parse tool requests from the reply
- Execute them through the tool engine
- Feed the results back to the model
- Stop when the model answers without tool requests
"""

from devagent.agent.exceptions import (
    ConversationError,
    ErrorContext,
    MalformedModelResponseError,
    OrchestrationError,
    ToolLoopExceededError,
    TurnFailedError,
)
from devagent.agent.loop import AgentLoop
from devagent.agent.models import (
    AgentConfig,
    AgentEvent,
    AgentResult,
    Conversation,
    EventType,
    Message,
    OrchestratorState,
    Role,
)
from devagent.agent.parser import ModelResponseParser
from devagent.agent.retry import RetryPolicy

__all__ = [
    "AgentConfig",
    "AgentEvent",
    "AgentLoop",
    "AgentResult",
    "Conversation",
    "ConversationError",
    "ErrorContext",
    "EventType",
    "MalformedModelResponseError",
    "Message",
    "ModelResponseParser",
    "OrchestrationError",
    "OrchestratorState",
    "RetryPolicy",
    "Role",
    "ToolLoopExceededError",
    "TurnFailedError",
]
