"""Data models for the conversation and the orchestration loop."""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from devagent.agent.exceptions import ConversationError
from devagent.constants import (
    DEFAULT_MAX_ITERATIONS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_MODEL_TIMEOUT,
    DEFAULT_RETRY_BASE_DELAY,
    DEFAULT_RETRY_MAX_DELAY,
    DEFAULT_SYSTEM_PROMPT,
)
from devagent.providers.models import TokenUsage
from devagent.tools.models import (
    ContentBlock,
    TextBlock,
    ToolExecutionResult,
    ToolRequestBlock,
    ToolResultBlock,
)


class Role(str, Enum):
    """Message author."""

    USER = "user"
    MODEL = "model"


class Message(BaseModel):
    """One conversation message. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: tuple[ContentBlock, ...]

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role=Role.USER, content=(TextBlock(text=text),))

    @classmethod
    def model(cls, blocks: Iterable[ContentBlock]) -> "Message":
        return cls(role=Role.MODEL, content=tuple(blocks))

    @classmethod
    def tool_results(cls, results: Iterable[ToolResultBlock]) -> "Message":
        """User-role message carrying tool results back to the model."""
        return cls(role=Role.USER, content=tuple(results))

    @property
    def tool_requests(self) -> list[ToolRequestBlock]:
        return [b for b in self.content if isinstance(b, ToolRequestBlock)]

    @property
    def tool_result_blocks(self) -> list[ToolResultBlock]:
        return [b for b in self.content if isinstance(b, ToolResultBlock)]

    @property
    def text(self) -> str:
        """Concatenated text blocks."""
        return "\n".join(b.text for b in self.content if isinstance(b, TextBlock))


class Conversation:
    """Append-only message history for one turn.

    Every append is checked: roles alternate starting with the user, tool
    requests only appear in model messages, tool results only in user
    messages, and a tool-result message answers each request of the model
    message right before it exactly once.
    """

    def __init__(self, messages: Iterable[Message] = ()):
        self._messages: list[Message] = []
        self._request_ids: set[str] = set()
        for message in messages:
            self.append(message)

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def append(self, message: Message) -> None:
        """Append a message.

        Raises:
            ConversationError: If the message would break an invariant
        """
        if not message.content:
            raise ConversationError("Message has no content")

        previous = self.last
        if previous is None and message.role is not Role.USER:
            raise ConversationError("Conversation must start with a user message")
        if previous is not None and previous.role is message.role:
            raise ConversationError(
                f"Two consecutive {message.role.value} messages are not allowed"
            )

        requests = message.tool_requests
        results = message.tool_result_blocks

        if message.role is Role.USER and requests:
            raise ConversationError("User messages cannot contain tool requests")
        if message.role is Role.MODEL and results:
            raise ConversationError("Model messages cannot contain tool results")

        if requests:
            ids = [r.id for r in requests]
            if len(ids) != len(set(ids)) or self._request_ids.intersection(ids):
                raise ConversationError("Tool request ids must be unique within a turn")

        if results:
            expected = [r.id for r in previous.tool_requests] if previous else []
            answered = [r.request_id for r in results]
            if sorted(answered) != sorted(expected):
                raise ConversationError(
                    "Tool results must answer each request of the preceding model message exactly once"
                )

        self._messages.append(message)
        self._request_ids.update(r.id for r in requests)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __repr__(self) -> str:
        return f"<Conversation messages={len(self._messages)}>"


class AgentConfig(BaseModel):
    """Configuration for the orchestration loop."""

    max_iterations: int = Field(
        default=DEFAULT_MAX_ITERATIONS,
        ge=1,
        le=100,
        description="Maximum model calls per turn",
    )

    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES,
        ge=0,
        le=10,
        description="Retries of a failed model call before the turn fails",
    )

    retry_base_delay: float = Field(
        default=DEFAULT_RETRY_BASE_DELAY,
        ge=0,
        description="First backoff delay in seconds, doubled per retry",
    )

    retry_max_delay: float = Field(
        default=DEFAULT_RETRY_MAX_DELAY,
        ge=0,
        description="Upper bound for any single backoff delay",
    )

    model_timeout: float = Field(
        default=DEFAULT_MODEL_TIMEOUT,
        gt=0,
        description="Timeout for one model call in seconds",
    )

    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System prompt sent with every model call",
    )


class OrchestratorState(str, Enum):
    """Where a turn currently is."""

    AWAITING_MODEL = "awaiting_model"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    FAILED = "failed"


class EventType(str, Enum):
    """Orchestration event types for progress reporting."""

    ITERATION_START = "iteration_start"
    MODEL_CALL = "model_call"
    MODEL_RESPONSE = "model_response"
    RETRY = "retry"
    TOOL_START = "tool_start"
    TOOL_COMPLETE = "tool_complete"
    TOOL_ERROR = "tool_error"
    AGENT_COMPLETE = "agent_complete"
    AGENT_ERROR = "agent_error"


class AgentEvent(BaseModel):
    """Event emitted during a turn."""

    model_config = ConfigDict(use_enum_values=True)

    event_type: EventType = Field(description="Type of event")
    iteration: int = Field(description="Current iteration number (1-based)")
    tool_name: Optional[str] = Field(default=None, description="Tool name (for tool events)")
    request_id: Optional[str] = Field(default=None, description="Tool request id (for tool events)")
    message: Optional[str] = Field(default=None, description="Human-readable description")
    data: Optional[dict[str, Any]] = Field(default=None, description="Additional event data")
    timestamp: Optional[str] = Field(default=None, description="ISO format timestamp")


@dataclass
class AgentResult:
    """Outcome of a completed turn."""

    final_text: str
    conversation: Conversation
    iterations: int
    model_calls: int
    attempts: int  # model call attempts, including retries
    tool_results: list[ToolExecutionResult] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)
    state: OrchestratorState = OrchestratorState.DONE
