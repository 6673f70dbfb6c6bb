"""Data models for tool use."""

from dataclasses import dataclass
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ToolParameter(BaseModel):
    """Defines a parameter for a tool."""

    name: str
    type: str  # "string", "integer", "boolean", "array", "object"
    description: str
    required: bool = True
    default: Optional[Any] = None
    enum: Optional[list[str]] = None


class TextBlock(BaseModel):
    """Plain text produced by the model."""

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str


class ToolRequestBlock(BaseModel):
    """A model-issued request to run a tool."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_use"] = "tool_use"
    id: str  # unique within a turn
    tool_name: str
    arguments: dict[str, Any] = Field(default_factory=dict)

    def __str__(self) -> str:
        args = ", ".join(f"{k}={v!r}" for k, v in self.arguments.items())
        return f"{self.tool_name}({args})"


class ToolResultBlock(BaseModel):
    """Outcome of one tool request, fed back to the model."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_result"] = "tool_result"
    request_id: str  # ToolRequestBlock.id this answers
    payload: str
    is_error: bool = False


ContentBlock = Annotated[
    Union[TextBlock, ToolRequestBlock, ToolResultBlock],
    Field(discriminator="type"),
]


@dataclass(frozen=True)
class ToolExecutionResult:
    """Record of a single tool invocation."""

    tool_name: str
    request_id: str
    success: bool
    elapsed: float  # seconds
    payload: Optional[str] = None
    error: Optional[str] = None  # sanitized

    def to_block(self) -> ToolResultBlock:
        if self.success:
            return ToolResultBlock(request_id=self.request_id, payload=self.payload or "")
        return ToolResultBlock(
            request_id=self.request_id,
            payload=self.error or "Tool execution failed",
            is_error=True,
        )
