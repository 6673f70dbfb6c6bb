"""
Transport data models for DevAgent.

Defines the response type every model transport returns.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class TokenUsage:
    """Token usage statistics."""

    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self) -> None:
        if self.total_tokens == 0:
            self.total_tokens = self.input_tokens + self.output_tokens

    def __add__(self, other: "TokenUsage") -> "TokenUsage":
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
        )


@dataclass
class ModelResponse:
    """One model reply.

    ``content`` holds raw content blocks in Anthropic form
    (``{"type": "text", ...}`` / ``{"type": "tool_use", ...}``); the
    orchestrator's parser turns them into typed blocks.
    """

    content: list[dict[str, Any]]
    model: str
    stop_reason: str = "unknown"
    usage: TokenUsage = field(default_factory=TokenUsage)
    cost: float = 0.0
    created_at: datetime = field(default_factory=datetime.now)
