"""
LiteLLM model transport.

Sends the conversation to any LiteLLM-supported model and converts the reply
into Anthropic-style content blocks. API keys are read by LiteLLM from the
process environment (ANTHROPIC_API_KEY, OPENAI_API_KEY, ...).
"""

import json
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import litellm
from litellm import acompletion, completion_cost

from devagent.constants import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    DEFAULT_MODEL_TIMEOUT,
    DEFAULT_TEMPERATURE,
)
from devagent.providers.exceptions import MalformedResponseError, map_provider_error
from devagent.providers.models import ModelResponse, TokenUsage
from devagent.tools.models import TextBlock, ToolRequestBlock, ToolResultBlock

if TYPE_CHECKING:
    from devagent.agent.models import Message
    from devagent.config.schema import ProviderConfig

logger = logging.getLogger(__name__)

# Configure LiteLLM defaults
litellm.drop_params = True  # Drop unsupported params per-provider


def to_openai_tool(definition: dict[str, Any]) -> dict[str, Any]:
    """Convert an Anthropic-format tool definition to LiteLLM's function format."""
    return {
        "type": "function",
        "function": {
            "name": definition["name"],
            "description": definition.get("description", ""),
            "parameters": definition.get("input_schema", {"type": "object", "properties": {}}),
        },
    }


class LiteLLMTransport:
    """Model transport backed by ``litellm.acompletion``."""

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: float = DEFAULT_MODEL_TIMEOUT,
        api_base: str | None = None,
    ):
        """
        Initialize the transport.

        Args:
            model: LiteLLM model identifier, e.g. "anthropic/claude-sonnet-4-5".
            max_tokens: Maximum tokens in each response.
            temperature: Sampling temperature.
            timeout: HTTP timeout for one call, in seconds.
            api_base: Optional custom endpoint.
        """
        self.model = model
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.api_base = api_base

    @classmethod
    def from_config(cls, config: "ProviderConfig") -> "LiteLLMTransport":
        return cls(
            model=config.model,
            max_tokens=config.max_tokens,
            temperature=config.temperature,
            timeout=config.timeout,
            api_base=config.api_base,
        )

    @property
    def provider(self) -> str:
        if "/" in self.model:
            return self.model.split("/")[0]
        return "unknown"

    async def call(
        self,
        conversation: Sequence["Message"],
        tools: list[dict[str, Any]],
        system_prompt: str,
    ) -> ModelResponse:
        """
        Send the conversation to the model.

        Raises:
            TransportError: Mapped from the underlying LiteLLM exception.
            MalformedResponseError: If the reply cannot be interpreted.
        """
        request_kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": self._to_litellm_messages(conversation, system_prompt),
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "timeout": self.timeout,
        }
        if tools:
            request_kwargs["tools"] = [to_openai_tool(tool) for tool in tools]
        if self.api_base:
            request_kwargs["api_base"] = self.api_base

        logger.info(f"Calling model {self.model} with {len(conversation)} messages")
        try:
            response = await acompletion(**request_kwargs)
        except Exception as e:
            raise map_provider_error(e, self.provider) from e

        return self._parse_response(response)

    def _to_litellm_messages(
        self, conversation: Sequence["Message"], system_prompt: str
    ) -> list[dict[str, Any]]:
        """Convert the conversation to LiteLLM (OpenAI-style) messages."""
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})

        for message in conversation:
            texts = [b.text for b in message.content if isinstance(b, TextBlock)]
            requests = [b for b in message.content if isinstance(b, ToolRequestBlock)]
            results = [b for b in message.content if isinstance(b, ToolResultBlock)]

            if message.role.value == "model":
                entry: dict[str, Any] = {
                    "role": "assistant",
                    "content": "\n".join(texts) if texts else None,
                }
                if requests:
                    entry["tool_calls"] = [
                        {
                            "id": request.id,
                            "type": "function",
                            "function": {
                                "name": request.tool_name,
                                "arguments": json.dumps(request.arguments),
                            },
                        }
                        for request in requests
                    ]
                messages.append(entry)
                continue

            for result in results:
                payload = f"Error: {result.payload}" if result.is_error else result.payload
                messages.append(
                    {"role": "tool", "tool_call_id": result.request_id, "content": payload}
                )
            if texts:
                messages.append({"role": "user", "content": "\n".join(texts)})

        return messages

    def _parse_response(self, response: Any) -> ModelResponse:
        """Parse a LiteLLM response into Anthropic-style content blocks."""
        try:
            choice = response.choices[0]
            message = choice.message
        except (AttributeError, IndexError, TypeError) as e:
            raise MalformedResponseError(
                f"Response has no message: {type(e).__name__}", self.provider
            ) from e

        content: list[dict[str, Any]] = []
        if isinstance(message.content, list):
            # Some providers already return structured blocks
            content.extend(message.content)
        elif message.content:
            content.append({"type": "text", "text": message.content})

        for tool_call in getattr(message, "tool_calls", None) or []:
            arguments = tool_call.function.arguments
            if isinstance(arguments, str):
                try:
                    arguments = json.loads(arguments) if arguments.strip() else {}
                except json.JSONDecodeError as e:
                    raise MalformedResponseError(
                        f"Tool call {tool_call.function.name} has invalid JSON arguments",
                        self.provider,
                    ) from e
            content.append(
                {
                    "type": "tool_use",
                    "id": tool_call.id,
                    "name": tool_call.function.name,
                    "input": arguments,
                }
            )

        usage_data = getattr(response, "usage", None)
        usage = TokenUsage(
            input_tokens=getattr(usage_data, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage_data, "completion_tokens", 0) or 0,
        )

        try:
            cost = completion_cost(completion_response=response)
        except Exception as e:
            logger.debug(f"Could not compute cost for {self.model}: {e}")
            cost = 0.0

        return ModelResponse(
            content=content,
            model=getattr(response, "model", None) or self.model,
            stop_reason=getattr(choice, "finish_reason", None) or "unknown",
            usage=usage,
            cost=cost,
        )
