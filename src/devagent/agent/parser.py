"""Parser turning raw model responses into conversation messages."""

import json
import logging
from typing import Any

from devagent.agent.exceptions import MalformedModelResponseError
from devagent.agent.models import Message
from devagent.providers.models import ModelResponse
from devagent.tools.models import ContentBlock, TextBlock, ToolRequestBlock

logger = logging.getLogger(__name__)


class ModelResponseParser:
    """Parses content blocks from model responses.

    Supports Anthropic's content block format:

        [
            {"type": "text", "text": "I'll look at that file."},
            {
                "type": "tool_use",
                "id": "toolu_123",
                "name": "read_file",
                "input": {"path": "src/app.py"}
            }
        ]

    Anything that cannot be interpreted unambiguously raises
    MalformedModelResponseError; the parser never guesses.
    """

    @staticmethod
    def parse_response(response: ModelResponse) -> Message:
        """Convert a response into a model message.

        Raises:
            MalformedModelResponseError: On missing, empty or corrupt content
        """
        content = response.content
        if isinstance(content, str):
            content = [{"type": "text", "text": content}] if content else []
        if not isinstance(content, list):
            raise MalformedModelResponseError(
                f"Unexpected content type: {type(content).__name__}"
            )

        blocks: list[ContentBlock] = []
        seen_ids: set[str] = set()

        for raw in content:
            if not isinstance(raw, dict):
                raise MalformedModelResponseError(
                    f"Content block is {type(raw).__name__}, expected an object"
                )

            block_type = raw.get("type")
            if block_type == "text":
                text = raw.get("text")
                if not isinstance(text, str):
                    raise MalformedModelResponseError("Text block without text")
                if text:
                    blocks.append(TextBlock(text=text))

            elif block_type == "tool_use":
                request = ModelResponseParser._parse_tool_use(raw)
                if request.id in seen_ids:
                    raise MalformedModelResponseError(
                        f"Duplicate tool request id: {request.id}"
                    )
                seen_ids.add(request.id)
                blocks.append(request)

            else:
                # e.g. provider-specific "thinking" blocks
                logger.debug(f"Ignoring content block of type {block_type!r}")

        if not blocks:
            raise MalformedModelResponseError("Response contains no text or tool requests")

        return Message.model(blocks)

    @staticmethod
    def _parse_tool_use(raw: dict[str, Any]) -> ToolRequestBlock:
        tool_id = raw.get("id")
        tool_name = raw.get("name")
        if not isinstance(tool_id, str) or not tool_id:
            raise MalformedModelResponseError("Tool request without an id")
        if not isinstance(tool_name, str) or not tool_name:
            raise MalformedModelResponseError(f"Tool request {tool_id} without a name")

        arguments = raw.get("input", {})
        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments) if arguments.strip() else {}
            except json.JSONDecodeError:
                raise MalformedModelResponseError(
                    f"Tool request {tool_id} has invalid JSON input"
                ) from None
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise MalformedModelResponseError(
                f"Tool request {tool_id} input is {type(arguments).__name__}, expected an object"
            )

        return ToolRequestBlock(id=tool_id, tool_name=tool_name, arguments=arguments)

