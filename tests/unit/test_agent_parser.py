"""Tests for the model response parser."""

import pytest

from devagent.agent.exceptions import MalformedModelResponseError
from devagent.agent.parser import ModelResponseParser
from devagent.providers.models import ModelResponse
from devagent.tools.models import TextBlock, ToolRequestBlock


def response(content) -> ModelResponse:
    return ModelResponse(content=content, model="test-model")


class TestModelResponseParser:
    """Tests for ModelResponseParser."""

    def test_text_only(self) -> None:
        message = ModelResponseParser.parse_response(
            response([{"type": "text", "text": "Hello there"}])
        )

        assert message.text == "Hello there"
        assert message.tool_requests == []

    def test_text_and_tool_use(self) -> None:
        message = ModelResponseParser.parse_response(
            response(
                [
                    {"type": "text", "text": "Reading the file."},
                    {"type": "tool_use", "id": "toolu_1", "name": "read_file", "input": {"path": "a.py"}},
                    {"type": "tool_use", "id": "toolu_2", "name": "list_directory", "input": {"path": "."}},
                ]
            )
        )

        assert message.content[0] == TextBlock(text="Reading the file.")
        assert message.tool_requests == [
            ToolRequestBlock(id="toolu_1", tool_name="read_file", arguments={"path": "a.py"}),
            ToolRequestBlock(id="toolu_2", tool_name="list_directory", arguments={"path": "."}),
        ]
        assert message.text == "Reading the file."

    def test_string_content(self) -> None:
        assert ModelResponseParser.parse_response(response("plain")).text == "plain"

    def test_json_string_input(self) -> None:
        message = ModelResponseParser.parse_response(
            response([{"type": "tool_use", "id": "t", "name": "read_file", "input": '{"path": "x"}'}])
        )
        assert message.tool_requests[0].arguments == {"path": "x"}

    def test_missing_input_defaults_to_empty(self) -> None:
        message = ModelResponseParser.parse_response(
            response([{"type": "tool_use", "id": "t", "name": "list_directory"}])
        )
        assert message.tool_requests[0].arguments == {}

    def test_unknown_blocks_are_ignored(self) -> None:
        message = ModelResponseParser.parse_response(
            response([{"type": "thinking", "thinking": "..."}, {"type": "text", "text": "ok"}])
        )
        assert message.content == (TextBlock(text="ok"),)

    @pytest.mark.parametrize(
        "content",
        [
            [],
            "",
            [{"type": "text", "text": ""}],
            [{"type": "thinking", "thinking": "..."}],
            None,
            ["not a block"],
            [{"type": "text"}],
            [{"type": "tool_use", "name": "read_file", "input": {}}],
            [{"type": "tool_use", "id": "t", "input": {}}],
            [{"type": "tool_use", "id": "t", "name": "read_file", "input": "{not json"}],
            [{"type": "tool_use", "id": "t", "name": "read_file", "input": [1, 2]}],
            [
                {"type": "tool_use", "id": "t", "name": "read_file", "input": {}},
                {"type": "tool_use", "id": "t", "name": "read_file", "input": {}},
            ],
        ],
    )
    def test_malformed(self, content) -> None:
        with pytest.raises(MalformedModelResponseError) as exc_info:
            ModelResponseParser.parse_response(response(content))

        assert exc_info.value.user_message == (
            "The assistant returned a response that could not be understood."
        )
        assert exc_info.value.reason
