"""Tests for conversation models."""

import pytest

from devagent.agent.exceptions import ConversationError, ErrorContext
from devagent.agent.models import AgentConfig, AgentEvent, Conversation, EventType, Message, Role
from devagent.constants import USER_DIR_MARKER
from devagent.tools.models import TextBlock, ToolRequestBlock, ToolResultBlock


def model_requesting(*ids: str) -> Message:
    return Message.model(
        [TextBlock(text="Let me check.")]
        + [ToolRequestBlock(id=i, tool_name="read_file", arguments={"path": "a"}) for i in ids]
    )


def results_for(*ids: str) -> Message:
    return Message.tool_results(ToolResultBlock(request_id=i, payload="ok") for i in ids)


class TestMessage:
    """Tests for Message."""

    def test_user_message(self) -> None:
        message = Message.user("Hello")

        assert message.role is Role.USER
        assert message.text == "Hello"
        assert message.tool_requests == []

    def test_text_joins_blocks(self) -> None:
        message = Message.model([TextBlock(text="one"), TextBlock(text="two")])
        assert message.text == "one\ntwo"

    def test_tool_requests(self) -> None:
        message = model_requesting("a", "b")
        assert [r.id for r in message.tool_requests] == ["a", "b"]

    def test_message_is_immutable(self) -> None:
        message = Message.user("hi")
        with pytest.raises(Exception):
            message.role = Role.MODEL  # type: ignore[misc]

    def test_content_is_discriminated(self) -> None:
        message = Message.model_validate(
            {"role": "model", "content": [{"type": "tool_use", "id": "x", "tool_name": "t"}]}
        )
        assert isinstance(message.content[0], ToolRequestBlock)


class TestConversation:
    """Tests for Conversation invariants."""

    def test_valid_exchange(self) -> None:
        conversation = Conversation([Message.user("Read a"), model_requesting("t1"), results_for("t1")])
        conversation.append(Message.model([TextBlock(text="Done")]))

        assert len(conversation) == 4
        assert conversation.last.text == "Done"
        assert [m.role for m in conversation] == [Role.USER, Role.MODEL, Role.USER, Role.MODEL]

    def test_must_start_with_user(self) -> None:
        with pytest.raises(ConversationError, match="start with a user"):
            Conversation([Message.model([TextBlock(text="hi")])])

    def test_roles_must_alternate(self) -> None:
        conversation = Conversation([Message.user("one")])

        with pytest.raises(ConversationError, match="consecutive"):
            conversation.append(Message.user("two"))

    def test_empty_message_rejected(self) -> None:
        with pytest.raises(ConversationError, match="no content"):
            Conversation([Message(role=Role.USER, content=())])

    def test_results_must_match_requests(self) -> None:
        conversation = Conversation([Message.user("go"), model_requesting("t1", "t2")])

        with pytest.raises(ConversationError, match="exactly once"):
            conversation.append(results_for("t1"))

        with pytest.raises(ConversationError):
            conversation.append(results_for("t1", "t2", "t3"))

        conversation.append(results_for("t2", "t1"))
        assert len(conversation) == 3

    def test_results_without_requests_rejected(self) -> None:
        conversation = Conversation([Message.user("go"), Message.model([TextBlock(text="hi")])])

        with pytest.raises(ConversationError):
            conversation.append(results_for("t1"))

    def test_request_ids_unique_within_turn(self) -> None:
        conversation = Conversation([Message.user("go"), model_requesting("t1"), results_for("t1")])

        with pytest.raises(ConversationError, match="unique"):
            conversation.append(model_requesting("t1"))

    def test_duplicate_ids_in_one_message(self) -> None:
        conversation = Conversation([Message.user("go")])

        with pytest.raises(ConversationError, match="unique"):
            conversation.append(model_requesting("t1", "t1"))

    def test_user_cannot_request_tools(self) -> None:
        message = Message(
            role=Role.USER, content=(ToolRequestBlock(id="x", tool_name="read_file"),)
        )
        with pytest.raises(ConversationError, match="User messages"):
            Conversation([message])

    def test_messages_is_a_copy(self) -> None:
        conversation = Conversation([Message.user("go")])
        messages = conversation.messages
        conversation.append(Message.model([TextBlock(text="ok")]))

        assert len(messages) == 1


class TestAgentConfig:
    def test_defaults(self) -> None:
        config = AgentConfig()
        assert config.max_iterations == 10
        assert config.max_retries == 3

    def test_bounds(self) -> None:
        with pytest.raises(Exception):
            AgentConfig(max_iterations=0)
        with pytest.raises(Exception):
            AgentConfig(max_retries=-1)


class TestAgentEvent:
    def test_enum_values(self) -> None:
        event = AgentEvent(event_type=EventType.TOOL_START, iteration=1, tool_name="read_file")

        assert event.event_type == "tool_start"
        assert event.event_type == EventType.TOOL_START


class TestErrorContext:
    def test_create_sanitizes(self) -> None:
        context = ErrorContext.create(
            "model_call",
            RuntimeError("failed reading /home/ann/notes"),
            retry_count=2,
            metadata={"api_key": "abc", "attempt": 3},
        )

        assert context.detail == f"RuntimeError: failed reading {USER_DIR_MARKER}"
        assert context.retry_count == 2
        assert context.metadata == {"api_key": "[REDACTED]", "attempt": 3}
        assert context.to_dict()["operation"] == "model_call"

    def test_create_from_string(self) -> None:
        assert ErrorContext.create("tool_loop", "stopped").detail == "stopped"
