"""Unit tests for LangGraphMessageParser.

Covers the conversion of canonical history into LangChain messages and of
model replies into ModelTurns.
"""

import base64

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from workspace_assistant.platform.agent.langgraph import LangGraphMessageParser
from workspace_assistant.platform.agent.messages import (
    FileAttachmentPart,
    Message,
    Role,
    TextPart,
    ToolCallPart,
    ToolResultPart,
)

parser = LangGraphMessageParser()


def call(call_id: str, name: str = "web_search", **args) -> ToolCallPart:
    return ToolCallPart(tool_call_id=call_id, tool_name=name, args=args or {"query": "x"})


def result(call_id: str, value="ok", name: str = "web_search", is_error=False) -> ToolResultPart:
    return ToolResultPart(tool_call_id=call_id, tool_name=name, result=value, is_error=is_error)


class TestToLangchainMessagesBasics:
    """Tests for system, user and plain assistant messages."""

    def test_roles_map_to_message_classes(self):
        converted = parser.to_langchain_messages(
            [
                Message.system("You are helpful"),
                Message.user("Hi"),
                Message.assistant(TextPart("Hello!")),
            ]
        )
        assert [type(m) for m in converted] == [SystemMessage, HumanMessage, AIMessage]
        assert converted[0].content == "You are helpful"
        assert converted[1].content == "Hi"
        assert converted[2].content == "Hello!"

    def test_user_text_parts_joined_by_blank_lines(self):
        message = Message(role=Role.USER, content=(TextPart("a"), TextPart("b")))
        assert parser.to_langchain_messages([message])[0].content == "a\n\nb"


class TestToolHistory:
    """Tests for tool calls and results in history."""

    def test_resolved_call_and_result(self):
        converted = parser.to_langchain_messages(
            [
                Message.user("search"),
                Message.assistant(TextPart("Looking"), call("c1")),
                Message.assistant(result("c1", {"results": []})),
            ]
        )
        ai, tool = converted[1], converted[2]
        assert isinstance(ai, AIMessage)
        assert ai.tool_calls[0]["id"] == "c1"
        assert ai.tool_calls[0]["args"] == {"query": "x"}
        assert isinstance(tool, ToolMessage)
        assert tool.tool_call_id == "c1"
        assert tool.content == '{"results": []}'
        assert tool.status == "success"

    def test_failed_result_has_error_status(self):
        converted = parser.to_langchain_messages(
            [
                Message.assistant(call("c1")),
                Message.assistant(result("c1", {"success": False, "error": "x"}, is_error=True)),
            ]
        )
        assert converted[-1].status == "error"

    def test_call_without_result_is_dropped(self):
        converted = parser.to_langchain_messages(
            [Message.user("go"), Message.assistant(TextPart("Working"), call("pending"))]
        )
        assert converted[-1].tool_calls == []
        assert converted[-1].content == "Working"

    def test_result_without_call_is_dropped(self):
        converted = parser.to_langchain_messages(
            [Message.user("go"), Message.assistant(result("orphan"))]
        )
        assert len(converted) == 1

    def test_call_with_result_in_same_message(self):
        """Client-reduced assistant turns carry the result next to the call."""
        converted = parser.to_langchain_messages(
            [Message.assistant(call("c1"), result("c1", "done"), TextPart("Finished"))]
        )
        assert isinstance(converted[0], AIMessage)
        assert converted[0].content == "Finished"
        assert isinstance(converted[1], ToolMessage)
        assert converted[1].content == "done"

    def test_duplicate_results_answered_once(self):
        converted = parser.to_langchain_messages(
            [
                Message.assistant(call("c1")),
                Message.assistant(result("c1", "first")),
                Message.assistant(result("c1", "second")),
            ]
        )
        tool_messages = [m for m in converted if isinstance(m, ToolMessage)]
        assert [m.content for m in tool_messages] == ["first"]


class TestAttachments:
    """Tests for user attachments."""

    def test_image_becomes_data_uri_block(self):
        message = Message(
            role=Role.USER,
            content=(
                TextPart("What is this?"),
                FileAttachmentPart(
                    file_id="f1",
                    file_name="cat.png",
                    file_path="/cat.png",
                    file_data="iVBORw0K",
                    mime_type="image/png",
                ),
            ),
        )
        content = parser.to_langchain_messages([message])[0].content
        assert content[0] == {"type": "text", "text": "What is this?"}
        assert content[1] == {
            "type": "image_url",
            "image_url": {"url": "data:image/png;base64,iVBORw0K"},
        }

    def test_text_file_is_inlined(self):
        data = base64.b64encode(b"col1,col2\n1,2").decode()
        message = Message(
            role=Role.USER,
            content=(
                FileAttachmentPart(
                    file_id="f1", file_name="d.csv", file_path="/d.csv", file_data=data, mime_type="text/csv"
                ),
            ),
        )
        content = parser.to_langchain_messages([message])[0].content
        assert content[0] == {"type": "text", "text": "User attached files."}
        assert content[1]["text"] == "Attachment: d.csv\n\ncol1,col2\n1,2"

    def test_other_files_become_summary_lines(self):
        message = Message(
            role=Role.USER,
            content=(
                TextPart("Summarize"),
                FileAttachmentPart(file_id="f1", file_name="a.pdf", file_path="/docs/a.pdf"),
            ),
        )
        content = parser.to_langchain_messages([message])[0].content
        assert content == "Summarize\n\nAttachment: a.pdf (/docs/a.pdf)"

    def test_inline_binary_reports_size(self):
        message = Message(
            role=Role.USER,
            content=(
                FileAttachmentPart(
                    file_id="f1",
                    file_name="a.pdf",
                    file_path="/a.pdf",
                    file_data="A" * 4096,
                    mime_type="application/pdf",
                ),
            ),
        )
        assert parser.to_langchain_messages([message])[0].content == "Attachment: a.pdf (~3 KB)"


class TestToModelTurn:
    """Tests for to_model_turn."""

    def test_text_only(self):
        turn = parser.to_model_turn(AIMessage(content="Answer", id="msg_1"))
        assert turn.id == "msg_1"
        assert turn.text == "Answer"
        assert turn.tool_calls == ()

    def test_tool_calls_keep_order_and_ids(self):
        message = AIMessage(
            content="",
            tool_calls=[
                {"id": "a", "name": "web_search", "args": {"query": "1"}},
                {"id": "b", "name": "get_current_datetime", "args": {}},
            ],
        )
        turn = parser.to_model_turn(message)
        assert [c.id for c in turn.tool_calls] == ["a", "b"]
        assert turn.tool_calls[0].args == {"query": "1"}

    def test_missing_ids_are_generated(self):
        message = AIMessage(content="", tool_calls=[{"id": None, "name": "web_search", "args": {}}])
        turn = parser.to_model_turn(message)
        assert turn.tool_calls[0].id.startswith("call_")
        assert turn.id.startswith("turn_")

    def test_block_content_keeps_text_blocks(self):
        message = AIMessage(
            content=[
                {"type": "text", "text": "Hello "},
                {"type": "tool_use", "id": "x", "name": "t", "input": {}},
                {"type": "text", "text": "world"},
            ]
        )
        assert parser.to_model_turn(message).text == "Hello world"
