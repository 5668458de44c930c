"""Unit tests for the create_file tool."""

import httpx
import pytest

from workspace_assistant.agents.assistant.tools.create_file import (
    DOCX_HTML_TYPE,
    create_create_file_tool,
    file_parent,
    prepare_upload,
)
from workspace_assistant.platform.agent.exceptions import ToolExecutionError
from workspace_assistant.platform.settings import ToolSettings


class TestFileParent:
    """Tests for file_parent."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [("projects/alpha/notes.md", "projects/alpha"), ("notes.md", "root"), ("a/b.txt", "a")],
    )
    def test_parent(self, path, expected):
        assert file_parent(path) == expected


class TestPrepareUpload:
    """Tests for prepare_upload."""

    def test_markdown_passthrough(self):
        assert prepare_upload("notes.md", "# Title") == ("# Title", "text/markdown")

    def test_unknown_extension_uses_given_type(self):
        assert prepare_upload("data.yaml", "a: 1", "application/yaml") == ("a: 1", "application/yaml")

    def test_no_extension_is_text(self):
        assert prepare_upload("README", "hi") == ("hi", "text/plain")

    def test_docx_plain_text_becomes_html(self):
        body, content_type = prepare_upload("report.docx", "First line\nsecond\n\nNext <para>")
        assert content_type == DOCX_HTML_TYPE
        assert "<title>report.docx</title>" in body
        assert "<p>First line<br>second</p>" in body
        assert "<p>Next &lt;para&gt;</p>" in body

    def test_docx_html_fragment_is_wrapped(self):
        body, _ = prepare_upload("report.docx", "<h1>Title</h1><p>Body</p>")
        assert body.startswith("<!DOCTYPE html>")
        assert "<h1>Title</h1><p>Body</p>" in body

    def test_full_html_document_kept(self):
        document = "<html><body><p>x</p></body></html>"
        assert prepare_upload("page.html", document) == (document, "text/html")


class TestCreateFileHandler:
    """Tests for the create_file handler."""

    def make_tool(self, handler, settings: ToolSettings):
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return create_create_file_tool(client, settings)

    async def test_upload(self, tool_settings, make_context):
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = request.content.decode()
            return httpx.Response(
                200, json={"result": "success", "file_url": "https://files.test/f/1", "file_info": {"id": 1}}
            )

        tool = self.make_tool(handler, tool_settings)
        result = await tool.handler(
            {"fileName": "notes.md", "filePath": "projects/notes.md", "content": "# Notes"},
            make_context(),
        )

        assert result == {
            "result": "success",
            "file_url": "https://files.test/f/1",
            "file_info": {"id": 1},
            "message": "File created successfully",
        }
        assert captured["url"] == "https://files.test/api/files/upload_to_s3/"
        assert captured["auth"] == "Bearer user-token"
        assert "web-editor" in captured["body"]
        assert "# Notes" in captured["body"]

    async def test_document_context_used_as_content(self, tool_settings, make_context):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(request.content.decode())
            return httpx.Response(200, json={})

        tool = self.make_tool(handler, tool_settings)
        await tool.handler(
            {"fileName": "copy.txt", "filePath": "copy.txt"},
            make_context(document_context="Open document text"),
        )

        assert "Open document text" in bodies[0]

    async def test_missing_token(self, tool_settings, make_context):
        tool = self.make_tool(lambda request: httpx.Response(200, json={}), tool_settings)

        with pytest.raises(ToolExecutionError, match="authentication"):
            await tool.handler(
                {"fileName": "a.txt", "filePath": "a.txt", "content": "x"},
                make_context(auth_token=None),
            )

    async def test_rejected_upload(self, tool_settings, make_context):
        tool = self.make_tool(
            lambda request: httpx.Response(403, json={"error": "Quota exceeded"}), tool_settings
        )

        with pytest.raises(ToolExecutionError) as exc_info:
            await tool.handler(
                {"fileName": "a.txt", "filePath": "a.txt", "content": "x"}, make_context()
            )

        assert exc_info.value.status_code == 403
        assert "Quota exceeded" in str(exc_info.value)
