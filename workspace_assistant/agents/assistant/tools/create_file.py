"""create_file tool: uploads text content to the workspace files API."""

import html
import logging
import re
from typing import TYPE_CHECKING, Any

import httpx

from workspace_assistant.agents.assistant.tools.registry import ToolSpec
from workspace_assistant.platform.agent.exceptions import ToolExecutionError
from workspace_assistant.platform.settings import ToolSettings

if TYPE_CHECKING:
    from workspace_assistant.agents.assistant.context import RequestContext

logger = logging.getLogger(__name__)

TOOL_NAME = "create_file"
DEVICE_NAME = "web-editor"
DOCX_HTML_TYPE = "application/vnd.banbury.docx-html"

CONTENT_TYPES = {
    "csv": "text/csv",
    "md": "text/markdown",
    "json": "application/json",
    "html": "text/html",
    "htm": "text/html",
    "docx": DOCX_HTML_TYPE,
    "txt": "text/plain",
}

PARAMETERS: dict[str, Any] = {
    "type": "object",
    "properties": {
        "fileName": {"type": "string", "description": "The new file name, e.g. notes.md"},
        "filePath": {
            "type": "string",
            "description": "Full path including the file name, e.g. projects/alpha/notes.md",
        },
        "content": {"type": "string", "description": "The file contents as text"},
        "contentType": {
            "type": "string",
            "description": "Optional MIME type, defaults by extension",
        },
    },
    "required": ["fileName", "filePath", "content"],
}

_HTML_TAG_RE = re.compile(r"<(p|div|h[1-6]|ul|ol|table|html|body)[\s>]", re.IGNORECASE)


def file_parent(file_path: str) -> str:
    """Directory part of a workspace path, ``root`` for top-level files."""
    return "/".join(file_path.split("/")[:-1]) or "root"


def _text_to_html(text: str) -> str:
    paragraphs = [p for p in re.split(r"\n\s*\n", text) if p.strip()]
    return "\n".join(
        "<p>" + html.escape(p.strip()).replace("\n", "<br>") + "</p>" for p in paragraphs
    )


def _wrap_html(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html>\n<html>\n<head>\n    <meta charset=\"UTF-8\">\n"
        f"    <title>{html.escape(title)}</title>\n</head>\n<body>\n{body}\n</body>\n</html>"
    )


def prepare_upload(file_name: str, content: str, content_type: str | None = None) -> tuple[str, str]:
    """Return the body and MIME type to upload for a file name.

    Documents and HTML files are stored as HTML; plain text is wrapped
    paragraph by paragraph.
    """
    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else "txt"
    resolved_type = CONTENT_TYPES.get(extension, content_type or "text/plain")

    if extension in ("docx", "html", "htm"):
        if extension != "docx" and re.search(r"<html[\s>]", content, re.IGNORECASE):
            return content, resolved_type
        body = content if _HTML_TAG_RE.search(content) else _text_to_html(content)
        return _wrap_html(file_name, body), resolved_type
    return content, resolved_type


def create_create_file_tool(http_client: httpx.AsyncClient, settings: ToolSettings) -> ToolSpec:
    """Create the create_file tool.

    Args:
        http_client: Shared HTTP client
        settings: Tool settings with the files API base URL

    Returns:
        ToolSpec that is always offered
    """

    async def create_file(args: dict[str, Any], context: "RequestContext") -> dict[str, Any]:
        if not context.auth_token:
            raise ToolExecutionError(TOOL_NAME, "Missing authentication token")
        if not settings.files_api_url:
            raise ToolExecutionError(TOOL_NAME, "File storage is not configured")

        content = args.get("content") or context.document_context
        if not content:
            raise ToolExecutionError(TOOL_NAME, "No content to write")

        file_name = args["fileName"]
        file_path = args["filePath"]
        body, content_type = prepare_upload(file_name, content, args.get("contentType"))

        try:
            response = await http_client.post(
                f"{settings.files_api_url.rstrip('/')}/files/upload_to_s3/",
                headers={"Authorization": f"Bearer {context.auth_token}"},
                files={"file": (file_name, body.encode("utf-8"), content_type)},
                data={
                    "device_name": DEVICE_NAME,
                    "file_path": file_path,
                    "file_parent": file_parent(file_path),
                },
                timeout=settings.http_timeout_seconds,
            )
        except httpx.HTTPError as e:
            raise ToolExecutionError(TOOL_NAME, str(e) or type(e).__name__) from e

        if response.is_error:
            detail = ""
            try:
                detail = response.json().get("error") or ""
            except ValueError:
                pass
            raise ToolExecutionError(
                TOOL_NAME, detail or "upload rejected", status_code=response.status_code
            )

        data = response.json()
        logger.info("Created file %s", file_path)
        return {
            "result": data.get("result") or "success",
            "file_url": data.get("file_url"),
            "file_info": data.get("file_info"),
            "message": data.get("message") or "File created successfully",
        }

    return ToolSpec(
        name=TOOL_NAME,
        description=(
            "Create a new file in the user's cloud workspace. Provide file name, full path "
            "including the file name, and the file content. Prefer .docx for documents."
        ),
        parameters=PARAMETERS,
        handler=create_file,
        required_args=("fileName", "filePath", "content"),
    )
