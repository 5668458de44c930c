"""System prompt templates for the assistant."""

from workspace_assistant.agents.assistant.context import DateTimeContext
from workspace_assistant.platform.agent.messages import Message, Role

SYSTEM_PROMPT = """You are a helpful AI assistant embedded in the user's cloud workspace.

## Tools

- Use `web_search` for current events, facts you are unsure about, or anything the user asks you to look up. Cite the URLs of the results you rely on.
- Use `create_file` to save new documents in the user's workspace. Provide `fileName`, the full `filePath` including the file name, and the `content`. When the user has a document open, its text is available as context.
- Use `get_current_datetime` when you need the precise current time.
- Other tools (Gmail, browser automation, X) are offered only when the user has enabled them. Never claim to have used a tool you were not given.

## Working style

- Call tools with every required argument filled in; calls with missing arguments are rejected.
- If a tool reports an error, read it, then either retry with corrected arguments or explain the problem to the user.
- When the task is done, answer directly and concisely."""


def build_system_prompt(date_time: DateTimeContext) -> str:
    """Build the system prompt for the assistant.

    Args:
        date_time: The user's current date and time

    Returns:
        Complete system prompt string
    """
    return f"{SYSTEM_PROMPT}\n\n{date_time.describe()}"


def with_system_prompt(messages: list[Message], date_time: DateTimeContext) -> list[Message]:
    """Prepend the system prompt unless the history already starts with one."""
    if messages and messages[0].role == Role.SYSTEM:
        return list(messages)
    return [Message.system(build_system_prompt(date_time)), *messages]
