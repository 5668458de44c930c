"""get_current_datetime tool."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from workspace_assistant.agents.assistant.context import DateTimeContext
from workspace_assistant.agents.assistant.tools.registry import ToolSpec

if TYPE_CHECKING:
    from workspace_assistant.agents.assistant.context import RequestContext

TOOL_NAME = "get_current_datetime"


def describe_now(now: datetime) -> dict[str, Any]:
    """Date and time components of ``now`` in its own timezone."""
    date_time = DateTimeContext.now(now)
    local = now.astimezone()
    return {
        "currentDate": f"{local:%A, %B} {local.day}, {local.year}",
        "currentTime": f"{local:%I:%M %p}",
        "timezone": local.tzname() or "UTC",
        "isoString": date_time.iso_string,
        "formatted": date_time.formatted,
        "unixTimestamp": int(now.timestamp()),
        "year": local.year,
        "month": local.month,
        "day": local.day,
        "hour": local.hour,
        "minute": local.minute,
        # 0 = Sunday
        "dayOfWeek": local.isoweekday() % 7,
        "dayOfYear": local.timetuple().tm_yday,
    }


def create_clock_tool() -> ToolSpec:
    """Create the get_current_datetime tool.

    Returns:
        ToolSpec that is always offered
    """

    async def get_current_datetime(args: dict[str, Any], context: "RequestContext") -> dict[str, Any]:
        return describe_now(datetime.now(UTC))

    return ToolSpec(
        name=TOOL_NAME,
        description=(
            "Get the current date and time information including formatted strings, "
            "timestamps, and individual components."
        ),
        parameters={"type": "object", "properties": {}},
        handler=get_current_datetime,
    )
