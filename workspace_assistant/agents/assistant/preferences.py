"""Per-request tool preferences."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Self

PROVIDERS = ("anthropic", "openai")


@dataclass(frozen=True)
class ToolPreferences:
    """Which tool families the user enabled, and which model to use.

    Attributes:
        web_search: Web search tool (default on)
        tiptap_ai: Document editing tools (default on)
        read_file: Workspace file reading (default on)
        gmail: Gmail read tools (default on)
        gmail_send: Gmail send tool (default on)
        browser: Browser automation tools (default off)
        x_api: X/Twitter tools (opt-in only)
        model_provider: Provider name, None for the service default
        model_id: Provider model id, None for the provider default
    """

    web_search: bool = True
    tiptap_ai: bool = True
    read_file: bool = True
    gmail: bool = True
    gmail_send: bool = True
    browser: bool = False
    x_api: bool = False
    model_provider: str | None = None
    model_id: str | None = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any] | None) -> Self:
        """Normalize the loosely-typed preference object sent by clients.

        Flags that default on are disabled only by an explicit ``false``.
        ``browser`` falls back to the legacy ``browserbase`` key. ``x_api``
        must be explicitly ``true``.
        """
        raw = raw or {}
        browser = raw.get("browser")
        if not isinstance(browser, bool):
            browser = bool(raw.get("browserbase"))

        provider = raw.get("model_provider")
        if provider not in PROVIDERS:
            provider = None
        model_id = raw.get("model_id")

        return cls(
            web_search=raw.get("web_search") is not False,
            tiptap_ai=raw.get("tiptap_ai") is not False,
            read_file=raw.get("read_file") is not False,
            gmail=raw.get("gmail") is not False,
            gmail_send=raw.get("gmailSend") is not False,
            browser=browser,
            x_api=raw.get("x_api") is True,
            model_provider=provider,
            model_id=model_id if isinstance(model_id, str) and model_id.strip() else None,
        )

    def is_enabled(self, flag: str | None) -> bool:
        """Whether a tool gated by ``flag`` may be offered. No flag means always on."""
        if flag is None:
            return True
        value = getattr(self, flag, None)
        if not isinstance(value, bool):
            raise ValueError(f"Unknown tool preference flag: {flag}")
        return value
