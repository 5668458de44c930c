"""Bugsnag error reporting integration."""

import logging

import bugsnag
from bugsnag.handlers import BugsnagHandler

from workspace_assistant.platform.constants import SERVICE_VERSION


def initialize_bugsnag(api_key: str, release_stage: str) -> bool:
    """Configure Bugsnag and attach its handler to the root logger.

    ERROR-level log records (including the stack traces logged when a stream
    aborts) are reported automatically. Nothing is configured for the
    ``local`` stage or when no API key is set.

    Returns:
        True if the handler was installed
    """
    if release_stage == "local" or not api_key:
        return False
    bugsnag.configure(
        api_key=api_key,
        release_stage=release_stage,
        app_version=SERVICE_VERSION,
        auto_notify=True,
    )
    handler = BugsnagHandler()
    handler.setLevel(logging.ERROR)
    logging.getLogger().addHandler(handler)
    return True
