"""FastAPI server: app factory, platform routes, dependencies and middleware."""

from workspace_assistant.platform.server.app import create_app, request_validation_handler
from workspace_assistant.platform.server.health import HealthCheck, metadata

__all__ = ["HealthCheck", "create_app", "metadata", "request_validation_handler"]
