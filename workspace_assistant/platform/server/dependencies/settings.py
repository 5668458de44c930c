from fastapi import Request

from workspace_assistant.platform.settings import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_bearer_token(request: Request) -> str | None:
    """Token from an ``Authorization: Bearer`` header, if present."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()
