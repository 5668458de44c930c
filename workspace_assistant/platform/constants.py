"""Service-wide constants."""

SERVICE_NAME = "workspace-assistant"
SERVICE_VERSION = "0.1.0"
USER_AGENT = f"{SERVICE_NAME}/{SERVICE_VERSION}"
