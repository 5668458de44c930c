"""Readiness flag and static service info for the platform endpoints."""

import datetime
import os
import platform
import socket
import threading
import time

from workspace_assistant.platform.constants import SERVICE_NAME, SERVICE_VERSION

__all__ = ["HealthCheck", "ServiceInfo", "metadata"]

_ready = threading.Event()


class HealthCheck:
    """Process-wide readiness flag.

    Set once the lifespan has built the agents; cleared when a shutdown signal
    arrives so load balancers stop routing new streams here while open ones
    finish.
    """

    @staticmethod
    def enable() -> None:
        _ready.set()

    @staticmethod
    def disable() -> None:
        _ready.clear()

    @staticmethod
    def status() -> bool:
        return _ready.is_set()


class ServiceInfo:
    """Build and host details reported by ``/info``.

    Build details come from environment variables set by the image build;
    unset ones are reported as ``None``.
    """

    BUILD_ENV_KEYS = ("BUILD_DATE", "BUILD_VERSION", "GIT_COMMIT", "IMAGE_NAME")

    def __init__(self):
        self.started = datetime.datetime.now(tz=datetime.UTC)
        self._started_monotonic = time.monotonic()
        self.static = {
            "service_name": SERVICE_NAME,
            "service_version": SERVICE_VERSION,
            "hostname": socket.gethostname(),
            "os_version": platform.platform(),
            "python_version": platform.python_version(),
            **{key.lower(): os.environ.get(key) for key in self.BUILD_ENV_KEYS},
        }

    def uptime_seconds(self) -> float:
        return round(time.monotonic() - self._started_monotonic, 3)

    def info(self, **extra) -> dict:
        return {
            **self.static,
            **extra,
            "started": self.started.isoformat(),
            "uptime_seconds": self.uptime_seconds(),
        }


metadata = ServiceInfo()
