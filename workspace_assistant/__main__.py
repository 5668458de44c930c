"""``python -m workspace_assistant`` runs the streaming API under uvicorn."""

import sys

import click
import uvicorn

from .platform.settings import Settings


@click.command()
@click.option("--host", default=None, help="Bind address; defaults to APP_HTTP__HOST.")
@click.option("--port", type=int, default=None, help="Bind port; defaults to APP_HTTP__PORT.")
@click.option("--reload", is_flag=True, help="Restart on code changes (development only).")
def main(host: str | None, port: int | None, reload: bool):
    settings = Settings()
    uvicorn.run(
        "workspace_assistant:app",
        factory=True,
        loop="uvloop",
        host=host or settings.app_http.host,
        port=port or settings.app_http.port,
        log_level=settings.app_http.log_level.lower(),
        reload=reload,
    )


if __name__ == "__main__":
    sys.exit(main())
