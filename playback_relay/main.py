"""ASGI entry point.

Run with `uvicorn playback_relay.main:app` or the `playback-relay` script.
"""

from pathlib import Path

import uvicorn
from dotenv import load_dotenv
from fastapi.responses import Response

from playback_relay import __version__
from playback_relay.config import get_settings
from playback_relay.core.app_factory import create_app
from playback_relay.core.middleware import limiter
from playback_relay.logging_config import setup_logging

# .env must be loaded before the first get_settings() call
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

setup_logging(get_settings().log_level)

app = create_app()

__all__ = ["app", "limiter", "run"]


@app.get("/", tags=["meta"])
async def root():
    """Service banner."""
    return {"message": "Playback Relay", "version": __version__, "docs": "/docs"}


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    return Response(content=b"", media_type="image/x-icon")


def run() -> None:
    """Serve the relay with the configured host and port."""
    settings = get_settings()
    # log_config=None leaves the handlers from setup_logging in place
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_config=None)


if __name__ == "__main__":
    run()
