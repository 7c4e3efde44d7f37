"""Application factory for creating and configuring the FastAPI app."""

from fastapi import FastAPI

from playback_relay import __version__
from playback_relay.config import get_settings
from playback_relay.core.lifespan import lifespan
from playback_relay.core.middleware import setup_middleware
from playback_relay.middleware.error_handlers import register_error_handlers
from playback_relay.routers import (
    control_router,
    events_router,
    health_router,
    status_router,
    webhook_router,
)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Playback Relay API",
        description="""
        **Playback Relay** - one playback group, three ways in and out

        ## Webhook
        `POST /` receives event notifications from the music service. The
        classification header decides which state fields change; every event
        is relayed to push subscribers and acknowledged with 200.

        ## Push
        `WS /ws` streams every ingested event as
        `{"topic": "message from server", "message": {"headers", "payload"}}`.

        ## Polling and control
        - `GET /api/status` - current track, artist, container, play flag and group
        - `POST /api/config` - install `{token, groupId}` for group control
        - `POST /api/play`, `/api/pause`, `/api/toggle` - control the group

        ## Health & Monitoring
        - `/health`, `/health/live`, `/health/ready`, `/debug`
        """,
        version=__version__,
        lifespan=lifespan,
        license_info={
            "name": "MIT",
        },
    )

    setup_middleware(app, settings)

    register_error_handlers(app)

    # Webhook and banner live at the root path
    app.include_router(webhook_router.router, tags=["webhook"])
    app.include_router(events_router.router, tags=["push"])
    app.include_router(health_router.router, tags=["health"])

    # Polling/control surface
    app.include_router(status_router.router, prefix="/api", tags=["status"])
    app.include_router(control_router.router, prefix="/api", tags=["control"])

    return app
