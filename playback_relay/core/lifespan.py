"""Application lifespan: the composition root.

Startup builds exactly one upstream HTTP client, one playback state store
and one push broadcaster and parks them on app.state, where the
dependency functions find them. Shutdown releases them in reverse order.
"""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from playback_relay import __version__
from playback_relay.config import Settings, get_settings
from playback_relay.logging_config import get_logger, log_with_context
from playback_relay.middleware.logging_middleware import redact_sensitive_data
from playback_relay.state_managers import EventBroadcaster, PlaybackStateStore, StateManager

logger = get_logger(__name__)


async def log_upstream_request(request: httpx.Request) -> None:
    """httpx request hook: one line per control call, secrets masked."""
    log_with_context(
        logger,
        "info",
        f"Control API -> {request.method} {request.url.path}",
        method=request.method,
        url=redact_sensitive_data(str(request.url)),
        event_type="upstream_request",
    )


async def log_upstream_response(response: httpx.Response) -> None:
    """httpx response hook: status of each control API reply."""
    await response.aread()
    log_with_context(
        logger,
        "info" if response.is_success else "warning",
        f"Control API <- {response.status_code}",
        status_code=response.status_code,
        url=redact_sensitive_data(str(response.request.url)),
        event_type="upstream_response",
    )


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """Create the shared client for the control API.

    Commands are single attempts: no transport retries are configured.
    """
    return httpx.AsyncClient(  # nosec B113
        timeout=httpx.Timeout(
            connect=settings.upstream_connect_timeout,
            read=settings.upstream_read_timeout,
            write=settings.upstream_connect_timeout,
            pool=settings.upstream_connect_timeout,
        ),
        limits=httpx.Limits(max_keepalive_connections=5, max_connections=10, keepalive_expiry=30.0),
        event_hooks={"request": [log_upstream_request], "response": [log_upstream_response]},
    )


async def _start_state_managers(app: FastAPI, settings: Settings) -> list[StateManager]:
    store = PlaybackStateStore()
    broadcaster = EventBroadcaster(queue_size=settings.subscriber_queue_size)
    managers: list[StateManager] = [store, broadcaster]
    for manager in managers:
        await manager.initialize()

    app.state.playback_store = store
    app.state.event_broadcaster = broadcaster
    return managers


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build shared state on startup and tear it down on shutdown.

    Errors raised while serving are logged and re-raised after cleanup.
    """
    settings = get_settings()
    app.state.startup_time = time.time()
    app.state.request_count = 0

    log_with_context(
        logger,
        "info",
        "Starting Playback Relay",
        version=__version__,
        control_api_base_url=settings.control_api_base_url,
        webhook_type_header=settings.webhook_type_header,
        event_type="app_startup",
    )

    client = build_http_client(settings)
    app.state.http_client = client
    managers = await _start_state_managers(app, settings)
    log_with_context(
        logger,
        "info",
        "Relay state ready",
        subscriber_queue_size=settings.subscriber_queue_size,
        event_type="state_managers_ready",
    )

    try:
        yield
    except Exception as e:
        log_with_context(
            logger,
            "error",
            "Application error during lifespan",
            error=str(e),
            error_type=type(e).__name__,
            event_type="app_error",
        )
        raise
    finally:
        for manager in reversed(managers):
            await manager.cleanup()
        await client.aclose()
        log_with_context(
            logger,
            "info",
            "Playback Relay stopped",
            uptime_seconds=int(time.time() - app.state.startup_time),
            event_type="app_shutdown",
        )
