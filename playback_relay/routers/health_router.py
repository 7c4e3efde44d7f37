"""Liveness, readiness and debug endpoints."""

import platform
import sys
import time
from datetime import UTC, datetime

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from playback_relay import __version__
from playback_relay.config import Settings, get_settings
from playback_relay.dependencies import get_event_broadcaster, get_http_client, get_playback_store
from playback_relay.models import DebugInfo, DebugState, DetailedHealthResponse, HealthResponse
from playback_relay.state_managers import EventBroadcaster, PlaybackStateStore

router = APIRouter()

# app.state attributes the lifespan must have populated
_REQUIRED_COMPONENTS = ("http_client", "playback_store", "event_broadcaster")


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Cheap liveness answer for container healthchecks. See /health/ready for details."""
    return HealthResponse(status="ok", version=__version__)


@router.get("/health/live", response_model=HealthResponse)
async def liveness_check():
    return HealthResponse(status="alive", version=__version__)


@router.get("/health/ready", response_model=DetailedHealthResponse, responses={503: {"model": DetailedHealthResponse}})
async def readiness_check(request: Request):
    """Report whether the lifespan finished building shared state.

    Session presence is listed under `checks.session` but never makes the
    relay unready, since "no session" is a normal state for polling clients.
    """
    state = request.app.state
    checks = {
        name: "ok" if getattr(state, name, None) is not None else "not_initialized" for name in _REQUIRED_COMPONENTS
    }
    ready = all(result == "ok" for result in checks.values())

    store: PlaybackStateStore | None = getattr(state, "playback_store", None)
    if store is not None:
        checks["session"] = "configured" if (await store.snapshot()).has_session else "not_configured"

    body = DetailedHealthResponse(
        status="healthy" if ready else "unhealthy",
        version=__version__,
        timestamp=datetime.now(UTC),
        checks=checks,
    )
    return JSONResponse(status_code=200 if ready else 503, content=body.model_dump(mode="json"))


@router.get(
    "/debug",
    response_model=DebugInfo,
    responses={200: {"description": "System diagnostics and state information"}},
)
async def debug_info(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    store: PlaybackStateStore = Depends(get_playback_store),
    broadcaster: EventBroadcaster = Depends(get_event_broadcaster),
    settings: Settings = Depends(get_settings),
):
    """Debug endpoint with system state and diagnostics.

    Returns:
    - System info (version, uptime, Python version)
    - Application state (session presence, play flag, subscriber count)
    - Configuration
    - Request statistics

    The session token is never included.
    """
    uptime_seconds = int(time.time() - request.app.state.startup_time)

    system_info = {
        "version": __version__,
        "python_version": f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        "platform": platform.system(),
        "uptime_seconds": uptime_seconds,
        "log_level": settings.log_level,
    }

    snapshot = await store.snapshot()
    state_info = DebugState(
        http_client="initialized" if client is not None else "not_initialized",
        session="configured" if snapshot.has_session else "not_configured",
        session_group_id=snapshot.session_group_id,
        is_playing=snapshot.is_playing,
        push_subscribers=broadcaster.subscriber_count,
    )

    config_info = {
        "api_host": settings.api_host,
        "api_port": settings.api_port,
        "control_api_base_url": settings.control_api_base_url,
        "webhook_type_header": settings.webhook_type_header,
        "subscriber_queue_size": settings.subscriber_queue_size,
        "cors_origins": settings.get_cors_origins(),
        "command_rate_limit": settings.command_rate_limit,
    }

    request_stats = {
        "total_requests": request.app.state.request_count,
    }

    return DebugInfo(
        system=system_info,
        state=state_info,
        config=config_info,
        requests=request_stats,
    )
