"""Group control endpoints called by the polling control system."""

import httpx
from fastapi import APIRouter, Depends, Request

from playback_relay.config import Settings, get_settings
from playback_relay.core.middleware import limiter
from playback_relay.dependencies import get_http_client, get_playback_store
from playback_relay.models import CommandResponse, ErrorResponse
from playback_relay.services import control_service
from playback_relay.state_managers import PlaybackStateStore

router = APIRouter()

_COMMAND_RESPONSES = {
    200: {
        "description": "Command accepted upstream",
        "content": {"application/json": {"example": {"ok": True, "isPlaying": True}}},
    },
    500: {"model": ErrorResponse, "description": "No session configured"},
    502: {"model": ErrorResponse, "description": "Control API rejected the command or was unreachable"},
    429: {
        "description": "More commands than command_rate_limit allows from this client",
        "content": {"application/json": {"example": {"error": "Rate limit exceeded: 60 per 1 minute"}}},
    },
}


def _command_rate_limit() -> str:
    return get_settings().command_rate_limit


@router.post("/play", response_model=CommandResponse, summary="Resume playback", responses=_COMMAND_RESPONSES)
@limiter.limit(_command_rate_limit)
async def play(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    store: PlaybackStateStore = Depends(get_playback_store),
    settings: Settings = Depends(get_settings),
):
    """Send play to the controlled group."""
    is_playing = await control_service.execute("play", client, store, settings)
    return CommandResponse(is_playing=is_playing)


@router.post("/pause", response_model=CommandResponse, summary="Pause playback", responses=_COMMAND_RESPONSES)
@limiter.limit(_command_rate_limit)
async def pause(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    store: PlaybackStateStore = Depends(get_playback_store),
    settings: Settings = Depends(get_settings),
):
    """Send pause to the controlled group."""
    is_playing = await control_service.execute("pause", client, store, settings)
    return CommandResponse(is_playing=is_playing)


@router.post("/toggle", response_model=CommandResponse, summary="Toggle play/pause", responses=_COMMAND_RESPONSES)
@limiter.limit(_command_rate_limit)
async def toggle(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
    store: PlaybackStateStore = Depends(get_playback_store),
    settings: Settings = Depends(get_settings),
):
    """Toggle play/pause on the controlled group."""
    is_playing = await control_service.execute("toggle", client, store, settings)
    return CommandResponse(is_playing=is_playing)
