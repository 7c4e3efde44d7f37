"""FastAPI dependencies for dependency injection.

Every shared object lives on app.state, put there by the lifespan. The
lookups take an HTTPConnection so the same functions serve both HTTP
routes and the push WebSocket.
"""

from typing import Any

import httpx
from fastapi.requests import HTTPConnection

from playback_relay.state_managers import EventBroadcaster, PlaybackStateStore


def _app_state(connection: HTTPConnection, name: str) -> Any:
    """Fetch `name` from app.state.

    Raises:
        RuntimeError: If the lifespan has not populated it (app served without startup)
    """
    value = getattr(connection.app.state, name, None)
    if value is None:
        raise RuntimeError(f"app.state.{name} is not initialized; was the application lifespan run?")
    return value


async def get_http_client(connection: HTTPConnection) -> httpx.AsyncClient:
    """Shared AsyncClient for control API calls."""
    return _app_state(connection, "http_client")


async def get_playback_store(connection: HTTPConnection) -> PlaybackStateStore:
    """The process-wide playback state store."""
    return _app_state(connection, "playback_store")


async def get_event_broadcaster(connection: HTTPConnection) -> EventBroadcaster:
    """The process-wide push broadcaster."""
    return _app_state(connection, "event_broadcaster")
