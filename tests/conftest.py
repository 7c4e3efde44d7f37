"""Pytest configuration and shared fixtures."""

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi.testclient import TestClient

from playback_relay.config import Settings
from playback_relay.core.middleware import limiter
from playback_relay.dependencies import get_http_client
from playback_relay.main import app as fastapi_app
from playback_relay.state_managers import EventBroadcaster, PlaybackStateStore


class UpstreamStandIn:
    """Stand-in for the group control API.

    Records every request and answers with `status_code`, or raises
    `error` (e.g. httpx.ConnectError) when set.
    """

    def __init__(self, status_code: int = 200):
        self.status_code = status_code
        self.error: Exception | None = None
        self.requests: list[httpx.Request] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"errorCode": "ERROR_RESOURCE_GONE"})
        return httpx.Response(self.status_code, json={})


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Command endpoints share one in-memory limiter across tests."""
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture
def upstream():
    """Recording stand-in for the control API."""
    return UpstreamStandIn()


@pytest.fixture
def test_client(upstream):
    """FastAPI test client with lifespan context and the upstream stand-in wired in."""
    upstream_client = httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler))
    fastapi_app.dependency_overrides[get_http_client] = lambda: upstream_client
    try:
        with TestClient(fastapi_app) as client:
            yield client
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture
def mock_http_client():
    """Mock httpx.AsyncClient for control API calls."""
    mock_client = AsyncMock(spec=httpx.AsyncClient)
    mock_client.post = AsyncMock()
    mock_client.aclose = AsyncMock()
    return mock_client


@pytest.fixture
def mock_settings():
    """Settings instance with test values."""
    return Settings(
        api_host="127.0.0.1",
        api_port=8080,
        control_api_base_url="https://control.test/api/v1/groups",
        webhook_type_header="X-Sonos-Type",
        subscriber_queue_size=10,
    )


@pytest.fixture
def playback_store():
    """Fresh playback state store."""
    return PlaybackStateStore()


@pytest.fixture
def event_broadcaster():
    """Fresh broadcaster with a small per-subscriber buffer."""
    return EventBroadcaster(queue_size=10)


@pytest.fixture
def metadata_event():
    """metadataStatus payload as delivered by the music service."""
    return {
        "container": {
            "name": "Classic Rock",
            "type": "playlist",
            "id": {"serviceId": "9", "objectId": "spotify:playlist:abc"},
        },
        "currentItem": {
            "track": {
                "type": "track",
                "name": "Bohemian Rhapsody",
                "artist": {"name": "Queen"},
                "album": {"name": "A Night at the Opera"},
                "durationMillis": 354000,
            }
        },
        "nextItem": {"track": {"name": "Hotel California", "artist": {"name": "Eagles"}}},
    }


@pytest.fixture
def playback_event():
    """playbackStatus payload as delivered by the music service."""
    return {
        "playbackState": "PLAYBACK_STATE_PLAYING",
        "positionMillis": 125000,
        "playModes": {"repeat": False, "repeatOne": False, "shuffle": False, "crossfade": False},
    }
