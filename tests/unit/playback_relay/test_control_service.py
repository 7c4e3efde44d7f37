"""Unit tests for the group control proxy."""

from unittest.mock import AsyncMock

import httpx
import pytest

from playback_relay.exceptions import (
    ErrorCode,
    SessionNotConfiguredException,
    UnknownActionException,
    UpstreamControlException,
)
from playback_relay.services import control_service
from playback_relay.state_managers import PlaybackStateStore

BASE_URL = "https://control.test/api/v1/groups/"


def _response(status_code: int, url: str = BASE_URL, text: str = "") -> httpx.Response:
    """Real httpx response bound to a request so raise_for_status works."""
    return httpx.Response(status_code, text=text, request=httpx.Request("POST", url))


@pytest.mark.asyncio
@pytest.mark.parametrize("action", ["play", "pause", "toggle"])
async def test_execute_without_session_makes_no_request(action, mock_http_client, playback_store, mock_settings):
    """Test commands fail fast when no credentials are installed."""
    with pytest.raises(SessionNotConfiguredException) as exc_info:
        await control_service.execute(action, mock_http_client, playback_store, mock_settings)

    assert exc_info.value.code == ErrorCode.SESSION_NOT_CONFIGURED
    assert exc_info.value.status_code == 500
    assert "No token or groupId configured" in exc_info.value.message
    mock_http_client.post.assert_not_called()


@pytest.mark.asyncio
@pytest.mark.parametrize("credentials", [("token", None), (None, "group"), ("", "group"), ("token", "")])
async def test_execute_with_half_session_makes_no_request(credentials, mock_http_client, mock_settings):
    """Test either credential missing counts as no session."""
    store = AsyncMock(spec=PlaybackStateStore)
    store.get_credentials.return_value = credentials

    with pytest.raises(SessionNotConfiguredException):
        await control_service.execute("play", mock_http_client, store, mock_settings)

    mock_http_client.post.assert_not_called()
    store.set_playing.assert_not_called()


@pytest.mark.asyncio
async def test_execute_play_success(mock_http_client, playback_store, mock_settings):
    """Test play posts to the group action path with bearer auth and sets is_playing."""
    await playback_store.set_credentials("t1", "g1")
    mock_http_client.post.return_value = _response(200)

    is_playing = await control_service.execute("play", mock_http_client, playback_store, mock_settings)

    assert is_playing is True
    assert (await playback_store.snapshot()).is_playing is True
    mock_http_client.post.assert_called_once()
    args, kwargs = mock_http_client.post.call_args
    assert args[0] == f"{BASE_URL}g1/playback/play"
    assert kwargs["headers"]["Authorization"] == "Bearer t1"
    assert kwargs["json"] == {}


@pytest.mark.asyncio
async def test_execute_pause_success(mock_http_client, playback_store, mock_settings):
    """Test pause sets is_playing False."""
    await playback_store.set_credentials("t1", "g1")
    await playback_store.set_playing(True)
    mock_http_client.post.return_value = _response(200)

    is_playing = await control_service.execute("pause", mock_http_client, playback_store, mock_settings)

    assert is_playing is False
    assert (await playback_store.snapshot()).is_playing is False
    assert mock_http_client.post.call_args[0][0] == f"{BASE_URL}g1/playback/pause"


@pytest.mark.asyncio
async def test_execute_toggle_twice_restores_original(mock_http_client, playback_store, mock_settings):
    """Test two successful toggles return is_playing to its starting value."""
    await playback_store.set_credentials("t1", "g1")
    mock_http_client.post.return_value = _response(200)

    first = await control_service.execute("toggle", mock_http_client, playback_store, mock_settings)
    second = await control_service.execute("toggle", mock_http_client, playback_store, mock_settings)

    assert first is True
    assert second is False
    assert (await playback_store.snapshot()).is_playing is False
    assert mock_http_client.post.call_count == 2
    assert mock_http_client.post.call_args[0][0] == f"{BASE_URL}g1/playback/togglePlayPause"


@pytest.mark.asyncio
async def test_execute_upstream_rejection_leaves_state(mock_http_client, playback_store, mock_settings):
    """Test a non-2xx response surfaces upstream detail and keeps is_playing."""
    await playback_store.set_credentials("t1", "g1")
    await playback_store.set_playing(True)
    mock_http_client.post.return_value = _response(401, text='{"errorCode": "ERROR_NOT_AUTHORIZED"}')

    with pytest.raises(UpstreamControlException) as exc_info:
        await control_service.execute("toggle", mock_http_client, playback_store, mock_settings)

    assert exc_info.value.status_code == 502
    assert exc_info.value.code == ErrorCode.UPSTREAM_ERROR
    assert exc_info.value.details["upstream_status"] == 401
    assert "ERROR_NOT_AUTHORIZED" in exc_info.value.details["upstream_body"]
    assert (await playback_store.snapshot()).is_playing is True


@pytest.mark.asyncio
async def test_execute_network_error_leaves_state(mock_http_client, playback_store, mock_settings):
    """Test a network failure is surfaced and keeps is_playing."""
    await playback_store.set_credentials("t1", "g1")
    mock_http_client.post.side_effect = httpx.ConnectError("Connection refused")

    with pytest.raises(UpstreamControlException) as exc_info:
        await control_service.execute("play", mock_http_client, playback_store, mock_settings)

    assert "Connection refused" in exc_info.value.message
    assert exc_info.value.details["error_type"] == "ConnectError"
    assert (await playback_store.snapshot()).is_playing is False


@pytest.mark.asyncio
async def test_execute_unknown_action(mock_http_client, playback_store, mock_settings):
    """Test unsupported actions are rejected before any request."""
    await playback_store.set_credentials("t1", "g1")

    with pytest.raises(UnknownActionException) as exc_info:
        await control_service.execute("skip", mock_http_client, playback_store, mock_settings)

    assert exc_info.value.status_code == 400
    mock_http_client.post.assert_not_called()


def test_build_control_url():
    """Test URL assembly for every action."""
    base = "https://api.ws.sonos.com/control/api/v1/groups/"
    assert control_service.build_control_url(base, "G:1", "play") == f"{base}G:1/playback/play"
    assert control_service.build_control_url(base, "G:1", "pause") == f"{base}G:1/playback/pause"
    assert control_service.build_control_url(base, "G:1", "toggle") == f"{base}G:1/playback/togglePlayPause"

    with pytest.raises(UnknownActionException):
        control_service.build_control_url(base, "G:1", "next")
