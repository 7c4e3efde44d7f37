"""Group control proxy: play/pause/toggle against the upstream control API."""

import httpx

from playback_relay.config import Settings, get_settings
from playback_relay.exceptions import (
    SessionNotConfiguredException,
    UnknownActionException,
    UpstreamControlException,
)
from playback_relay.logging_config import get_logger, log_with_context
from playback_relay.state_managers import PlaybackStateStore

logger = get_logger(__name__)

# Command name -> upstream action sub-path
ACTION_PATHS: dict[str, str] = {
    "play": "playback/play",
    "pause": "playback/pause",
    "toggle": "playback/togglePlayPause",
}


def build_control_url(base_url: str, group_id: str, action: str) -> str:
    """Build the upstream URL for an action.

    Args:
        base_url: Control API base, ending in a slash
        group_id: Controlled group identifier
        action: One of ACTION_PATHS

    Returns:
        Full request URL

    Raises:
        UnknownActionException: If the action has no upstream path
    """
    try:
        action_path = ACTION_PATHS[action]
    except KeyError:
        raise UnknownActionException(action) from None
    return f"{base_url}{group_id}/{action_path}"


async def execute(
    action: str,
    client: httpx.AsyncClient,
    store: PlaybackStateStore,
    settings: Settings | None = None,
) -> bool:
    """Send one command upstream and update the play flag optimistically.

    A single attempt is made: no retry and no queuing. The play flag only
    changes after a 2xx response and is never re-read from upstream.

    Args:
        action: "play", "pause" or "toggle"
        client: Shared HTTP client from dependency injection.
        store: Playback state store holding the session credentials
        settings: Settings instance (defaults to singleton)

    Returns:
        The play flag after the command

    Raises:
        UnknownActionException: If the action is not supported
        SessionNotConfiguredException: If no token/group pair is installed (no request is sent)
        UpstreamControlException: On a network error or non-2xx response (state untouched)
    """
    if settings is None:
        settings = get_settings()

    if action not in ACTION_PATHS:
        raise UnknownActionException(action)

    token, group_id = await store.get_credentials()
    if not token or not group_id:
        raise SessionNotConfiguredException()

    url = build_control_url(settings.control_api_base_url, group_id, action)

    try:
        response = await client.post(
            url,
            headers={"Content-Type": "application/json", "Authorization": f"Bearer {token}"},
            json={},
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        upstream_status = e.response.status_code
        log_with_context(
            logger,
            "error",
            f"{action.capitalize()} rejected by control API",
            action=action,
            group_id=group_id,
            upstream_status=upstream_status,
            event_type="control_upstream_rejected",
        )
        raise UpstreamControlException(
            f"Control API returned {upstream_status} for {action}",
            details={"action": action, "upstream_status": upstream_status, "upstream_body": e.response.text},
        ) from e
    except httpx.HTTPError as e:
        log_with_context(
            logger,
            "error",
            f"{action.capitalize()} request failed",
            action=action,
            group_id=group_id,
            error=str(e),
            error_type=type(e).__name__,
            event_type="control_upstream_unreachable",
        )
        raise UpstreamControlException(
            f"Control API request failed for {action}: {e}",
            details={"action": action, "error_type": type(e).__name__},
        ) from e

    # TODO: reconcile the optimistic flag with the next playbackStatus event instead of trusting it blindly
    if action == "play":
        await store.set_playing(True)
        is_playing = True
    elif action == "pause":
        await store.set_playing(False)
        is_playing = False
    else:
        is_playing = await store.toggle_playing()

    log_with_context(
        logger,
        "info",
        f"{action.capitalize()} command sent",
        action=action,
        group_id=group_id,
        is_playing=is_playing,
        event_type="control_command_sent",
    )
    return is_playing
