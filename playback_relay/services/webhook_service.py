"""Webhook ingestion: fold upstream event notifications into the playback state.

Every delivery is relayed to push subscribers verbatim whatever its
classification; the classification only decides which state fields change.
Malformed or partial payloads never raise: missing values default to an
empty string or False.
"""

from typing import Any

from playback_relay.logging_config import get_logger, log_with_context
from playback_relay.state_managers import EventBroadcaster, PlaybackStateStore

logger = get_logger(__name__)

METADATA_STATUS = "metadataStatus"
PLAYBACK_STATUS = "playbackStatus"

# Upstream enum values are PLAYBACK_STATE_<NAME>; the prefix is optional here
PLAYBACK_STATE_PREFIX = "PLAYBACK_STATE_"
ACTIVE_PLAYBACK_STATES = frozenset({"PLAYING", "BUFFERING"})


def _dig(payload: Any, *path: str) -> str:
    """Walk nested dicts, returning "" for any missing, non-dict or empty step."""
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return ""
        node = node.get(key)
    return node if isinstance(node, str) else ""


def is_active_playback_state(value: Any) -> bool:
    """Return True for the playback states that are audibly active.

    Args:
        value: Raw `playbackState` value from a playbackStatus event

    Returns:
        True for PLAYING and BUFFERING (with or without the PLAYBACK_STATE_ prefix)
    """
    if not isinstance(value, str):
        return False
    return value.removeprefix(PLAYBACK_STATE_PREFIX) in ACTIVE_PLAYBACK_STATES


def extract_metadata(payload: Any) -> tuple[str, str, str]:
    """Pull (track, artist, container) names out of a metadataStatus payload."""
    return (
        _dig(payload, "currentItem", "track", "name"),
        _dig(payload, "currentItem", "track", "artist", "name"),
        _dig(payload, "container", "name"),
    )


async def _apply_to_state(classification: str | None, payload: Any, store: PlaybackStateStore) -> None:
    if classification == METADATA_STATUS:
        track_name, artist_name, container_name = extract_metadata(payload)
        await store.set_metadata(track_name, artist_name, container_name)
        log_with_context(
            logger,
            "info",
            f'Track updated: "{track_name}" by "{artist_name}"',
            track_name=track_name,
            artist_name=artist_name,
            container_name=container_name,
            event_type="state_metadata_updated",
        )
    elif classification == PLAYBACK_STATUS:
        raw_state = payload.get("playbackState") if isinstance(payload, dict) else None
        is_playing = is_active_playback_state(raw_state)
        await store.set_playing(is_playing)
        log_with_context(
            logger,
            "info",
            f"Playback state: {'PLAYING' if is_playing else 'PAUSED'}",
            playback_state=raw_state,
            is_playing=is_playing,
            event_type="state_playback_updated",
        )
    else:
        log_with_context(
            logger,
            "debug",
            "Event relayed without state change",
            classification=classification,
            event_type="state_unchanged",
        )


async def ingest_event(
    classification: str | None,
    headers: dict[str, str],
    payload: Any,
    store: PlaybackStateStore,
    broadcaster: EventBroadcaster,
) -> int:
    """Apply one webhook delivery to the state store and relay it.

    Args:
        classification: Value of the classification header (may be None)
        headers: Request headers exactly as received
        payload: Parsed JSON body, or the raw text when the body was not JSON
        store: Playback state store
        broadcaster: Push broadcaster

    Returns:
        Number of subscribers the event was queued for
    """
    try:
        await _apply_to_state(classification, payload, store)
    except Exception as e:
        # Delivery must still be acknowledged and relayed
        log_with_context(
            logger,
            "error",
            "Failed to apply webhook event to state",
            classification=classification,
            error=str(e),
            error_type=type(e).__name__,
            event_type="state_update_failed",
        )
        logger.error("Exception traceback:", exc_info=True)

    return broadcaster.publish({"headers": headers, "payload": payload})
