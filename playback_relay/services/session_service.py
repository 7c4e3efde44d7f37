"""Credential intake: install the session used by the control proxy."""

from playback_relay.exceptions import CredentialValidationException
from playback_relay.logging_config import get_logger, log_with_context
from playback_relay.state_managers import PlaybackStateStore

logger = get_logger(__name__)


async def set_credentials(token: str | None, group_id: str | None, store: PlaybackStateStore) -> None:
    """Replace the session credentials as one pair.

    There is a single session slot: a successful call unconditionally
    supersedes whatever was installed before.

    Args:
        token: Bearer token for the upstream control API
        group_id: Identifier of the playback group to control
        store: Playback state store

    Raises:
        CredentialValidationException: If either value is missing or empty (store untouched)
    """
    if not token or not group_id:
        log_with_context(
            logger,
            "warning",
            "Rejected credentials with missing field",
            has_token=bool(token),
            has_group_id=bool(group_id),
            event_type="session_config_rejected",
        )
        raise CredentialValidationException(
            details={"missing": [name for name, value in (("token", token), ("groupId", group_id)) if not value]}
        )

    await store.set_credentials(token, group_id)
    log_with_context(
        logger,
        "info",
        f"Stored token and groupId: {group_id}",
        group_id=group_id,
        event_type="session_configured",
    )
