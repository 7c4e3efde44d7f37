"""Pull query and credential intake for the polling control system."""

from fastapi import APIRouter, Depends

from playback_relay.dependencies import get_playback_store
from playback_relay.models import CredentialsRequest, ErrorResponse, OkResponse, PlaybackStatus
from playback_relay.services import session_service
from playback_relay.state_managers import PlaybackStateStore

router = APIRouter()


@router.get(
    "/status",
    response_model=PlaybackStatus,
    summary="Get current playback state",
    description="""
    Returns the last known track, artist, container and play flag plus the
    controlled group id. Always succeeds: with no session installed
    `sessionGroupId` is null. The session token is never returned.
    """,
    responses={
        200: {
            "description": "Successful response",
            "content": {
                "application/json": {
                    "example": {
                        "trackName": "Bohemian Rhapsody",
                        "artistName": "Queen",
                        "containerName": "Classic Rock",
                        "isPlaying": True,
                        "sessionGroupId": "RINCON_000E58A0123401400:1",
                    }
                }
            },
        },
    },
)
async def get_status(store: PlaybackStateStore = Depends(get_playback_store)):
    """Read the current playback snapshot."""
    snapshot = await store.snapshot()
    return PlaybackStatus.from_snapshot(snapshot)


@router.post(
    "/config",
    response_model=OkResponse,
    summary="Install session credentials",
    description="""
    Receives `{token, groupId}` from the web client after a group is
    selected. Replaces any previous session.
    """,
    responses={
        200: {"description": "Credentials stored"},
        400: {"model": ErrorResponse, "description": "token or groupId missing"},
    },
)
async def set_config(
    credentials: CredentialsRequest | None = None,
    store: PlaybackStateStore = Depends(get_playback_store),
):
    """Store the token/group pair used by the control endpoints."""
    credentials = credentials or CredentialsRequest()
    await session_service.set_credentials(credentials.token, credentials.group_id, store)
    return OkResponse()
