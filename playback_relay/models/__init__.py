"""Relay models."""

from playback_relay.models.base_models import (
    DebugInfo,
    DebugState,
    DetailedHealthResponse,
    ErrorResponse,
    HealthResponse,
)
from playback_relay.models.playback import (
    CommandResponse,
    CredentialsRequest,
    OkResponse,
    PlaybackSnapshot,
    PlaybackStatus,
)

__all__ = [
    "DebugInfo",
    "DebugState",
    "DetailedHealthResponse",
    "ErrorResponse",
    "HealthResponse",
    "CommandResponse",
    "CredentialsRequest",
    "OkResponse",
    "PlaybackSnapshot",
    "PlaybackStatus",
]
