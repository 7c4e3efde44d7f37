"""Pydantic models for playback state, polling and command payloads.

Wire models use camelCase keys on the HTTP surface; Python code uses
snake_case attribute names.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class PlaybackSnapshot(BaseModel):
    """Immutable copy of the playback state at one point in time."""

    model_config = ConfigDict(frozen=True)

    track_name: str = ""
    artist_name: str = ""
    container_name: str = ""
    is_playing: bool = False
    session_group_id: str | None = None
    session_token: str | None = None

    @property
    def has_session(self) -> bool:
        return bool(self.session_token and self.session_group_id)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class PlaybackStatus(_CamelModel):
    """Pull query response. Never carries the session token."""

    track_name: str = Field("", description="Current track, empty when unknown")
    artist_name: str = Field("", description="Current artist, empty when unknown")
    container_name: str = Field("", description="Playlist/album/station context, empty when unknown")
    is_playing: bool = Field(False, description="Last known play flag")
    session_group_id: str | None = Field(None, description="Controlled group, null when no session is installed")

    @classmethod
    def from_snapshot(cls, snapshot: PlaybackSnapshot) -> "PlaybackStatus":
        return cls(
            track_name=snapshot.track_name,
            artist_name=snapshot.artist_name,
            container_name=snapshot.container_name,
            is_playing=snapshot.is_playing,
            session_group_id=snapshot.session_group_id,
        )


class CredentialsRequest(_CamelModel):
    """Credential intake body: `{"token": ..., "groupId": ...}`.

    Both fields are optional at the schema level so a missing field is
    answered with the credentials error message and not a schema error.
    """

    token: str | None = None
    group_id: str | None = None


class OkResponse(_CamelModel):
    ok: bool = True


class CommandResponse(_CamelModel):
    """Result of a play/pause/toggle command."""

    ok: bool = True
    is_playing: bool | None = None
