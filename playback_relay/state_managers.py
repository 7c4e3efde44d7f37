"""State managers for handling application-wide mutable state.

Two state holders live for the whole process: the playback state store
(one snapshot of what the controlled group is doing plus the session
credentials) and the push broadcaster (the set of connected real-time
subscribers). Both are created once by the application lifespan and
reached through dependency injection. All state managers inherit from
StateManager ABC.
"""

import asyncio
import itertools
from abc import ABC, abstractmethod
from typing import Any

from playback_relay.logging_config import get_logger, log_with_context
from playback_relay.models import PlaybackSnapshot

logger = get_logger(__name__)


class StateManager(ABC):
    """Base class for all state managers.

    State managers provide safe access to mutable application state.
    All subclasses must implement lifecycle methods.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the state manager (called during app startup)."""
        pass

    @abstractmethod
    async def cleanup(self) -> None:
        """Cleanup resources (called during app shutdown)."""
        pass


class PlaybackStateStore(StateManager):
    """Single in-memory snapshot of playback and session state.

    Grouped fields are written under one lock acquisition so readers never
    see a half-updated metadata triple or credential pair. Values are stored
    as received; the store does no validation of its own.
    """

    def __init__(self):
        """Initialize with empty/false/absent defaults."""
        self._track_name: str = ""
        self._artist_name: str = ""
        self._container_name: str = ""
        self._is_playing: bool = False
        self._session_group_id: str | None = None
        self._session_token: str | None = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        """Initialize the playback state store."""
        # State starts empty; nothing is loaded from disk
        pass

    async def cleanup(self) -> None:
        """Cleanup resources."""
        # State only ends with the process
        pass

    async def snapshot(self) -> PlaybackSnapshot:
        """Return an immutable copy of the full state.

        Returns:
            PlaybackSnapshot including the session token
        """
        async with self._lock:
            return PlaybackSnapshot(
                track_name=self._track_name,
                artist_name=self._artist_name,
                container_name=self._container_name,
                is_playing=self._is_playing,
                session_group_id=self._session_group_id,
                session_token=self._session_token,
            )

    async def set_metadata(self, track_name: str, artist_name: str, container_name: str) -> None:
        """Replace track, artist and container together.

        Args:
            track_name: Current track name
            artist_name: Current artist name
            container_name: Playlist/album/station context
        """
        async with self._lock:
            self._track_name = track_name
            self._artist_name = artist_name
            self._container_name = container_name

    async def set_playing(self, is_playing: bool) -> None:
        """Set the play flag."""
        async with self._lock:
            self._is_playing = is_playing

    async def toggle_playing(self) -> bool:
        """Flip the play flag.

        Returns:
            The new play flag
        """
        async with self._lock:
            self._is_playing = not self._is_playing
            return self._is_playing

    async def get_credentials(self) -> tuple[str | None, str | None]:
        """Get the session credential pair.

        Returns:
            Tuple of (token, group_id); both None when no session is installed
        """
        async with self._lock:
            return self._session_token, self._session_group_id

    async def set_credentials(self, token: str, group_id: str) -> None:
        """Replace the session credential pair, superseding any prior session.

        Args:
            token: Bearer token for the upstream control API
            group_id: Identifier of the controlled playback group
        """
        async with self._lock:
            self._session_token = token
            self._session_group_id = group_id


class Subscription:
    """One connected push subscriber and its bounded outbound queue."""

    def __init__(self, subscriber_id: str, maxsize: int):
        self.subscriber_id = subscriber_id
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=maxsize)
        self.dropped: int = 0

    async def get(self) -> dict[str, Any]:
        """Wait for the next message for this subscriber."""
        return await self.queue.get()

    def offer(self, message: dict[str, Any]) -> None:
        """Queue a message without waiting, dropping the oldest when full."""
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            self.queue.get_nowait()
            self.queue.put_nowait(message)
            self.dropped += 1


class EventBroadcaster(StateManager):
    """Fan-out of ingested events to every connected push subscriber.

    Delivery is best effort and at most once per subscriber: no replay for
    late joiners and no acknowledgement back to the publisher. Publishing
    never waits on a subscriber; slow subscribers lose their oldest
    undelivered messages instead.
    """

    def __init__(self, queue_size: int = 100):
        """Initialize the broadcaster.

        Args:
            queue_size: Per-subscriber buffer size
        """
        self._queue_size = queue_size
        self._subscribers: dict[str, Subscription] = {}
        self._ids = itertools.count(1)

    async def initialize(self) -> None:
        """Initialize the broadcaster."""
        pass

    async def cleanup(self) -> None:
        """Forget all subscribers."""
        self._subscribers.clear()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, subscriber_id: str | None = None) -> Subscription:
        """Register a subscriber. It receives only messages published from now on.

        Args:
            subscriber_id: Optional identifier used in logs

        Returns:
            Subscription whose queue receives published messages
        """
        if subscriber_id is None:
            subscriber_id = f"subscriber-{next(self._ids)}"
        subscription = Subscription(subscriber_id, self._queue_size)
        self._subscribers[subscriber_id] = subscription
        log_with_context(
            logger,
            "info",
            "Push subscriber connected",
            subscriber_id=subscriber_id,
            subscriber_count=len(self._subscribers),
            event_type="subscriber_connected",
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscriber. Unknown subscriptions are ignored."""
        if self._subscribers.get(subscription.subscriber_id) is subscription:
            del self._subscribers[subscription.subscriber_id]
        log_with_context(
            logger,
            "info",
            "Push subscriber disconnected",
            subscriber_id=subscription.subscriber_id,
            subscriber_count=len(self._subscribers),
            dropped_messages=subscription.dropped,
            event_type="subscriber_disconnected",
        )

    def publish(self, message: dict[str, Any]) -> int:
        """Queue a message for every currently connected subscriber.

        Args:
            message: JSON-serialisable message

        Returns:
            Number of subscribers the message was queued for
        """
        subscribers = list(self._subscribers.values())
        for subscription in subscribers:
            subscription.offer(message)
        return len(subscribers)
