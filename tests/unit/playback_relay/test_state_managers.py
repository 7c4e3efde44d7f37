"""Unit tests for state managers."""

import asyncio

import pytest
from pydantic import ValidationError

from playback_relay.state_managers import EventBroadcaster, PlaybackStateStore

# PlaybackStateStore Tests


@pytest.mark.asyncio
async def test_playback_store_defaults():
    """Test store starts empty, paused and without a session."""
    store = PlaybackStateStore()
    await store.initialize()

    snapshot = await store.snapshot()

    assert snapshot.track_name == ""
    assert snapshot.artist_name == ""
    assert snapshot.container_name == ""
    assert snapshot.is_playing is False
    assert snapshot.session_group_id is None
    assert snapshot.session_token is None
    assert snapshot.has_session is False


@pytest.mark.asyncio
async def test_playback_store_set_metadata(playback_store):
    """Test metadata triple is written together."""
    await playback_store.set_metadata("Song", "Artist", "Album")

    snapshot = await playback_store.snapshot()
    assert (snapshot.track_name, snapshot.artist_name, snapshot.container_name) == ("Song", "Artist", "Album")
    assert snapshot.is_playing is False


@pytest.mark.asyncio
async def test_playback_store_snapshot_is_immutable_copy(playback_store):
    """Test a snapshot neither changes with later writes nor accepts assignment."""
    await playback_store.set_metadata("First", "A", "C")
    snapshot = await playback_store.snapshot()

    await playback_store.set_metadata("Second", "B", "D")

    assert snapshot.track_name == "First"
    with pytest.raises(ValidationError):
        snapshot.track_name = "Changed"


@pytest.mark.asyncio
async def test_playback_store_set_and_toggle_playing(playback_store):
    """Test play flag setters."""
    await playback_store.set_playing(True)
    assert (await playback_store.snapshot()).is_playing is True

    assert await playback_store.toggle_playing() is False
    assert await playback_store.toggle_playing() is True


@pytest.mark.asyncio
async def test_playback_store_credentials_replace_pair(playback_store):
    """Test credentials are replaced as a pair with no merge."""
    assert await playback_store.get_credentials() == (None, None)

    await playback_store.set_credentials("t1", "g1")
    await playback_store.set_credentials("t2", "g2")

    assert await playback_store.get_credentials() == ("t2", "g2")
    snapshot = await playback_store.snapshot()
    assert snapshot.has_session is True
    assert snapshot.session_group_id == "g2"


@pytest.mark.asyncio
async def test_playback_store_cleanup_keeps_state(playback_store):
    """Test cleanup does not tear down state."""
    await playback_store.set_credentials("t1", "g1")
    await playback_store.cleanup()

    assert await playback_store.get_credentials() == ("t1", "g1")


@pytest.mark.asyncio
async def test_playback_store_concurrent_metadata_writes_never_interleave(playback_store):
    """Test readers always see a metadata triple from a single write."""

    async def write(i: int):
        await playback_store.set_metadata(f"track-{i}", f"artist-{i}", f"container-{i}")

    tasks = [write(i) for i in range(20)] + [playback_store.snapshot() for _ in range(20)]
    results = await asyncio.gather(*tasks)

    for snapshot in results[20:]:
        if snapshot.track_name:
            suffix = snapshot.track_name.split("-")[1]
            assert snapshot.artist_name == f"artist-{suffix}"
            assert snapshot.container_name == f"container-{suffix}"


# EventBroadcaster Tests


@pytest.mark.asyncio
async def test_broadcaster_delivers_in_publish_order(event_broadcaster):
    """Test every subscriber gets every message in order."""
    first = event_broadcaster.subscribe()
    second = event_broadcaster.subscribe()

    for i in range(5):
        assert event_broadcaster.publish({"n": i}) == 2

    for subscription in (first, second):
        received = [await subscription.get() for _ in range(5)]
        assert received == [{"n": i} for i in range(5)]


@pytest.mark.asyncio
async def test_broadcaster_no_replay_for_late_subscriber(event_broadcaster):
    """Test a subscriber does not receive messages published before it joined."""
    early = event_broadcaster.subscribe()
    event_broadcaster.publish({"n": 1})

    late = event_broadcaster.subscribe()
    event_broadcaster.publish({"n": 2})

    assert await early.get() == {"n": 1}
    assert await early.get() == {"n": 2}
    assert await late.get() == {"n": 2}
    assert late.queue.empty()


def test_broadcaster_publish_without_subscribers(event_broadcaster):
    """Test publishing with nobody connected is a no-op."""
    assert event_broadcaster.publish({"n": 1}) == 0


def test_broadcaster_drops_oldest_when_subscriber_is_slow():
    """Test a full subscriber queue never blocks publishing."""
    broadcaster = EventBroadcaster(queue_size=2)
    slow = broadcaster.subscribe("slow")

    for i in range(5):
        broadcaster.publish({"n": i})

    assert slow.dropped == 3
    assert slow.queue.get_nowait() == {"n": 3}
    assert slow.queue.get_nowait() == {"n": 4}


def test_broadcaster_subscribe_and_unsubscribe(event_broadcaster):
    """Test subscriber bookkeeping."""
    subscription = event_broadcaster.subscribe("panel")
    assert subscription.subscriber_id == "panel"
    assert event_broadcaster.subscriber_count == 1

    event_broadcaster.unsubscribe(subscription)
    assert event_broadcaster.subscriber_count == 0
    assert event_broadcaster.publish({"n": 1}) == 0

    # Unsubscribing twice is harmless
    event_broadcaster.unsubscribe(subscription)
    assert event_broadcaster.subscriber_count == 0


def test_broadcaster_generates_unique_ids(event_broadcaster):
    """Test generated subscriber ids do not collide."""
    ids = {event_broadcaster.subscribe().subscriber_id for _ in range(3)}
    assert len(ids) == 3


@pytest.mark.asyncio
async def test_broadcaster_cleanup_forgets_subscribers(event_broadcaster):
    """Test cleanup drops all subscribers."""
    event_broadcaster.subscribe()
    event_broadcaster.subscribe()

    await event_broadcaster.cleanup()

    assert event_broadcaster.subscriber_count == 0
