"""WebSocket /ws - real-time relay of ingested webhook events."""

import asyncio

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from fastapi.websockets import WebSocketState

from playback_relay.dependencies import get_event_broadcaster
from playback_relay.logging_config import get_logger, log_with_context
from playback_relay.state_managers import EventBroadcaster, Subscription

router = APIRouter()
logger = get_logger(__name__)

PUSH_TOPIC = "message from server"


async def _forward(websocket: WebSocket, subscription: Subscription) -> None:
    """Drain the subscriber queue onto the socket in publish order. Only returns by raising."""
    while True:
        envelope = await subscription.get()
        await websocket.send_json({"topic": PUSH_TOPIC, "message": envelope})


async def _read_until_disconnect(websocket: WebSocket, subscription: Subscription) -> None:
    """Log client messages until the client goes away."""
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return
        log_with_context(
            logger,
            "info",
            "Message from subscriber",
            subscriber_id=subscription.subscriber_id,
            text=message.get("text"),
            event_type="subscriber_message",
        )


async def _close_after_send_failure(websocket: WebSocket, subscription: Subscription) -> None:
    if websocket.application_state != WebSocketState.CONNECTED:
        return
    try:
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
    except (RuntimeError, WebSocketDisconnect) as e:
        log_with_context(
            logger,
            "debug",
            "Push socket already gone at close",
            subscriber_id=subscription.subscriber_id,
            error=str(e),
            event_type="subscriber_close_failed",
        )


@router.websocket("/ws")
async def push_events(
    websocket: WebSocket,
    broadcaster: EventBroadcaster = Depends(get_event_broadcaster),
) -> None:
    """Stream every ingested event to this subscriber until either side stops.

    The subscription is registered before the handshake completes so the
    client receives every event published after its connection is accepted.
    Messages sent by the client are logged and otherwise ignored. A failed
    send closes the socket with 1011 so the client knows to reconnect.
    """
    subscription = broadcaster.subscribe()
    try:
        await websocket.accept()
        sender = asyncio.create_task(_forward(websocket, subscription))
        receiver = asyncio.create_task(_read_until_disconnect(websocket, subscription))
        tasks = (sender, receiver)
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

        for task in done:
            error = None if task.cancelled() else task.exception()
            if error is not None:
                log_with_context(
                    logger,
                    "warning",
                    "Push subscriber stream ended with an error",
                    subscriber_id=subscription.subscriber_id,
                    direction="send" if task is sender else "receive",
                    error=str(error),
                    error_type=type(error).__name__,
                    event_type="subscriber_stream_failed",
                )

        if sender in done:
            await _close_after_send_failure(websocket, subscription)
    finally:
        broadcaster.unsubscribe(subscription)
