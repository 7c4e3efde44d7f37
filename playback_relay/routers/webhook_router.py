"""Webhook endpoint for upstream event notifications.

The endpoint always answers 200: a failure response would make the
upstream retry or back off, so malformed bodies are relayed as-is and
never rejected.
"""

import json
from typing import Any

from fastapi import APIRouter, Depends, Request

from playback_relay.config import Settings, get_settings
from playback_relay.dependencies import get_event_broadcaster, get_playback_store
from playback_relay.logging_config import get_logger, log_with_context
from playback_relay.middleware.logging_middleware import redact_headers
from playback_relay.models import OkResponse
from playback_relay.services.webhook_service import ingest_event
from playback_relay.state_managers import EventBroadcaster, PlaybackStateStore

router = APIRouter()
logger = get_logger(__name__)


def parse_webhook_body(body: bytes) -> Any:
    """Decode a webhook body.

    Returns:
        Parsed JSON, {} for an empty body, or the decoded text when the body is
        not JSON or nests too deeply to decode
    """
    if not body.strip():
        return {}
    try:
        return json.loads(body)
    except (ValueError, RecursionError) as e:
        log_with_context(
            logger,
            "warning",
            "Webhook body is not JSON, relaying raw text",
            body_length=len(body),
            error_type=type(e).__name__,
            event_type="webhook_body_unparsed",
        )
        return body.decode("utf-8", errors="replace")


@router.post(
    "/",
    response_model=OkResponse,
    summary="Receive a webhook event",
    responses={200: {"description": "Event accepted (always, whatever the body)"}},
)
async def receive_webhook(
    request: Request,
    store: PlaybackStateStore = Depends(get_playback_store),
    broadcaster: EventBroadcaster = Depends(get_event_broadcaster),
    settings: Settings = Depends(get_settings),
):
    """Fold an event into the playback state and relay it to push subscribers."""
    headers = dict(request.headers)
    payload = parse_webhook_body(await request.body())
    classification = headers.get(settings.webhook_type_header)

    log_with_context(
        logger,
        "info",
        "Webhook received",
        classification=classification,
        headers=redact_headers(headers),
        payload=payload,
        event_type="webhook_received",
    )

    delivered = await ingest_event(classification, headers, payload, store, broadcaster)

    log_with_context(
        logger,
        "debug",
        "Webhook relayed",
        classification=classification,
        subscribers=delivered,
        event_type="webhook_relayed",
    )
    return OkResponse()
