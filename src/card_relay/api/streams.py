"""Server-sent event stream for live issuance notifications."""

from __future__ import annotations

import json
import logging
from collections.abc import AsyncIterator  # noqa: TC003
from typing import TYPE_CHECKING

from fastapi import APIRouter, Query, Request
from fastapi.responses import StreamingResponse

from card_relay.services.connections import DeliveryStatus, LiveConnectionRegistry

if TYPE_CHECKING:
    from card_relay.containers import AppContainer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["notifications"])

_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_event(payload: dict[str, object]) -> str:
    """Encode a payload as one SSE data frame."""
    return f"data: {json.dumps(payload, separators=(',', ':'))}\n\n"


async def notification_events(
    registry: LiveConnectionRegistry,
    user_token: str,
    timeout: float | None,
) -> AsyncIterator[str]:
    """Yield the connected ack, then at most one result, then end.

    Client disconnects cancel the generator; the ``finally`` block removes
    this stream's registry entry but leaves a newer replacement in place.
    """
    handle = registry.open(user_token)
    try:
        yield format_event({"status": "connected"})
        delivery = await handle.receive(timeout)
        if delivery.status is DeliveryStatus.RESULT and delivery.result is not None:
            yield format_event(delivery.result.model_dump(mode="json"))
            logger.info("Notification sent via SSE to user: %s", user_token)
        elif delivery.status is DeliveryStatus.TIMED_OUT:
            yield format_event({"status": "timed_out"})
            logger.info("SSE connection timed out for user: %s", user_token)
        else:
            yield format_event({"status": "closed"})
    finally:
        registry.close(user_token, handle)


@router.get("/notifications/stream")
async def notification_stream(
    request: Request, user_token: str = Query(min_length=1)
) -> StreamingResponse:
    """Open a live notification stream for a user."""
    container: AppContainer = request.app.state.container
    logger.info("New SSE connection request for user: %s", user_token)
    return StreamingResponse(
        notification_events(
            container.connections,
            user_token,
            container.settings.live_connection_timeout_seconds,
        ),
        media_type="text/event-stream",
        headers=_SSE_HEADERS,
    )
