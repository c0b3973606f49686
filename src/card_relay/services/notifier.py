"""Fire-and-forget webhook fan-out to subscribers.

Each delivery is a single POST with a bounded timeout, run as a background
task after the result has been recorded. There is no retry: failed
deliveries are written to the dead-letter log and forgotten.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from uuid import uuid4

from card_relay.adapters.callback_client import CallbackClient
from card_relay.app_logging import DEAD_LETTER_LOGGER
from card_relay.domain.models import Subscriber
from card_relay.domain.results import DECLINED, IssuerResult, WebhookEvent

logger = logging.getLogger(__name__)
dead_letter_logger = logging.getLogger(DEAD_LETTER_LOGGER)

EVENT_SOURCE = "card-relay"


def build_event(result: IssuerResult, subscriber_name: str) -> WebhookEvent:
    """Wrap an issuer result in the subscriber envelope."""
    metadata: dict[str, object] = {
        "suscriptor_name": subscriber_name,
        "request_uuid": result.request_uuid,
    }
    if result.issued_card is not None:
        metadata["card_type"] = result.issued_card.card_type
        metadata["has_pan"] = bool(result.issued_card.pan)
    if result.decline_reason is not None:
        metadata["decline_reason"] = result.decline_reason.reason
    return WebhookEvent(
        id=str(uuid4()),
        type="card.declined" if result.outcome == DECLINED else "card.issued",
        source=EVENT_SOURCE,
        data=result,
        metadata=metadata,
    )


@dataclass
class WebhookNotifier:
    """Schedules one-shot webhook deliveries and tracks them until done."""

    client: CallbackClient
    timeout_seconds: float = 10.0
    _tasks: set[asyncio.Task[bool]] = field(default_factory=set)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def schedule(self, subscriber: Subscriber, result: IssuerResult) -> WebhookEvent:
        """Start delivering ``result`` to the subscriber in the background."""
        event = build_event(result, subscriber.name)
        task = asyncio.get_running_loop().create_task(self.deliver(subscriber, event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return event

    async def deliver(self, subscriber: Subscriber, event: WebhookEvent) -> bool:
        """POST the event once; return whether the callback accepted it."""
        url = subscriber.callback_url
        try:
            status_code = await asyncio.wait_for(
                self.client.post_json(
                    url, event.model_dump(mode="json"), self.timeout_seconds
                ),
                timeout=self.timeout_seconds,
            )
        except Exception as exc:
            _dead_letter(event, url, f"{type(exc).__name__}: {exc}")
            return False
        if 200 <= status_code < 300:  # noqa: PLR2004
            logger.info(
                "Webhook event %s delivered to %s, status: %d",
                event.id,
                url,
                status_code,
            )
            return True
        _dead_letter(event, url, f"status {status_code}")
        return False

    async def drain(self) -> None:
        """Wait for in-flight deliveries to finish."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)


def _dead_letter(event: WebhookEvent, url: str, reason: str) -> None:
    dead_letter_logger.warning(
        "Webhook event %s to %s not delivered: %s",
        event.id,
        url,
        reason,
        extra={
            "event_id": event.id,
            "callback_url": url,
            "request_uuid": event.data.request_uuid,
            "reason": reason,
        },
    )
