"""Turns an asynchronous issuer result into records and notifications."""

import logging
from dataclasses import dataclass

from card_relay.domain.errors import NotFoundError
from card_relay.domain.results import IssuerResult
from card_relay.services.connections import LiveConnectionRegistry, PushOutcome
from card_relay.services.correlation import CorrelationStore
from card_relay.services.identity import IdentityResolver
from card_relay.services.notifier import WebhookNotifier
from card_relay.services.records import RecordRepository
from card_relay.services.subscribers import SubscriberRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DispatchReport:
    """What happened while dispatching one result."""

    request_uuid: str
    user_token: str
    outcome: str
    persisted: bool
    live_push: PushOutcome
    webhook_event_id: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "status": "processed",
            "request_uuid": self.request_uuid,
            "outcome": self.outcome,
            "persisted": self.persisted,
            "live_push": str(self.live_push),
            "webhook_event_id": self.webhook_event_id,
        }


@dataclass
class ResultDispatcher:
    """Correlates a result with its pending request and fans it out.

    Cleanup of the pending request is unconditional once persistence has
    been attempted. The live push and the webhook are best effort and never
    undo the earlier steps.
    """

    correlation_store: CorrelationStore
    identity_resolver: IdentityResolver
    record_repository: RecordRepository
    connections: LiveConnectionRegistry
    subscribers: SubscriberRegistry
    notifier: WebhookNotifier

    async def dispatch(self, result: IssuerResult) -> DispatchReport:
        """Process one issuer result end to end."""
        pending = self.correlation_store.get(result.request_uuid)
        user_token = self.identity_resolver.resolve(result, pending)

        persisted = self._persist(user_token, pending.card_type, result)
        self.correlation_store.delete(result.request_uuid)

        live_push = self.connections.push(user_token, result)
        event_id = self._fan_out(result)

        logger.info(
            "Processed %s result for request %s",
            result.outcome,
            result.request_uuid,
        )
        return DispatchReport(
            request_uuid=result.request_uuid,
            user_token=user_token,
            outcome=result.outcome,
            persisted=persisted,
            live_push=live_push,
            webhook_event_id=event_id,
        )

    def _persist(self, user_token: str, card_type: str, result: IssuerResult) -> bool:
        try:
            if result.issued_card is not None:
                self.record_repository.store_issued_card(
                    user_token, result.issued_card, card_type
                )
            elif result.decline_reason is not None:
                self.record_repository.store_failed_attempt(
                    user_token, card_type, result.decline_reason
                )
        except Exception:
            logger.exception(
                "Failed to persist issuance outcome",
                extra={"request_uuid": result.request_uuid},
            )
            return False
        return True

    def _fan_out(self, result: IssuerResult) -> str | None:
        if not result.suscriptor_token:
            return None
        try:
            subscriber = self.subscribers.resolve(result.suscriptor_token)
        except NotFoundError:
            logger.info(
                "No subscriber for result of request %s", result.request_uuid
            )
            return None
        except Exception:
            logger.exception(
                "Subscriber lookup failed",
                extra={"request_uuid": result.request_uuid},
            )
            return None
        return self.notifier.schedule(subscriber, result).id
