"""Correlation store for issuance requests awaiting the issuer's result."""

import json
import logging
from dataclasses import dataclass

from card_relay.domain.errors import NotFoundError
from card_relay.domain.models import PendingRequest
from card_relay.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

REQUEST_PREFIX = "request:"
DEFAULT_REQUEST_TTL_SECONDS = 24 * 60 * 60


@dataclass
class CorrelationStore:
    """Holds pending request context keyed by the request token.

    Tokens are minted by the caller (uuid4) before ``put``. Entries expire
    after ``ttl_seconds`` when nobody completes them. Unknown and expired
    tokens are indistinguishable: both raise ``NotFoundError``.
    """

    store: KeyValueStore
    ttl_seconds: int = DEFAULT_REQUEST_TTL_SECONDS

    def put(self, token: str, pending: PendingRequest) -> None:
        """Persist the pending context under ``token``."""
        self.store.set(
            _key(token), json.dumps(pending.to_dict()), ttl_seconds=self.ttl_seconds
        )
        logger.info("Stored pending request", extra={"request_uuid": token})

    def get(self, token: str) -> PendingRequest:
        """Return the pending context or raise ``NotFoundError``."""
        raw = self.store.get(_key(token))
        if raw is None:
            raise NotFoundError("Request not found")
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.warning("Discarding unreadable pending request %s", token)
            raise NotFoundError("Request not found") from exc
        return PendingRequest.from_dict(data)

    def delete(self, token: str) -> bool:
        """Remove the pending context; an absent entry counts as done."""
        removed = self.store.delete(_key(token))
        if not removed:
            logger.info("Pending request already gone", extra={"request_uuid": token})
        return removed


def _key(token: str) -> str:
    return f"{REQUEST_PREFIX}{token}"
