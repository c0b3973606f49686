"""Subscriber registry for webhook callbacks."""

import json
import logging
import secrets
from dataclasses import dataclass

from card_relay.domain.errors import NotFoundError
from card_relay.domain.models import Subscriber
from card_relay.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

SUBSCRIBER_PREFIX = "subscriber:"


@dataclass
class SubscriberRegistry:
    """Maps bearer tokens to subscriber callback addresses.

    Subscriptions never expire unless ``ttl_seconds`` is configured.
    Re-subscribing the same callback yields a new, independent token.
    """

    store: KeyValueStore
    ttl_seconds: int | None = None

    def subscribe(self, name: str, callback_url: str) -> str:
        """Register a callback and return its 128-bit hex token."""
        token = secrets.token_hex(16)
        payload = {"name": name, "callback_url": callback_url}
        self.store.set(_key(token), json.dumps(payload), ttl_seconds=self.ttl_seconds)
        logger.info("New subscriber registered: %s", name)
        return token

    def resolve(self, token: str) -> Subscriber:
        """Return the subscriber for a token or raise ``NotFoundError``."""
        raw = self.store.get(_key(token)) if token else None
        if raw is None:
            raise NotFoundError("Subscriber not found")
        data = json.loads(raw)
        return Subscriber(
            token=token,
            name=str(data.get("name", "")),
            callback_url=str(data.get("callback_url", "")),
        )


def _key(token: str) -> str:
    return f"{SUBSCRIBER_PREFIX}{token}"
