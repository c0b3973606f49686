"""Session registry for registered end users."""

import json
import logging
import secrets
from collections.abc import Iterator
from dataclasses import dataclass

from card_relay.domain.errors import NotFoundError
from card_relay.domain.models import Identity
from card_relay.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_PREFIX = "session:"
DEFAULT_SESSION_TTL_SECONDS = 24 * 60 * 60


@dataclass
class SessionRegistry:
    """Stores user identities under opaque session tokens."""

    store: KeyValueStore
    ttl_seconds: int = DEFAULT_SESSION_TTL_SECONDS

    def register(self, identity: Identity) -> str:
        """Create a session for the identity and return its token."""
        token = secrets.token_hex(16)
        self.store.set(
            _key(token), json.dumps(identity.to_dict()), ttl_seconds=self.ttl_seconds
        )
        return token

    def get(self, token: str) -> Identity:
        """Return the identity for a session token."""
        raw = self.store.get(_key(token)) if token else None
        if raw is None:
            raise NotFoundError("User not found")
        return Identity.from_dict(json.loads(raw))

    def iter_sessions(self) -> Iterator[tuple[str, Identity]]:
        """Yield every live session; entries that expire mid-scan are skipped."""
        for key in self.store.scan(SESSION_PREFIX):
            token = key[len(SESSION_PREFIX) :]
            try:
                yield token, self.get(token)
            except NotFoundError:
                logger.debug("Session vanished during scan")
                continue


def _key(token: str) -> str:
    return f"{SESSION_PREFIX}{token}"
