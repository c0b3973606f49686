"""User registration."""

import logging
from dataclasses import dataclass

from card_relay.domain.errors import StoreUnavailableError
from card_relay.domain.models import Identity
from card_relay.services.records import RecordRepository
from card_relay.services.sessions import SessionRegistry

logger = logging.getLogger(__name__)


@dataclass
class UserService:
    """Application service for registering end users."""

    sessions: SessionRegistry
    record_repository: RecordRepository

    def register(self, identity: Identity) -> str:
        """Open a session for the identity and record the user durably."""
        token = self.sessions.register(identity)
        try:
            self.record_repository.create_user(token, identity)
        except Exception as exc:
            logger.exception("Failed to store user in database")
            raise StoreUnavailableError("Failed to store user in database") from exc
        return token
