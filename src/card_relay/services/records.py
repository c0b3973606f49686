"""Durable record keeping for users and issuance outcomes."""

from typing import Protocol

from card_relay.domain.models import Identity
from card_relay.domain.results import DeclineReason, IssuedCard


class RecordRepository(Protocol):
    """Persistence interface for users, issued cards and failed attempts."""

    def create_user(self, user_token: str, identity: Identity) -> None:
        """Create a user row for a newly registered session."""

    def store_issued_card(
        self, user_token: str, card: IssuedCard, card_type: str
    ) -> None:
        """Record a card issued to the user."""

    def store_failed_attempt(
        self, user_token: str, card_type: str, reason: DeclineReason
    ) -> None:
        """Record a declined issuance attempt."""
