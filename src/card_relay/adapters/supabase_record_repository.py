"""Supabase-backed repository for users and issuance outcomes."""

from dataclasses import dataclass

from supabase import Client

from card_relay.domain.errors import NotFoundError
from card_relay.domain.models import Identity
from card_relay.domain.results import DeclineReason, IssuedCard
from card_relay.services.records import RecordRepository


@dataclass
class SupabaseRecordRepository(RecordRepository):
    """Supabase implementation for durable issuance records."""

    client: Client

    def create_user(self, user_token: str, identity: Identity) -> None:
        """Insert a user row keyed by its session token."""
        response = (
            self.client.table("users")
            .insert(
                {
                    "user_token": user_token,
                    "name": identity.name,
                    "lastname": identity.lastname,
                    "birth_date": identity.birth_date,
                    "country_code": identity.country_code,
                    "citizen_id": identity.citizen_id,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")

    def store_issued_card(
        self, user_token: str, card: IssuedCard, card_type: str
    ) -> None:
        """Insert an issued card for the user."""
        user_id = self._user_id(user_token)
        self.client.table("issued_cards").insert(
            {
                "user_id": user_id,
                "user_token": user_token,
                "pan": card.pan,
                "cvv": card.cvv,
                "expiry_date": card.expiry_date,
                "card_type": card.card_type or card_type,
                "status": "issued",
            }
        ).execute()

    def store_failed_attempt(
        self, user_token: str, card_type: str, reason: DeclineReason
    ) -> None:
        """Insert a declined attempt for the user."""
        user_id = self._user_id(user_token)
        self.client.table("failed_attempts").insert(
            {
                "user_id": user_id,
                "user_token": user_token,
                "card_type": card_type,
                "decline_reason": reason.reason,
                "status": "declined",
            }
        ).execute()

    def _user_id(self, user_token: str) -> str:
        response = (
            self.client.table("users")
            .select("id")
            .eq("user_token", user_token)
            .limit(1)
            .execute()
        )
        if not response.data:
            raise NotFoundError("User not found in database")
        return str(response.data[0]["id"])
