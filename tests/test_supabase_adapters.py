"""Tests for the Supabase record repository."""

from dataclasses import dataclass, field
from uuid import uuid4

import pytest

from card_relay.adapters.supabase_record_repository import SupabaseRecordRepository
from card_relay.domain.errors import NotFoundError
from card_relay.domain.results import DeclineReason, IssuedCard
from tests.conftest import make_identity


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "insert": []}
    )
    last_payload: object | None = None
    last_filters: list[tuple[str, object]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def insert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "insert"
        self.last_payload = payload
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_create_user_inserts_identity() -> None:
    client = FakeSupabaseClient()
    users_table = client.table("users")
    users_table.queue("insert", [{"id": str(uuid4())}])

    SupabaseRecordRepository(client).create_user("token-1", make_identity())

    assert isinstance(users_table.last_payload, dict)
    assert users_table.last_payload["user_token"] == "token-1"
    assert users_table.last_payload["citizen_id"] == "123456789"


def test_create_user_without_row_raises() -> None:
    client = FakeSupabaseClient()

    with pytest.raises(RuntimeError):
        SupabaseRecordRepository(client).create_user("token-1", make_identity())


def test_store_issued_card_links_user() -> None:
    client = FakeSupabaseClient()
    user_id = str(uuid4())
    client.table("users").queue("select", [{"id": user_id}])
    cards_table = client.table("issued_cards")

    SupabaseRecordRepository(client).store_issued_card(
        "token-1",
        IssuedCard(pan="4242000011112222", cvv="123", expiry_date="2032-01-15"),
        "credit",
    )

    assert isinstance(cards_table.last_payload, dict)
    assert cards_table.last_payload["user_id"] == user_id
    assert cards_table.last_payload["card_type"] == "credit"
    assert cards_table.last_payload["status"] == "issued"
    assert ("user_token", "token-1") in client.table("users").last_filters


def test_store_failed_attempt_records_reason() -> None:
    client = FakeSupabaseClient()
    client.table("users").queue("select", [{"id": str(uuid4())}])
    attempts_table = client.table("failed_attempts")

    SupabaseRecordRepository(client).store_failed_attempt(
        "token-1", "debit", DeclineReason(reason="User not eligible due to age")
    )

    assert isinstance(attempts_table.last_payload, dict)
    assert attempts_table.last_payload["decline_reason"] == (
        "User not eligible due to age"
    )


def test_store_outcome_for_unknown_user_raises() -> None:
    client = FakeSupabaseClient()

    with pytest.raises(NotFoundError):
        SupabaseRecordRepository(client).store_failed_attempt(
            "missing", "debit", DeclineReason(reason="x")
        )
