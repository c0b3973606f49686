"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest

from card_relay.adapters.callback_client import CallbackClient
from card_relay.adapters.issuer_client import IssuerClient
from card_relay.config import Settings
from card_relay.containers import AppContainer
from card_relay.domain.models import Identity
from card_relay.domain.results import DeclineReason, IssuedCard, IssuerResult
from card_relay.services.connections import LiveConnectionRegistry
from card_relay.services.correlation import CorrelationStore
from card_relay.services.dispatcher import ResultDispatcher
from card_relay.services.identity import IdentityResolver
from card_relay.services.issuance import IssuanceService
from card_relay.services.kv_store import InMemoryKeyValueStore
from card_relay.services.notifier import WebhookNotifier
from card_relay.services.records import RecordRepository
from card_relay.services.sessions import SessionRegistry
from card_relay.services.subscribers import SubscriberRegistry
from card_relay.services.users import UserService


@dataclass
class FakeClock:
    """Controllable clock for TTL tests."""

    now: datetime = field(default_factory=lambda: datetime(2026, 1, 1, tzinfo=UTC))

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@dataclass
class InMemoryRecordRepository(RecordRepository):
    """In-memory record repository for tests."""

    users: dict[str, Identity] = field(default_factory=dict)
    issued: list[tuple[str, IssuedCard, str]] = field(default_factory=list)
    declined: list[tuple[str, str, str]] = field(default_factory=list)
    fail_with: Exception | None = None

    def create_user(self, user_token: str, identity: Identity) -> None:
        if self.fail_with:
            raise self.fail_with
        self.users[user_token] = identity

    def store_issued_card(
        self, user_token: str, card: IssuedCard, card_type: str
    ) -> None:
        if self.fail_with:
            raise self.fail_with
        self.issued.append((user_token, card, card_type))

    def store_failed_attempt(
        self, user_token: str, card_type: str, reason: DeclineReason
    ) -> None:
        if self.fail_with:
            raise self.fail_with
        self.declined.append((user_token, card_type, reason.reason))


@dataclass
class FakeCallbackClient(CallbackClient):
    """Fake callback client that records posted payloads."""

    posts: list[tuple[str, dict[str, object]]] = field(default_factory=list)
    status_code: int = 200
    error: Exception | None = None

    async def post_json(
        self, url: str, payload: dict[str, object], timeout: float
    ) -> int:
        if self.error:
            raise self.error
        self.posts.append((url, payload))
        return self.status_code


@dataclass
class FakeIssuerClient(IssuerClient):
    """Fake issuer client that records submitted requests."""

    submitted: list[dict[str, object]] = field(default_factory=list)
    error: Exception | None = None

    async def submit(self, payload: dict[str, object]) -> None:
        if self.error:
            raise self.error
        self.submitted.append(payload)


def make_identity(name: str = "Ada", lastname: str = "Lovelace") -> Identity:
    return Identity(
        name=name,
        lastname=lastname,
        birth_date="1990-12-10",
        country_code="US",
        citizen_id="123456789",
    )


def issued_result(request_uuid: str, **overrides: object) -> IssuerResult:
    payload: dict[str, object] = {
        "request_uuid": request_uuid,
        "issued_card": {
            "pan": "4242000011112222",
            "cvv": "123",
            "expiry_date": "2032-01-15",
            "card_type": "credit",
        },
    }
    payload.update(overrides)
    return IssuerResult.model_validate(payload)


def declined_result(request_uuid: str, **overrides: object) -> IssuerResult:
    payload: dict[str, object] = {
        "request_uuid": request_uuid,
        "decline_reason": {"reason": "Country not eligible"},
    }
    payload.update(overrides)
    return IssuerResult.model_validate(payload)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        redis_url="redis://localhost:6379/15",
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        issuer_url="https://issuer.test/v1/cards",
        suscriptor_token="relay-subscriber",
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kv_store(clock: FakeClock) -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(clock=clock)


@pytest.fixture
def record_repository() -> InMemoryRecordRepository:
    return InMemoryRecordRepository()


@pytest.fixture
def callback_client() -> FakeCallbackClient:
    return FakeCallbackClient()


@pytest.fixture
def issuer_client() -> FakeIssuerClient:
    return FakeIssuerClient()


@pytest.fixture
def container(
    settings: Settings,
    kv_store: InMemoryKeyValueStore,
    record_repository: InMemoryRecordRepository,
    callback_client: FakeCallbackClient,
    issuer_client: FakeIssuerClient,
) -> AppContainer:
    sessions = SessionRegistry(kv_store)
    correlation_store = CorrelationStore(kv_store)
    subscribers = SubscriberRegistry(kv_store)
    connections = LiveConnectionRegistry()
    notifier = WebhookNotifier(client=callback_client, timeout_seconds=1.0)
    dispatcher = ResultDispatcher(
        correlation_store=correlation_store,
        identity_resolver=IdentityResolver(sessions),
        record_repository=record_repository,
        connections=connections,
        subscribers=subscribers,
        notifier=notifier,
    )

    async def close_resources() -> None:
        connections.shutdown()
        await notifier.drain()

    return AppContainer(
        settings=settings,
        sessions=sessions,
        correlation_store=correlation_store,
        subscribers=subscribers,
        connections=connections,
        notifier=notifier,
        user_service=UserService(sessions, record_repository),
        issuance_service=IssuanceService(
            sessions=sessions,
            correlation_store=correlation_store,
            issuer_client=issuer_client,
            suscriptor_token=settings.suscriptor_token,
        ),
        dispatcher=dispatcher,
        close_resources=close_resources,
    )
