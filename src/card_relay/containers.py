"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from card_relay.adapters.callback_client import HttpxCallbackClient
from card_relay.adapters.issuer_client import HttpxIssuerClient
from card_relay.adapters.redis_store import RedisKeyValueStore
from card_relay.adapters.supabase_record_repository import SupabaseRecordRepository
from card_relay.config import Settings
from card_relay.services.connections import LiveConnectionRegistry
from card_relay.services.correlation import CorrelationStore
from card_relay.services.dispatcher import ResultDispatcher
from card_relay.services.identity import IdentityResolver
from card_relay.services.issuance import IssuanceService
from card_relay.services.notifier import WebhookNotifier
from card_relay.services.sessions import SessionRegistry
from card_relay.services.subscribers import SubscriberRegistry
from card_relay.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    sessions: SessionRegistry
    correlation_store: CorrelationStore
    subscribers: SubscriberRegistry
    connections: LiveConnectionRegistry
    notifier: WebhookNotifier
    user_service: UserService
    issuance_service: IssuanceService
    dispatcher: ResultDispatcher
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    store = RedisKeyValueStore.create(resolved_settings.redis_url)
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    record_repository = SupabaseRecordRepository(supabase_client)
    sessions = SessionRegistry(store, ttl_seconds=resolved_settings.session_ttl_seconds)
    correlation_store = CorrelationStore(
        store, ttl_seconds=resolved_settings.request_ttl_seconds
    )
    subscribers = SubscriberRegistry(
        store, ttl_seconds=resolved_settings.subscriber_ttl_seconds
    )
    connections = LiveConnectionRegistry()
    callback_client = HttpxCallbackClient.create()
    notifier = WebhookNotifier(
        client=callback_client,
        timeout_seconds=resolved_settings.webhook_timeout_seconds,
    )
    issuer_client = HttpxIssuerClient.create(resolved_settings.issuer_url)
    identity_resolver = IdentityResolver(
        sessions,
        scan_enabled=resolved_settings.reverse_identity_scan_enabled,
    )
    dispatcher = ResultDispatcher(
        correlation_store=correlation_store,
        identity_resolver=identity_resolver,
        record_repository=record_repository,
        connections=connections,
        subscribers=subscribers,
        notifier=notifier,
    )

    async def close_resources() -> None:
        connections.shutdown()
        await notifier.drain()
        await callback_client.close()
        await issuer_client.close()
        store.close()

    return AppContainer(
        settings=resolved_settings,
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
            suscriptor_token=resolved_settings.suscriptor_token,
        ),
        dispatcher=dispatcher,
        close_resources=close_resources,
    )
