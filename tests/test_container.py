"""Tests for container wiring."""

import asyncio

from card_relay.adapters.redis_store import RedisKeyValueStore
from card_relay.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert container.user_service is not None
    assert container.dispatcher.correlation_store is container.correlation_store
    assert isinstance(container.sessions.store, RedisKeyValueStore)
    asyncio.run(container.close_resources())


def test_build_container_applies_ttl_settings(settings) -> None:
    settings.subscriber_ttl_seconds = 3600
    settings.request_ttl_seconds = 600

    container = build_container(settings)

    assert container.subscribers.ttl_seconds == 3600
    assert container.correlation_store.ttl_seconds == 600
    asyncio.run(container.close_resources())
