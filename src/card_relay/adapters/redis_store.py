"""Redis-backed key-value store."""

import logging
from dataclasses import dataclass

import redis

from card_relay.domain.errors import StoreUnavailableError
from card_relay.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)


@dataclass
class RedisKeyValueStore(KeyValueStore):
    """Redis implementation of the key-value store port."""

    client: redis.Redis

    @classmethod
    def create(cls, redis_url: str) -> "RedisKeyValueStore":
        """Create a store from a redis URL with string responses."""
        return cls(client=redis.Redis.from_url(redis_url, decode_responses=True))

    def set(self, key: str, value: str, ttl_seconds: int | None) -> None:
        """Store a value; ``SET key value EX ttl`` when a TTL is given."""
        try:
            self.client.set(key, value, ex=ttl_seconds)
        except redis.RedisError as exc:
            raise _unavailable("set", key, exc) from exc

    def get(self, key: str) -> str | None:
        """Return the value for a key, if present."""
        try:
            value = self.client.get(key)
        except redis.RedisError as exc:
            raise _unavailable("get", key, exc) from exc
        if value is None:
            return None
        return value.decode() if isinstance(value, bytes) else str(value)

    def delete(self, key: str) -> bool:
        """Delete a key and report whether it existed."""
        try:
            return bool(self.client.delete(key))
        except redis.RedisError as exc:
            raise _unavailable("delete", key, exc) from exc

    def scan(self, prefix: str) -> list[str]:
        """Enumerate keys by prefix with SCAN rather than KEYS."""
        try:
            keys = list(self.client.scan_iter(match=f"{prefix}*", count=500))
        except redis.RedisError as exc:
            raise _unavailable("scan", prefix, exc) from exc
        return [key.decode() if isinstance(key, bytes) else str(key) for key in keys]

    def ping(self) -> bool:
        """Return true when redis answers a PING."""
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            logger.warning("Redis ping failed", exc_info=True)
            return False

    def close(self) -> None:
        """Release pooled connections."""
        self.client.close()


def _unavailable(operation: str, key: str, exc: Exception) -> StoreUnavailableError:
    logger.error("Redis %s failed", operation, extra={"key": key})
    return StoreUnavailableError(f"TTL store unavailable: {type(exc).__name__}")
