"""Key-value store abstractions with per-key expiry."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol


class KeyValueStore(Protocol):
    """Ephemeral store used for sessions, pending requests and subscribers."""

    def set(self, key: str, value: str, ttl_seconds: int | None) -> None:
        """Store a value, expiring after ``ttl_seconds`` when given."""

    def get(self, key: str) -> str | None:
        """Return the value if present and not expired."""

    def delete(self, key: str) -> bool:
        """Delete a key, returning whether it existed."""

    def scan(self, prefix: str) -> list[str]:
        """Return every live key that starts with ``prefix``."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class _Entry:
    value: str
    expires_at: datetime | None


@dataclass
class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used for tests and single-node development."""

    clock: Callable[[], datetime] = _utc_now
    _entries: dict[str, _Entry] = field(default_factory=dict)

    def set(self, key: str, value: str, ttl_seconds: int | None) -> None:
        """Store a value with an optional TTL."""
        expires_at = None
        if ttl_seconds is not None:
            expires_at = self.clock() + timedelta(seconds=ttl_seconds)
        self._entries[key] = _Entry(value=value, expires_at=expires_at)

    def get(self, key: str) -> str | None:
        """Return a value if it hasn't expired."""
        entry = self._live_entry(key)
        return entry.value if entry else None

    def delete(self, key: str) -> bool:
        """Delete a key if it is still live."""
        entry = self._live_entry(key)
        self._entries.pop(key, None)
        return entry is not None

    def scan(self, prefix: str) -> list[str]:
        """Return live keys with the given prefix."""
        return [
            key
            for key in list(self._entries)
            if key.startswith(prefix) and self._live_entry(key) is not None
        ]

    def _live_entry(self, key: str) -> _Entry | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and self.clock() >= entry.expires_at:
            self._entries.pop(key, None)
            return None
        return entry
