"""Application configuration."""

import os

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    redis_url: str = "redis://localhost:6379/0"
    supabase_url: str
    supabase_service_key: str
    issuer_url: str
    suscriptor_token: str = ""
    request_ttl_seconds: int = 24 * 60 * 60
    session_ttl_seconds: int = 24 * 60 * 60
    subscriber_ttl_seconds: int | None = None
    live_connection_timeout_seconds: float | None = None
    webhook_timeout_seconds: float = 10.0
    reverse_identity_scan_enabled: bool = True
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @field_validator(
        "subscriber_ttl_seconds", "live_connection_timeout_seconds", mode="before"
    )
    @classmethod
    def _blank_means_unbounded(cls, value: object) -> object:
        return parse_optional_seconds(value)


def parse_optional_seconds(raw: object) -> object:
    """Treat empty, zero and "none" durations as unbounded (None)."""
    if raw is None:
        return None
    if isinstance(raw, str):
        cleaned = raw.strip().lower()
        if cleaned in {"", "none", "never", "0"}:
            return None
        return cleaned
    if isinstance(raw, int | float) and raw <= 0:
        return None
    return raw
