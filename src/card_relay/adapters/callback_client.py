"""HTTP client for subscriber callbacks."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class CallbackClient(Protocol):
    """Interface for delivering JSON payloads to callback URLs."""

    async def post_json(
        self, url: str, payload: dict[str, object], timeout: float
    ) -> int:
        """POST a payload and return the HTTP status code."""


@dataclass
class HttpxCallbackClient(CallbackClient):
    """Callback client implemented with httpx."""

    http_client: httpx.AsyncClient

    @classmethod
    def create(cls) -> "HttpxCallbackClient":
        """Create a callback client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient())

    async def post_json(
        self, url: str, payload: dict[str, object], timeout: float
    ) -> int:
        """POST a JSON payload; transport errors propagate to the caller."""
        response = await self.http_client.post(url, json=payload, timeout=timeout)
        return response.status_code

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()
