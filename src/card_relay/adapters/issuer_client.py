"""Card issuer API client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class IssuerClient(Protocol):
    """Interface for submitting issuance requests."""

    async def submit(self, payload: dict[str, object]) -> None:
        """Hand a request to the issuer; the result arrives later by callback."""


@dataclass
class HttpxIssuerClient(IssuerClient):
    """HTTPX-backed issuer client."""

    issuer_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, issuer_url: str) -> "HttpxIssuerClient":
        """Create an issuer client with a managed httpx session."""
        return cls(issuer_url=issuer_url, http_client=httpx.AsyncClient())

    async def submit(self, payload: dict[str, object]) -> None:
        """POST the issuance request to the issuer."""
        response = await self.http_client.post(
            self.issuer_url, json=payload, timeout=15
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
