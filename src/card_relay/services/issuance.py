"""Start card issuance requests."""

import logging
from dataclasses import dataclass
from uuid import uuid4

import httpx

from card_relay.adapters.issuer_client import IssuerClient
from card_relay.domain.errors import UpstreamUnavailableError
from card_relay.domain.models import PendingRequest
from card_relay.services.correlation import CorrelationStore
from card_relay.services.sessions import SessionRegistry

logger = logging.getLogger(__name__)


@dataclass
class IssuanceService:
    """Records a pending request and hands it to the issuer."""

    sessions: SessionRegistry
    correlation_store: CorrelationStore
    issuer_client: IssuerClient
    suscriptor_token: str = ""

    async def request_card(self, user_token: str, card_type: str) -> str:
        """Submit an issuance request and return its correlation token."""
        identity = self.sessions.get(user_token)
        request_uuid = str(uuid4())
        self.correlation_store.put(
            request_uuid,
            PendingRequest(user=identity, card_type=card_type, user_token=user_token),
        )
        payload: dict[str, object] = {
            "name": identity.name,
            "lastname": identity.lastname,
            "birthDate": identity.birth_date,
            "countryCode": identity.country_code,
            "cardType": card_type,
            "suscriptorToken": self.suscriptor_token,
            "requestUUID": request_uuid,
            "userToken": user_token,
        }
        try:
            await self.issuer_client.submit(payload)
        except httpx.HTTPError as exc:
            logger.warning(
                "Issuer rejected request %s: %s", request_uuid, type(exc).__name__
            )
            self.correlation_store.delete(request_uuid)
            raise UpstreamUnavailableError("Failed to send request to issuer") from exc
        logger.info("Submitted %s card request %s", card_type, request_uuid)
        return request_uuid
