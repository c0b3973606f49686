"""Wire models for asynchronous issuance results."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

ISSUED = "issued"
DECLINED = "declined"


class DeclineReason(BaseModel):
    """Why the issuer declined a request."""

    reason: str


class IssuedCard(BaseModel):
    """Card details produced by the issuer."""

    pan: str
    cvv: str
    expiry_date: str
    card_type: str | None = None


class IssuerResult(BaseModel):
    """Outcome of one issuance request, exactly one of issued or declined.

    ``request_uuid`` is the correlation token. ``user_token`` is the caller
    session threaded through the issuer; older issuers omit it, in which case
    the relay falls back to matching ``name``/``lastname``.
    """

    request_uuid: str = Field(min_length=1)
    suscriptor_token: str = ""
    status: str = ""
    issued_card: IssuedCard | None = None
    decline_reason: DeclineReason | None = None
    user_token: str | None = None
    name: str | None = None
    lastname: str | None = None

    @model_validator(mode="after")
    def _exactly_one_outcome(self) -> "IssuerResult":
        if (self.issued_card is None) == (self.decline_reason is None):
            raise ValueError("exactly one of issued_card or decline_reason is required")
        if not self.status:
            self.status = ISSUED if self.issued_card is not None else DECLINED
        return self

    @property
    def outcome(self) -> str:
        return ISSUED if self.issued_card is not None else DECLINED


class WebhookEvent(BaseModel):
    """Envelope posted to subscriber callbacks."""

    id: str
    type: Literal["card.issued", "card.declined"]
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=UTC))
    source: str = "card-relay"
    data: IssuerResult
    metadata: dict[str, object] = Field(default_factory=dict)
