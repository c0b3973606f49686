"""Pydantic models for relay HTTP payloads."""

from pydantic import AnyHttpUrl, BaseModel, Field, field_validator

from card_relay.domain.models import Identity
from card_relay.domain.results import IssuerResult


class RegisterRequest(BaseModel):
    """User registration payload."""

    name: str = Field(min_length=1)
    lastname: str = Field(min_length=1)
    birth_date: str = Field(min_length=1)
    country_code: str = Field(min_length=1)
    citizen_id: str

    @field_validator("citizen_id")
    @classmethod
    def _digits_only(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned.isdigit():
            raise ValueError("ID must contain only digits")
        return cleaned

    def to_identity(self) -> Identity:
        return Identity(
            name=self.name,
            lastname=self.lastname,
            birth_date=self.birth_date,
            country_code=self.country_code,
            citizen_id=self.citizen_id,
        )


class IssueCardRequest(BaseModel):
    """Card issuance payload sent by the frontend."""

    card_type: str = Field(min_length=1)
    user_token: str = Field(min_length=1)


class SubscribeRequest(BaseModel):
    """Webhook subscription payload."""

    name: str = Field(min_length=1)
    callback_url: AnyHttpUrl


class NotificationRequest(BaseModel):
    """Direct push to a user's live stream."""

    user_token: str = Field(min_length=1)
    issuer_response: IssuerResult
