"""Domain models for the card relay."""

from dataclasses import asdict, dataclass


@dataclass(frozen=True)
class Identity:
    """Snapshot of a registered end user."""

    name: str
    lastname: str
    birth_date: str
    country_code: str
    citizen_id: str = ""

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Identity":
        return cls(
            name=str(data.get("name", "")),
            lastname=str(data.get("lastname", "")),
            birth_date=str(data.get("birth_date", "")),
            country_code=str(data.get("country_code", "")),
            citizen_id=str(data.get("citizen_id", "")),
        )


@dataclass(frozen=True)
class PendingRequest:
    """Context of an issuance request waiting for the issuer's answer."""

    user: Identity
    card_type: str
    user_token: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "user": self.user.to_dict(),
            "card_type": self.card_type,
            "user_token": self.user_token,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "PendingRequest":
        user = data.get("user")
        user_token = data.get("user_token")
        return cls(
            user=Identity.from_dict(user if isinstance(user, dict) else {}),
            card_type=str(data.get("card_type", "")),
            user_token=str(user_token) if user_token else None,
        )


@dataclass(frozen=True)
class Subscriber:
    """A party that receives issuance results on its callback URL."""

    token: str
    name: str
    callback_url: str
