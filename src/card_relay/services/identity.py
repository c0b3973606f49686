"""Resolve which session an issuance result belongs to."""

import logging
from dataclasses import dataclass

from card_relay.domain.errors import (
    AmbiguousIdentityError,
    IdentityMismatchError,
    NotFoundError,
)
from card_relay.domain.models import PendingRequest
from card_relay.domain.results import IssuerResult
from card_relay.services.sessions import SessionRegistry

logger = logging.getLogger(__name__)


@dataclass
class IdentityResolver:
    """Recover the session token that originated a request.

    The session token stored with the pending request is authoritative; a
    token echoed by the issuer must agree with it. Pending requests recorded
    without a session token accept the echoed token only when that session's
    name and lastname match the snapshot. Older issuers echo only identity
    fields; for those the resolver scans every live session and compares name
    and lastname, which is linear in the number of sessions and not a unique
    key.
    """

    sessions: SessionRegistry
    scan_enabled: bool = True

    def resolve(self, result: IssuerResult, pending: PendingRequest) -> str:
        """Return the owning session token for ``result``."""
        if pending.user_token:
            if result.user_token and result.user_token != pending.user_token:
                logger.warning(
                    "Issuer result names a different session than the request",
                    extra={"request_uuid": result.request_uuid},
                )
                raise IdentityMismatchError("User token does not match the request")
            return pending.user_token
        if result.user_token:
            return self._verified(result.user_token, pending)
        if not self.scan_enabled:
            raise NotFoundError("User token not found")
        logger.warning(
            "Resolving identity by name scan; issuer did not return a session token",
            extra={"request_uuid": result.request_uuid},
        )
        return self.scan(pending)

    def _verified(self, token: str, pending: PendingRequest) -> str:
        identity = self.sessions.get(token)
        if (identity.name, identity.lastname) != (
            pending.user.name,
            pending.user.lastname,
        ):
            raise IdentityMismatchError("User token does not match the request")
        return token

    def scan(self, pending: PendingRequest) -> str:
        """Find the unique session whose name and lastname match the snapshot."""
        wanted = (pending.user.name, pending.user.lastname)
        matches = [
            token
            for token, identity in self.sessions.iter_sessions()
            if (identity.name, identity.lastname) == wanted
        ]
        if not matches:
            raise NotFoundError("User token not found")
        if len(matches) > 1:
            raise AmbiguousIdentityError(
                f"{len(matches)} sessions match the request identity"
            )
        return matches[0]
