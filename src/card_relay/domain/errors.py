"""Typed errors raised by the relay services.

Each error carries the HTTP status the API layer answers with, so route
handlers never translate business failures themselves.
"""


class RelayError(Exception):
    """Base class for relay errors."""

    status_code: int = 500

    def __init__(self, detail: str = "Internal error") -> None:
        self.detail = detail
        super().__init__(detail)


class NotFoundError(RelayError):
    """Unknown or expired token, unknown subscriber, unresolved identity."""

    status_code = 404


class AmbiguousIdentityError(RelayError):
    """More than one session matched a reverse identity lookup."""

    status_code = 409


class StoreUnavailableError(RelayError):
    """The TTL store or the durable store could not be reached."""

    status_code = 503


class UpstreamUnavailableError(RelayError):
    """The issuer did not accept a submitted request."""

    status_code = 502


class IdentityMismatchError(RelayError):
    """A result names a session other than the one that made the request."""

    status_code = 409
