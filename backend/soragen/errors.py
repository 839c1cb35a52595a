"""Error taxonomy for credential, submission and polling failures."""

from __future__ import annotations


class SoraGenError(Exception):
    """Base class for all SoraGen errors."""


class ValidationError(SoraGenError):
    """Input rejected locally (missing prompt, missing images, bad key format).

    Raised before any network call is attempted.
    """


class Unauthenticated(SoraGenError):
    """No credential is present at call time."""

    def __init__(self, message: str = "A valid API key must be set first") -> None:
        super().__init__(message)


class RemoteRejected(SoraGenError):
    """The remote service answered with a non-success HTTP status."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Remote service rejected request: {status_code} - {body}")


class MalformedResponse(SoraGenError):
    """Success status, but the body is missing expected fields or is not JSON."""


class InvalidTransition(SoraGenError):
    """A poller operation was requested from a state that does not allow it."""


class TransportError(SoraGenError):
    """The remote service could not be reached (connection, DNS, timeout)."""
