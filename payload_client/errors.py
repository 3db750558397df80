"""Exception hierarchy for the Payload client."""

from __future__ import annotations

from typing import Any


class PayloadError(Exception):
    """Base exception for Payload client errors."""
    pass


class DiscoveryError(PayloadError):
    """The reflection endpoint was unreachable or returned an unusable body."""

    def __init__(self, endpoint: str, cause: str | Exception):
        self.endpoint = endpoint
        self.cause = cause
        super().__init__(
            f"Schema discovery failed at {endpoint}: {cause}. "
            f"Make sure the Payload server exposes the reflection endpoint at {endpoint} "
            f"returning {{collections: {{...}}, globals: {{...}}}} and that these "
            f"credentials are allowed to read it."
        )


class AuthenticationError(PayloadError):
    """Login failed or the login response carried no token."""
    pass


class RequestError(PayloadError):
    """A request against the Payload REST API did not succeed."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class InvalidParameterError(RequestError):
    """Item parameters cannot be turned into a request."""
    pass


class NotFoundError(PayloadError):
    """Slug not present in the discovered schema."""
    pass
