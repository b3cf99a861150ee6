"""Exceptions raised by the Salesforce OAuth2 helper."""

from __future__ import annotations

from typing import Any


class SalesforceOAuth2Error(Exception):
    """Base class for every error raised by this package."""


class TransportError(SalesforceOAuth2Error):
    """The HTTP exchange itself failed (connection, DNS, TLS, timeout).

    The underlying httpx exception is available as ``__cause__``.
    """


class ProtocolError(SalesforceOAuth2Error):
    """Salesforce answered with a body that is not a JSON object."""

    def __init__(self, message: str, *, status_code: int | None = None, body: bytes = b"") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class APIError(SalesforceOAuth2Error):
    """Salesforce reported an OAuth error (``error`` field in the payload)."""

    def __init__(self, payload: dict[str, Any], *, status_code: int | None = None) -> None:
        self.payload = payload
        self.status_code = status_code
        self.error = str(payload.get("error", ""))
        self.error_description = payload.get("error_description")
        message = self.error
        if self.error_description:
            message = f"{message}: {self.error_description}"
        super().__init__(message)


class SignatureError(SalesforceOAuth2Error):
    """The response signature does not match ``id`` + ``issued_at``.

    Raised instead of returning the payload; usually means a wrong client
    secret or a tampered response.
    """

    def __init__(self, payload: dict[str, Any]) -> None:
        super().__init__("Signature could not be verified.")
        self.payload = payload
