"""Shared fixtures: a fake Salesforce answering through httpx.MockTransport."""

from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from salesforce_oauth2 import OAuth2Settings, SalesforceOAuth2, compute_signature

IDENTITY_URL = "https://login.salesforce.com/id/00D000000000001/005000000000001"
ISSUED_AT = "1234567890"
CLIENT_SECRET = "S"


def signed_payload(secret: str = CLIENT_SECRET, **extra: Any) -> dict[str, Any]:
    """Token response signed the way Salesforce signs it."""
    payload = {
        "id": IDENTITY_URL,
        "issued_at": ISSUED_AT,
        "signature": compute_signature(IDENTITY_URL, ISSUED_AT, secret),
        "access_token": "tok",
        "instance_url": "https://na1.salesforce.com",
        "token_type": "Bearer",
    }
    payload.update(extra)
    return payload


class FakeSalesforce:
    """Records requests and replies with a canned response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.json: Any = {}
        self.content: bytes | None = None
        self.exception: Exception | None = None

    def reply(self, json: Any = None, status_code: int = 200, content: bytes | None = None) -> None:
        self.json = json
        self.status_code = status_code
        self.content = content

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exception is not None:
            raise self.exception
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content)
        return httpx.Response(self.status_code, json=self.json)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_params(self) -> list[tuple[str, str]]:
        return list(self.last.url.params.multi_items())

    def client(
        self,
        settings: OAuth2Settings | None = None,
        signer: Callable[[str, str, str], str] = compute_signature,
    ) -> SalesforceOAuth2:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return SalesforceOAuth2(settings, http_client=http_client, signer=signer)


@pytest.fixture
def salesforce() -> FakeSalesforce:
    return FakeSalesforce()
