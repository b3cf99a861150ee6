"""Salesforce OAuth2 Web Server Authentication Flow client.

This module wraps the three Salesforce OAuth2 endpoints:

- ``/services/oauth2/authorize``: where the user is redirected to approve the app
- ``/services/oauth2/token``: code, password and refresh token exchanges
- ``/services/oauth2/introspect``: access/refresh token validity checks

Every operation merges the caller's options over a small set of defaults
(``response_type``, ``grant_type``, ``token_type_hint``) and, for the network
operations, performs a single POST whose parameters travel in the query
string. Responses carrying ``id`` and ``issued_at`` must be signed with the
client secret or the call fails with :class:`SignatureError`.

Example:
    >>> async with SalesforceOAuth2() as sf:
    ...     tokens = await sf.authenticate(
    ...         client_id="...",
    ...         client_secret="...",
    ...         redirect_uri="https://app.example.com/callback",
    ...         code=request.args["code"],
    ...     )
"""

from __future__ import annotations

from typing import Any, Mapping
from urllib.parse import quote, urlencode

import httpx
import msgspec

from .config import OAuth2Settings
from .errors import APIError, ProtocolError, SignatureError, TransportError
from .logging_config import get_logger
from .signature import Signer, compute_signature, verify_signature

logger = get_logger("client")

AUTHORIZE_ENDPOINT = "/services/oauth2/authorize"
TOKEN_ENDPOINT = "/services/oauth2/token"
INTROSPECT_ENDPOINT = "/services/oauth2/introspect"

# Parameters whose values never reach the logs
_SENSITIVE_PARAMS = frozenset(
    {"client_secret", "password", "code", "code_verifier", "token", "refresh_token"}
)


def _encode(params: Mapping[str, Any]) -> str:
    """Form-encode parameters, spaces as %20."""
    return urlencode(params, quote_via=quote)


def _redact(params: Mapping[str, Any]) -> dict[str, Any]:
    return {
        key: "****" if key in _SENSITIVE_PARAMS else value
        for key, value in params.items()
    }


class SalesforceOAuth2:
    """Client for the Salesforce OAuth2 endpoints.

    Collaborators are injectable so tests can substitute fakes:

    - ``http_client``: an ``httpx.AsyncClient`` (e.g. one built on
      ``httpx.MockTransport``). When omitted, a client is created on first
      use and closed by :meth:`close`.
    - ``signer``: function computing the expected response signature.
    - ``settings``: defaults for ``base_url``, ``client_id``,
      ``client_secret``, ``redirect_uri`` and the per-request timeout.

    Calls share no mutable state and may run concurrently. Cancel a call the
    usual asyncio way (``asyncio.wait_for``, ``task.cancel()``).
    """

    def __init__(
        self,
        settings: OAuth2Settings | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        signer: Signer = compute_signature,
    ) -> None:
        self.settings = settings or OAuth2Settings()
        self._signer = signer
        self._http_client = http_client
        self._owns_client = http_client is None

    @classmethod
    def from_env(cls, **kwargs: Any) -> "SalesforceOAuth2":
        """Create a client whose defaults come from environment variables.

        See :class:`OAuth2Settings` for the variables read.
        """
        return cls(OAuth2Settings.from_env(), **kwargs)

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._http_client is None:
            logger.debug("Creating async HTTP client")
            self._http_client = httpx.AsyncClient(timeout=self.settings.timeout)
        return self._http_client

    async def close(self) -> None:
        """Close the async HTTP client if this instance created it."""
        if self._owns_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def __aenter__(self) -> "SalesforceOAuth2":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _merge(
        self,
        defaults: Mapping[str, Any],
        credentials: tuple[str, ...],
        options: Mapping[str, Any] | None,
        params: Mapping[str, Any],
    ) -> dict[str, Any]:
        """Merge, lowest precedence first: defaults, settings, options, params.

        Keys whose final value is None are dropped.
        """
        merged: dict[str, Any] = dict(defaults)
        merged["base_url"] = self.settings.login_url
        for key in credentials:
            value = getattr(self.settings, key)
            if value:
                merged[key] = value
        if options:
            merged.update(options)
        merged.update(params)
        return {key: value for key, value in merged.items() if value is not None}

    def get_authorization_url(
        self, options: Mapping[str, Any] | None = None, /, **params: Any
    ) -> str:
        """Build the URL the user is redirected to for approving the app.

        Args:
            options: OAuth2 parameters. Usually ``client_id``, ``redirect_uri``
                and ``scope`` (space separated, e.g. ``"api refresh_token"``),
                plus an optional ``base_url`` for a community or sandbox.
            **params: Same as ``options``, taking precedence over it

        Returns:
            str: Authorize endpoint URL; ``response_type`` defaults to ``code``
        """
        merged = self._merge(
            {"response_type": "code"},
            ("client_id", "redirect_uri"),
            options,
            params,
        )
        base_url = str(merged.pop("base_url", None) or self.settings.login_url).rstrip("/")
        return f"{base_url}{AUTHORIZE_ENDPOINT}?{_encode(merged)}"

    async def authenticate(
        self, options: Mapping[str, Any] | None = None, /, **params: Any
    ) -> dict[str, Any]:
        """Exchange an authorization code for tokens.

        Expected options: ``client_id``, ``client_secret``, ``redirect_uri``,
        ``code``. ``grant_type`` defaults to ``authorization_code``.
        """
        merged = self._merge(
            {"grant_type": "authorization_code"},
            ("client_id", "client_secret", "redirect_uri"),
            options,
            params,
        )
        return await self._request(TOKEN_ENDPOINT, merged)

    async def password(
        self, options: Mapping[str, Any] | None = None, /, **params: Any
    ) -> dict[str, Any]:
        """Exchange a username and password for tokens.

        Expected options: ``client_id``, ``client_secret``, ``username``,
        ``password``. If the caller's IP address is not allowlisted in the
        org, ``password`` must already have the security token appended.
        ``grant_type`` defaults to ``password``.
        """
        merged = self._merge(
            {"grant_type": "password"},
            ("client_id", "client_secret"),
            options,
            params,
        )
        return await self._request(TOKEN_ENDPOINT, merged)

    async def refresh(
        self, options: Mapping[str, Any] | None = None, /, **params: Any
    ) -> dict[str, Any]:
        """Renew an access token.

        Expected options: ``client_id``, ``client_secret``, ``refresh_token``.
        ``grant_type`` defaults to ``refresh_token``.
        """
        merged = self._merge(
            {"grant_type": "refresh_token"},
            ("client_id", "client_secret"),
            options,
            params,
        )
        return await self._request(TOKEN_ENDPOINT, merged)

    async def is_access_token_valid(
        self, options: Mapping[str, Any] | None = None, /, **params: Any
    ) -> dict[str, Any]:
        """Introspect an access token.

        Expected options: ``client_id``, ``client_secret``, ``token``.

        Returns:
            dict: Introspection payload (``active``, ``exp``, ``scope``, ...)
        """
        merged = self._merge(
            {"token_type_hint": "access_token"},
            ("client_id", "client_secret"),
            options,
            params,
        )
        return await self._request(INTROSPECT_ENDPOINT, merged)

    async def is_refresh_token_valid(
        self, options: Mapping[str, Any] | None = None, /, **params: Any
    ) -> dict[str, Any]:
        """Introspect a refresh token.

        Expected options: ``client_id``, ``client_secret``, ``token``.
        """
        merged = self._merge(
            {"token_type_hint": "refresh_token"},
            ("client_id", "client_secret"),
            options,
            params,
        )
        return await self._request(INTROSPECT_ENDPOINT, merged)

    async def _request(self, endpoint: str, options: Mapping[str, Any]) -> dict[str, Any]:
        """POST to a Salesforce OAuth2 endpoint and validate the answer.

        ``base_url`` is removed from ``options``; the remaining entries are
        sent in the query string of a body-less POST.

        Raises:
            TransportError: The request could not be completed
            ProtocolError: The body is not a JSON object
            APIError: The payload carries an ``error`` field
            SignatureError: ``id``/``issued_at`` present but not signed
                with the request's client secret
        """
        params = dict(options)
        base_url = str(params.pop("base_url", None) or self.settings.login_url).rstrip("/")
        client_secret = params.get("client_secret")
        url = f"{base_url}{endpoint}"

        logger.debug("POST %s params=%s", url, _redact(params))
        client = self._get_client()

        try:
            response = await client.post(
                f"{url}?{_encode(params)}",
                timeout=self.settings.timeout,
            )
        except httpx.HTTPError as e:
            logger.error("Request to %s failed: %s", url, e)
            raise TransportError(f"Request to {url} failed: {e}") from e

        try:
            payload = msgspec.json.decode(response.content)
        except msgspec.DecodeError as e:
            logger.error(
                "Invalid JSON from %s: status=%d", url, response.status_code
            )
            raise ProtocolError(
                f"Invalid JSON response from {url}: {e}",
                status_code=response.status_code,
                body=response.content,
            ) from e

        if not isinstance(payload, dict):
            raise ProtocolError(
                f"Expected a JSON object from {url}, got {type(payload).__name__}",
                status_code=response.status_code,
                body=response.content,
            )

        if "error" in payload:
            logger.warning(
                "Salesforce returned error from %s: status=%d, error=%s",
                url,
                response.status_code,
                payload["error"],
            )
            raise APIError(payload, status_code=response.status_code)

        if "id" in payload and "issued_at" in payload:
            if not verify_signature(payload, client_secret, self._signer):
                logger.warning("Signature verification failed for response from %s", url)
                raise SignatureError(payload)

        logger.info("POST %s succeeded: status=%d", url, response.status_code)
        return payload
