"""Environment driven defaults for the OAuth2 helper."""

from __future__ import annotations

import os

import msgspec

from .logging_config import get_logger

logger = get_logger("config")

DEFAULT_LOGIN_URL = "https://login.salesforce.com"
DEFAULT_TIMEOUT = 30.0


class OAuth2Settings(msgspec.Struct, kw_only=True, frozen=True):
    """Connected App defaults applied when a call omits them.

    Environment variables:
        SALESFORCE_LOGIN_URL: Login URL (default: https://login.salesforce.com)
        SALESFORCE_CLIENT_ID: Connected App consumer key
        SALESFORCE_CLIENT_SECRET: Connected App consumer secret
        SALESFORCE_REDIRECT_URI: Callback URL registered on the Connected App
        SALESFORCE_HTTP_TIMEOUT: Seconds per request, empty or 0 disables (default: 30)
    """

    login_url: str = DEFAULT_LOGIN_URL
    client_id: str | None = None
    client_secret: str | None = None
    redirect_uri: str | None = None
    timeout: float | None = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls) -> "OAuth2Settings":
        """Load settings from environment variables.

        Raises:
            ValueError: If SALESFORCE_HTTP_TIMEOUT is not a number
        """
        raw_timeout = os.getenv("SALESFORCE_HTTP_TIMEOUT")
        timeout: float | None = DEFAULT_TIMEOUT
        if raw_timeout is not None:
            try:
                timeout = float(raw_timeout) if raw_timeout.strip() else None
            except ValueError:
                raise ValueError(
                    f"SALESFORCE_HTTP_TIMEOUT must be a number, got {raw_timeout!r}"
                ) from None
            if timeout is not None and timeout <= 0:
                timeout = None

        settings = cls(
            login_url=os.getenv("SALESFORCE_LOGIN_URL", DEFAULT_LOGIN_URL).rstrip("/"),
            client_id=os.getenv("SALESFORCE_CLIENT_ID") or None,
            client_secret=os.getenv("SALESFORCE_CLIENT_SECRET") or None,
            redirect_uri=os.getenv("SALESFORCE_REDIRECT_URI") or None,
            timeout=timeout,
        )

        logger.debug(
            "Loaded settings: login_url=%s, client_id=%s, client_secret=%s, timeout=%s",
            settings.login_url,
            settings.client_id or "(not set)",
            "(set)" if settings.client_secret else "(not set)",
            settings.timeout,
        )
        return settings
