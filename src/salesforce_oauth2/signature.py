"""Salesforce token response signature utilities.

Salesforce signs token responses so the client can check that ``id`` and
``issued_at`` were produced by the server holding the same consumer secret:

    signature = BASE64(HMAC-SHA256(client_secret, id + issued_at))
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from typing import Any, Callable

Signer = Callable[[str, str, str], str]


def compute_signature(identity_url: str, issued_at: str, client_secret: str) -> str:
    """Compute the signature Salesforce attaches to a token response.

    Args:
        identity_url: The ``id`` field of the response
        issued_at: The ``issued_at`` field of the response
        client_secret: The Connected App consumer secret

    Returns:
        str: Base64 encoded HMAC-SHA256 digest
    """
    mac = hmac.new(client_secret.encode("utf-8"), digestmod=hashlib.sha256)
    mac.update(identity_url.encode("utf-8"))
    mac.update(issued_at.encode("utf-8"))
    return base64.b64encode(mac.digest()).decode("ascii")


def verify_signature(
    payload: dict[str, Any],
    client_secret: str | None,
    signer: Signer = compute_signature,
) -> bool:
    """Verify the signature of a token response payload.

    A payload without a ``signature`` field, or a call without a client
    secret, never verifies.

    Args:
        payload: Parsed token response containing ``id`` and ``issued_at``
        client_secret: The Connected App consumer secret
        signer: Function computing the expected signature

    Returns:
        bool: True if the signature matches
    """
    signature = payload.get("signature")
    if not isinstance(signature, str) or not client_secret:
        return False

    expected = signer(str(payload["id"]), str(payload["issued_at"]), client_secret)

    # Constant-time comparison
    return secrets.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
