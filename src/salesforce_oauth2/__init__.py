"""Salesforce OAuth2 Web Server Authentication Flow helper.

Components:
    - SalesforceOAuth2: Authorization URLs, token exchanges and introspection
    - OAuth2Settings: Connected App defaults loaded from the environment
    - compute_signature / verify_signature: Token response signature checks
    - Errors: SalesforceOAuth2Error and its TransportError, ProtocolError,
      APIError and SignatureError subclasses
"""

from .client import (
    AUTHORIZE_ENDPOINT,
    INTROSPECT_ENDPOINT,
    TOKEN_ENDPOINT,
    SalesforceOAuth2,
)
from .config import OAuth2Settings
from .errors import (
    APIError,
    ProtocolError,
    SalesforceOAuth2Error,
    SignatureError,
    TransportError,
)
from .signature import compute_signature, verify_signature

__all__ = [
    # Client
    "SalesforceOAuth2",
    "AUTHORIZE_ENDPOINT",
    "TOKEN_ENDPOINT",
    "INTROSPECT_ENDPOINT",
    # Configuration
    "OAuth2Settings",
    # Signatures
    "compute_signature",
    "verify_signature",
    # Errors
    "SalesforceOAuth2Error",
    "TransportError",
    "ProtocolError",
    "APIError",
    "SignatureError",
]
