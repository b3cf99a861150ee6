"""Tests for token response signature utilities."""

import base64
import hashlib
import hmac

from salesforce_oauth2.signature import compute_signature, verify_signature

IDENTITY_URL = "https://login.salesforce.com/id/00D/005"
ISSUED_AT = "1234567890"


class TestSignature:
    """Tests for compute_signature() and verify_signature()."""

    def test_compute_signature(self):
        """Test HMAC-SHA256 over id + issued_at, base64 encoded."""
        expected = base64.b64encode(
            hmac.new(b"secret", (IDENTITY_URL + ISSUED_AT).encode(), hashlib.sha256).digest()
        ).decode()

        assert compute_signature(IDENTITY_URL, ISSUED_AT, "secret") == expected

    def test_compute_signature_utf8_secret(self):
        """Test non-ASCII secrets are keyed as UTF-8 bytes."""
        expected = base64.b64encode(
            hmac.new("sécret".encode("utf-8"), (IDENTITY_URL + ISSUED_AT).encode(), hashlib.sha256).digest()
        ).decode()

        assert compute_signature(IDENTITY_URL, ISSUED_AT, "sécret") == expected

    def test_verify_signature_success(self):
        """Test a correctly signed payload verifies."""
        payload = {
            "id": IDENTITY_URL,
            "issued_at": ISSUED_AT,
            "signature": compute_signature(IDENTITY_URL, ISSUED_AT, "secret"),
        }
        assert verify_signature(payload, "secret") is True

    def test_verify_signature_other_secret(self):
        """Test a payload signed with another secret does not verify."""
        payload = {
            "id": IDENTITY_URL,
            "issued_at": ISSUED_AT,
            "signature": compute_signature(IDENTITY_URL, ISSUED_AT, "other"),
        }
        assert verify_signature(payload, "secret") is False

    def test_verify_signature_tampered_issued_at(self):
        """Test changing issued_at after signing breaks verification."""
        payload = {
            "id": IDENTITY_URL,
            "issued_at": "9999999999",
            "signature": compute_signature(IDENTITY_URL, ISSUED_AT, "secret"),
        }
        assert verify_signature(payload, "secret") is False

    def test_verify_signature_missing_signature(self):
        """Test a payload without signature does not verify."""
        payload = {"id": IDENTITY_URL, "issued_at": ISSUED_AT}
        assert verify_signature(payload, "secret") is False

    def test_verify_signature_without_secret(self):
        """Test verification fails when no client secret is known."""
        payload = {
            "id": IDENTITY_URL,
            "issued_at": ISSUED_AT,
            "signature": compute_signature(IDENTITY_URL, ISSUED_AT, ""),
        }
        assert verify_signature(payload, None) is False
        assert verify_signature(payload, "") is False
