"""
Unit Tests for Password Hashing, Tokens and OTPs
"""

from datetime import UTC, datetime, timedelta

import pytest

from atmachetana.core.errors import Unauthenticated
from atmachetana.core.security import (
    create_access_token,
    decode_access_token,
    generate_otp,
    get_password_hash,
    otp_expired,
    otp_expiry,
    otp_matches,
    verify_password,
)


class TestPasswords:
    def test_hash_round_trip(self):
        hashed = get_password_hash("secret123")

        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("wrong", hashed)

    def test_missing_hash_never_matches(self):
        assert verify_password("anything", None) is False


class TestTokens:
    """Tests for bearer token issue and verification."""

    def test_claims(self):
        token = create_access_token(subject_id=7, email="a@example.com", role="counsellor")

        claims = decode_access_token(token)

        assert claims["sub"] == "7"
        assert claims["email"] == "a@example.com"
        assert claims["role"] == "counsellor"

    def test_expired(self):
        token = create_access_token(
            subject_id=7, email="a@example.com", role="student", expires_delta=timedelta(seconds=-1)
        )

        with pytest.raises(Unauthenticated, match="Token expired"):
            decode_access_token(token)

    def test_garbage(self):
        with pytest.raises(Unauthenticated, match="Invalid or expired token"):
            decode_access_token("not.a.token")


class TestOtp:
    """Tests for one-time codes."""

    def test_four_digits(self):
        for _ in range(50):
            otp = generate_otp()
            assert len(otp) == 4
            assert otp.isdigit()
            assert otp[0] != "0"

    def test_matches(self):
        assert otp_matches("4821", "4821")
        assert not otp_matches("4821", "4822")
        assert not otp_matches(None, "4821")
        assert not otp_matches("4821", "")

    def test_expiry_window(self):
        now = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)

        expires = otp_expiry(now)

        assert expires == now + timedelta(minutes=10)
        assert not otp_expired(expires, now + timedelta(minutes=9))
        assert otp_expired(expires, now + timedelta(minutes=11))

    def test_naive_expiry_read_as_utc(self):
        now = datetime(2024, 3, 10, 12, 0, tzinfo=UTC)

        assert not otp_expired(datetime(2024, 3, 10, 12, 5), now)
        assert otp_expired(None, now)
