"""
Password hashing and bearer-token primitives.
"""

from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from atmachetana.config import settings

from .errors import Unauthenticated

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS
)


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a plain password against its hash. A missing hash never matches."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)


def create_access_token(
    *, subject_id: int, email: str, role: str, expires_delta: timedelta | None = None
) -> str:
    """Create a signed JWT carrying the identity claims."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.JWT_EXPIRES_MINUTES)
    expire = datetime.now(UTC) + expires_delta
    to_encode = {"sub": str(subject_id), "email": email, "role": role, "exp": expire}
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry; return the claims.

    Raises:
        Unauthenticated: If the token is expired, malformed or badly signed
    """
    try:
        payload: dict[str, Any] = jwt.decode(
            token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM]
        )
    except ExpiredSignatureError as e:
        raise Unauthenticated("Token expired") from e
    except JWTError as e:
        raise Unauthenticated("Invalid or expired token") from e

    if payload.get("sub") is None or payload.get("role") is None:
        raise Unauthenticated("Invalid or expired token")
    return payload


def generate_otp(digits: int = 4) -> str:
    """Numeric one-time code, e.g. '4821'. Never starts with 0."""
    low = 10 ** (digits - 1)
    return str(low + secrets.randbelow(9 * low))


def otp_expiry(now: datetime | None = None) -> datetime:
    return (now or datetime.now(UTC)) + timedelta(minutes=settings.OTP_EXPIRY_MINUTES)


def otp_matches(stored_otp: str | None, submitted: str | None) -> bool:
    """Constant-time OTP comparison. A cleared OTP never matches."""
    if not stored_otp or not submitted:
        return False
    return secrets.compare_digest(stored_otp, submitted)


def otp_expired(expires: datetime | None, now: datetime | None = None) -> bool:
    """Some drivers (SQLite) hand back naive datetimes; those are read as UTC."""
    if expires is None:
        return True
    if expires.tzinfo is None:
        expires = expires.replace(tzinfo=UTC)
    return expires < (now or datetime.now(UTC))
