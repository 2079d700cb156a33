"""
Security utilities for authentication and authorization.

This module provides:
- Password hashing with Argon2id
- Signed session token generation and decoding (JWT, HS256)
- Opaque refresh token generation and SHA-256 hashing
- One-time password generation and hashing
- Password strength validation
"""

import hashlib
import logging
import re
import secrets
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

from argon2 import PasswordHasher
from argon2.exceptions import (
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)
from jose import JWTError, jwt

from bigha.core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# Password Hashing with Argon2id
# =============================================================================

pwd_hasher = PasswordHasher(
    time_cost=settings.argon2_time_cost,
    memory_cost=settings.argon2_memory_cost,
    parallelism=settings.argon2_parallelism,
    hash_len=32,
    salt_len=16,
)


def hash_password(password: str) -> str:
    """
    Hash a password using Argon2id.

    Args:
        password: Plain text password to hash

    Returns:
        Argon2id hash string (includes algorithm, parameters, salt, and hash)
    """
    return pwd_hasher.hash(password)


def verify_password(password: str, hashed_password: str) -> bool:
    """
    Verify a password against an Argon2id hash.

    Args:
        password: Plain text password to verify
        hashed_password: Argon2id hash to verify against

    Returns:
        True if password matches hash, False otherwise
    """
    try:
        pwd_hasher.verify(hashed_password, password)
        return True
    except (VerifyMismatchError, VerificationError, InvalidHashError):
        return False


def validate_password_strength(password: str) -> tuple[bool, str | None]:
    """
    Validate password strength against security requirements.

    Requirements:
    - Minimum 8 characters
    - At least 1 uppercase letter
    - At least 1 lowercase letter
    - At least 1 digit
    - At least 1 special character

    Returns:
        Tuple of (is_valid, error_message)

    Example:
        >>> validate_password_strength("weak")
        (False, "Password must be at least 8 characters long")
        >>> validate_password_strength("StrongP@ss123")
        (True, None)
    """
    if len(password) < 8:
        return False, "Password must be at least 8 characters long"

    if not re.search(r"[A-Z]", password):
        return False, "Password must contain at least one uppercase letter"

    if not re.search(r"[a-z]", password):
        return False, "Password must contain at least one lowercase letter"

    if not re.search(r"\d", password):
        return False, "Password must contain at least one digit"

    if not re.search(r"[!@#$%^&*()_+\-=\[\]{}|;:,.<>?]", password):
        return False, "Password must contain at least one special character"

    return True, None


# =============================================================================
# Session Tokens
# =============================================================================
# A session token is a signed JWT whose "sid" claim points at an
# admin_sessions row. The signature alone never makes a token valid;
# SessionService re-checks the row on every request.
# =============================================================================

ALGORITHM = "HS256"

TOKEN_TYPE_ACCESS = "access"


def create_session_token(
    admin_id: uuid.UUID,
    email: str,
    role: str | None,
    session_id: uuid.UUID,
    expires_at: datetime,
    issued_at: datetime | None = None,
) -> str:
    """
    Create a signed session token.

    Args:
        admin_id: Authenticated admin id (``sub`` claim)
        email: Admin email
        role: Primary role slug, or None for admins without roles
        session_id: Id of the persisted admin_sessions row (``sid`` claim)
        expires_at: Session expiry, mirrored in the ``exp`` claim
        issued_at: Issue time, defaults to now

    Returns:
        Encoded JWT string
    """
    issued_at = issued_at or datetime.now(UTC)
    claims: dict[str, Any] = {
        "sub": str(admin_id),
        "email": email,
        "role": role,
        "sid": str(session_id),
        "iat": issued_at,
        "exp": expires_at,
        "type": TOKEN_TYPE_ACCESS,
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(claims, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict[str, Any]:
    """
    Decode and validate a JWT token.

    Verifies signature, expiration and format.

    Raises:
        JWTError: If token is invalid, expired, or malformed
    """
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.debug(f"JWT decode error: {e}")
        raise


def decode_token_unverified(token: str) -> dict[str, Any] | None:
    """
    Read token claims without verifying the signature or expiry.

    Used only by revocation, which must also work on expired tokens.
    Returns None when the token cannot be parsed at all.
    """
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


# =============================================================================
# Refresh Tokens
# =============================================================================
# Refresh tokens are opaque random values. Only their SHA-256 digest is
# persisted, so a leaked database does not leak usable credentials.
# =============================================================================


def generate_refresh_token() -> str:
    """Generate a new opaque refresh token (64 random bytes, hex encoded)."""
    return secrets.token_hex(64)


def hash_refresh_token(token: str) -> str:
    """
    Hash a refresh token using SHA-256.

    Returns:
        SHA-256 hash of the token (hex string)
    """
    return hashlib.sha256(token.encode()).hexdigest()


def refresh_token_expiry(now: datetime | None = None) -> datetime:
    """Expiry timestamp for a refresh token issued at ``now``."""
    return (now or datetime.now(UTC)) + timedelta(days=settings.refresh_token_expire_days)


def access_token_expiry(now: datetime | None = None) -> datetime:
    """Expiry timestamp for a session issued at ``now``."""
    return (now or datetime.now(UTC)) + timedelta(minutes=settings.access_token_expire_minutes)


# =============================================================================
# One-Time Passwords
# =============================================================================


def generate_otp(length: int | None = None) -> str:
    """Generate a numeric one-time password."""
    length = length or settings.otp_length
    return "".join(secrets.choice("0123456789") for _ in range(length))


def hash_otp(code: str) -> str:
    """OTP codes are stored the same way refresh tokens are: SHA-256 hex digest."""
    return hashlib.sha256(code.encode()).hexdigest()
