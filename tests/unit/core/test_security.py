"""
Unit tests for security utilities (password hashing, session tokens, refresh tokens, OTPs).

All tests are fully mocked - no database or external dependencies.
"""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from jose import JWTError, jwt

from bigha.core import security
from bigha.core.config import settings


class TestPasswordHashing:
    """Test password hashing with Argon2id."""

    def test_hash_password_returns_argon2id_string(self):
        hashed = security.hash_password("TestPassword123!")

        assert isinstance(hashed, str)
        assert hashed.startswith("$argon2id$")

    def test_hash_password_different_for_same_password(self):
        """Hashing the same password twice produces different hashes (salt)."""
        assert security.hash_password("TestPassword123!") != security.hash_password("TestPassword123!")

    def test_verify_password_correct_password(self):
        hashed = security.hash_password("TestPassword123!")

        assert security.verify_password("TestPassword123!", hashed) is True

    def test_verify_password_incorrect_password(self):
        hashed = security.hash_password("TestPassword123!")

        assert security.verify_password("WrongPassword123!", hashed) is False

    def test_verify_password_malformed_hash(self):
        assert security.verify_password("password", "not_a_valid_argon2_hash") is False


class TestPasswordStrengthValidation:
    """Test password strength validation."""

    def test_validate_strong_password(self):
        is_valid, error = security.validate_password_strength("StrongP@ss123")

        assert is_valid is True
        assert error is None

    @pytest.mark.parametrize(
        "password,expected",
        [
            ("Short1!", "Password must be at least 8 characters long"),
            ("weakp@ss123", "Password must contain at least one uppercase letter"),
            ("WEAKP@SS123", "Password must contain at least one lowercase letter"),
            ("WeakPassword!", "Password must contain at least one digit"),
            ("WeakPassword123", "Password must contain at least one special character"),
        ],
    )
    def test_validate_rejects_weak_passwords(self, password, expected):
        is_valid, error = security.validate_password_strength(password)

        assert is_valid is False
        assert error == expected


class TestSessionToken:
    """Test signed session token creation and decoding."""

    def test_token_carries_session_claims(self):
        admin_id = uuid.uuid4()
        session_id = uuid.uuid4()
        expires_at = datetime.now(UTC) + timedelta(hours=1)

        token = security.create_session_token(
            admin_id=admin_id,
            email="ops@2bigha.com",
            role="super-admin",
            session_id=session_id,
            expires_at=expires_at,
        )
        payload = security.decode_token(token)

        assert payload["sub"] == str(admin_id)
        assert payload["sid"] == str(session_id)
        assert payload["email"] == "ops@2bigha.com"
        assert payload["role"] == "super-admin"
        assert payload["type"] == security.TOKEN_TYPE_ACCESS
        assert payload["exp"] == int(expires_at.timestamp())

    def test_token_signed_with_hs256(self):
        token = security.create_session_token(
            admin_id=uuid.uuid4(),
            email="ops@2bigha.com",
            role=None,
            session_id=uuid.uuid4(),
            expires_at=datetime.now(UTC) + timedelta(hours=1),
        )

        assert jwt.get_unverified_header(token)["alg"] == "HS256"

    def test_decode_rejects_expired_token(self):
        token = security.create_session_token(
            admin_id=uuid.uuid4(),
            email="ops@2bigha.com",
            role=None,
            session_id=uuid.uuid4(),
            expires_at=datetime.now(UTC) - timedelta(minutes=1),
            issued_at=datetime.now(UTC) - timedelta(hours=1),
        )

        with pytest.raises(JWTError):
            security.decode_token(token)

    def test_decode_rejects_foreign_signature(self):
        token = jwt.encode({"sub": str(uuid.uuid4())}, "x" * 40, algorithm="HS256")

        with pytest.raises(JWTError):
            security.decode_token(token)

    def test_unverified_decode_reads_expired_token(self):
        session_id = uuid.uuid4()
        token = security.create_session_token(
            admin_id=uuid.uuid4(),
            email="ops@2bigha.com",
            role=None,
            session_id=session_id,
            expires_at=datetime.now(UTC) - timedelta(minutes=1),
            issued_at=datetime.now(UTC) - timedelta(hours=1),
        )

        claims = security.decode_token_unverified(token)

        assert claims is not None
        assert claims["sid"] == str(session_id)

    def test_unverified_decode_returns_none_for_garbage(self):
        assert security.decode_token_unverified("not-a-token") is None


class TestRefreshTokens:
    """Refresh tokens are opaque and stored only as SHA-256 digests."""

    def test_generate_refresh_token_is_random_hex(self):
        first = security.generate_refresh_token()
        second = security.generate_refresh_token()

        assert first != second
        assert len(first) == 128
        int(first, 16)

    def test_hash_is_deterministic_and_differs_from_token(self):
        token = security.generate_refresh_token()

        assert security.hash_refresh_token(token) == security.hash_refresh_token(token)
        assert security.hash_refresh_token(token) != token
        assert len(security.hash_refresh_token(token)) == 64

    def test_expiry_helpers_follow_settings(self):
        now = datetime(2024, 1, 1, tzinfo=UTC)

        assert security.refresh_token_expiry(now) == now + timedelta(days=settings.refresh_token_expire_days)
        assert security.access_token_expiry(now) == now + timedelta(minutes=settings.access_token_expire_minutes)


class TestOTP:
    def test_generate_otp_is_numeric_with_configured_length(self):
        code = security.generate_otp()

        assert code.isdigit()
        assert len(code) == settings.otp_length

    def test_generate_otp_custom_length(self):
        assert len(security.generate_otp(8)) == 8

    def test_hash_otp_matches_refresh_hashing(self):
        assert security.hash_otp("123456") == security.hash_refresh_token("123456")
