"""
Authentication service for admin login, token management and passwords.

This module provides:
- Password login, with an emailed OTP as second step when enabled
- Session token + refresh token issuance
- Refresh token rotation
- Logout (current session or everywhere)
- Token verification for clients
- Password change with session invalidation
- OTP requests and status
"""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from bigha.core.config import settings
from bigha.core.security import hash_password, validate_password_strength, verify_password
from bigha.exceptions import (
    InvalidCredentialsError,
    InvalidOTPError,
    InvalidTokenError,
    NotFoundError,
    WeakPasswordError,
)
from bigha.models.admin import AdminUser
from bigha.models.enums import ActivityAction, OTPType
from bigha.models.mixins import utcnow
from bigha.repositories.admin_repository import AdminUserRepository
from bigha.schemas.auth import LoginResult, OTPRequestResult, OTPStatus, TokenPair
from bigha.services.activity_service import ActivityService, RequestMeta
from bigha.services.notification_service import NotificationService
from bigha.services.otp_service import OTPService
from bigha.services.session_service import SessionService

logger = logging.getLogger(__name__)


class AuthService:
    """
    Service class for admin authentication.

    This service handles:
    - Login and token generation
    - Two-factor login completion
    - Token refresh with rotation
    - Logout and session revocation
    - Password changes

    Every public method commits its own transaction.
    """

    def __init__(
        self,
        session: AsyncSession,
        notifications: NotificationService | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize AuthService.

        Args:
            session: Async database session
            notifications: Sender used for OTP codes
            clock: Time source, injectable for tests
        """
        self.session = session
        self.clock = clock
        self.admin_repo = AdminUserRepository(session)
        self.sessions = SessionService(session, clock=clock)
        self.otp = OTPService(session, notifications=notifications, clock=clock)
        self.activity = ActivityService(session)

    async def _issue_tokens(self, admin: AdminUser, meta: RequestMeta | None) -> TokenPair:
        access_token, _ = await self.sessions.create_session(admin, meta)
        refresh_token, _ = await self.sessions.create_refresh_token(admin.id, meta)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=settings.access_token_expire_minutes * 60,
        )

    async def _complete_login(
        self,
        admin: AdminUser,
        meta: RequestMeta | None,
        method: str,
    ) -> LoginResult:
        admin.last_login_at = self.clock()
        tokens = await self._issue_tokens(admin, meta)
        await self.activity.log_activity(
            admin_id=admin.id,
            action=ActivityAction.LOGIN,
            resource="session",
            resource_id=admin.id,
            details={"email": admin.email, "method": method},
            meta=meta,
        )
        await self.session.commit()

        logger.info(f"Admin logged in: {admin.id} ({admin.email}) via {method}")
        return LoginResult(
            admin=await self.admin_repo.get_with_roles(admin.id),
            tokens=tokens,
            requires_otp=False,
            message="Login successful",
        )

    async def login(
        self,
        email: str,
        password: str,
        meta: RequestMeta | None = None,
    ) -> LoginResult:
        """
        Authenticate with email and password.

        This method:
        1. Looks up an active admin by email
        2. Verifies the password (Argon2id)
        3. For two-factor admins, issues a LOGIN OTP and stops there
        4. Otherwise creates a session and refresh token and logs LOGIN

        Raises:
            InvalidCredentialsError: Unknown email, disabled admin or wrong password.
                No session is created; a failed attempt on a known admin is
                recorded as LOGIN_FAILED with success=false.
            RateLimitExceededError: Two-factor admin asked for too many codes

        Example:
            result = await auth_service.login("ops@2bigha.com", "Str0ng!Pass", meta)
            if result.requires_otp:
                ...  # ask the user for the emailed code
        """
        admin = await self.admin_repo.get_by_email(email)

        if admin is None or not admin.is_active:
            logger.warning(f"Login attempt for unknown or disabled admin: {email}")
            raise InvalidCredentialsError()

        if not verify_password(password, admin.password_hash):
            await self.activity.log_activity(
                admin_id=admin.id,
                action=ActivityAction.LOGIN_FAILED,
                resource="session",
                resource_id=admin.id,
                details={"email": admin.email},
                meta=meta,
                success=False,
                error_message="Invalid password",
            )
            await self.session.commit()
            logger.warning(f"Failed login for admin {admin.id}: invalid password")
            raise InvalidCredentialsError()

        if admin.two_factor_enabled:
            await self.otp.request_otp(admin.email, OTPType.LOGIN, admin_id=admin.id, meta=meta)
            return LoginResult(
                admin=None,
                tokens=None,
                requires_otp=True,
                message="A verification code has been sent to your email address.",
            )

        return await self._complete_login(admin, meta, method="password")

    async def verify_login_otp(
        self,
        email: str,
        code: str,
        meta: RequestMeta | None = None,
    ) -> LoginResult:
        """
        Finish a two-factor login.

        Raises:
            InvalidOTPError: Unknown or disabled admin, or a bad code
        """
        admin = await self.admin_repo.get_active_by_email(email)
        if admin is None:
            raise InvalidOTPError()

        await self.otp.verify_otp(admin.email, code, OTPType.LOGIN, meta=meta)
        return await self._complete_login(admin, meta, method="otp")

    async def refresh(self, refresh_token: str, meta: RequestMeta | None = None) -> LoginResult:
        """
        Rotate a refresh token.

        The presented refresh row is revoked and a new access session and
        refresh token are issued in the same transaction.

        Raises:
            InvalidTokenError: Unknown, revoked or expired refresh token, or a
                disabled admin
        """
        row = await self.sessions.validate_refresh_token(refresh_token)
        if row is None:
            raise InvalidTokenError("Invalid or expired refresh token")

        admin = await self.admin_repo.get_by_id(row.admin_id)
        await self.sessions.revoke_session_id(row.id)
        if admin is None or not admin.is_active:
            await self.session.commit()
            raise InvalidTokenError("Invalid or expired refresh token")

        tokens = await self._issue_tokens(admin, meta)
        await self.activity.log_activity(
            admin_id=admin.id,
            action=ActivityAction.TOKEN_REFRESH,
            resource="session",
            resource_id=row.id,
            meta=meta,
        )
        await self.session.commit()

        logger.info(f"Tokens refreshed for admin {admin.id}")
        return LoginResult(
            admin=await self.admin_repo.get_with_roles(admin.id),
            tokens=tokens,
            message="Token refreshed",
        )

    async def logout(
        self,
        admin_id: uuid.UUID,
        session_id: uuid.UUID | None,
        refresh_token: str | None = None,
        meta: RequestMeta | None = None,
    ) -> bool:
        """Revoke the caller's current session and, if given, a refresh token."""
        if session_id is not None:
            await self.sessions.revoke_session_id(session_id)
        if refresh_token:
            await self.sessions.revoke_refresh_token(refresh_token)

        await self.activity.log_activity(
            admin_id=admin_id,
            action=ActivityAction.LOGOUT,
            resource="session",
            resource_id=session_id,
            meta=meta,
        )
        await self.session.commit()
        logger.info(f"Admin logged out: {admin_id}")
        return True

    async def logout_all(self, admin_id: uuid.UUID, meta: RequestMeta | None = None) -> int:
        """Revoke every session and refresh token of the caller. Returns rows revoked."""
        count = await self.sessions.revoke_all_sessions(admin_id)
        await self.activity.log_activity(
            admin_id=admin_id,
            action=ActivityAction.LOGOUT_ALL,
            resource="session",
            details={"revoked": count},
            meta=meta,
        )
        await self.session.commit()
        return count

    async def verify_token(self, token: str) -> AdminUser | None:
        """Admin behind a valid session token, or None."""
        claims = await self.sessions.validate(token)
        if claims is None:
            return None
        admin = await self.admin_repo.get_with_roles(claims.admin_id)
        if admin is None or not admin.is_active:
            return None
        return admin

    async def change_password(
        self,
        admin_id: uuid.UUID,
        current_password: str,
        new_password: str,
        current_session_id: uuid.UUID | None = None,
        meta: RequestMeta | None = None,
    ) -> int:
        """
        Change the caller's password.

        Every other session and all refresh tokens are revoked; the session
        making the change stays valid.

        Raises:
            NotFoundError: If the admin no longer exists
            InvalidCredentialsError: If current_password is wrong
            WeakPasswordError: If new_password fails the strength rules

        Returns:
            Number of sessions revoked
        """
        admin = await self.admin_repo.get_by_id(admin_id)
        if admin is None:
            raise NotFoundError("Admin")

        if not verify_password(current_password, admin.password_hash):
            raise InvalidCredentialsError("Current password is incorrect")

        is_valid, error_message = validate_password_strength(new_password)
        if not is_valid:
            raise WeakPasswordError(error_message or "Password is too weak")

        if verify_password(new_password, admin.password_hash):
            raise WeakPasswordError("New password must be different from the current password")

        admin.password_hash = hash_password(new_password)
        revoked = await self.sessions.revoke_all_sessions(admin.id, except_session_id=current_session_id)
        await self.activity.log_activity(
            admin_id=admin.id,
            action=ActivityAction.PASSWORD_CHANGE,
            resource="admin",
            resource_id=admin.id,
            details={"revoked_sessions": revoked},
            meta=meta,
        )
        await self.session.commit()

        logger.info(f"Password changed for admin {admin.id}; revoked {revoked} session(s)")
        return revoked

    async def request_otp(
        self,
        email: str,
        otp_type: OTPType,
        meta: RequestMeta | None = None,
    ) -> OTPRequestResult:
        """
        Send (or resend) an OTP to an admin.

        Raises:
            RateLimitExceededError: Hourly cap reached or cooldown running
        """
        admin = await self.admin_repo.get_by_email(email)
        if admin is None:
            return OTPRequestResult(
                success=False,
                message="Admin account not found with this email address.",
            )
        if not admin.is_active:
            return OTPRequestResult(
                success=False,
                message="Your account has been deactivated. Please contact support.",
            )

        _, status = await self.otp.request_otp(admin.email, otp_type, admin_id=admin.id, meta=meta)
        return OTPRequestResult(
            success=True,
            message="OTP sent successfully to your email address.",
            expires_in=settings.otp_expire_minutes * 60,
            status=status,
        )

    async def otp_status(self, email: str, otp_type: OTPType) -> OTPStatus:
        return await self.otp.get_otp_status(email, otp_type)
