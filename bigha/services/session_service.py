"""
Session service for admin access sessions and refresh tokens.

This module provides:
- Session creation (persisted row + signed session token)
- Session validation against the persisted row
- Revocation of single sessions, refresh tokens, or everything an admin holds
- Refresh token issuance and validation (stored hashed)

Every credential is backed by an ``admin_sessions`` row. A token whose
signature is intact but whose row was revoked or has expired is invalid.

This service only flushes. The calling service commits, so session rows
become durable together with the login or logout that produced them.
"""

import logging
import uuid
from collections.abc import Callable
from datetime import UTC, datetime

from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from bigha.core.security import (
    TOKEN_TYPE_ACCESS,
    access_token_expiry,
    create_session_token,
    decode_token,
    decode_token_unverified,
    generate_refresh_token,
    hash_refresh_token,
    refresh_token_expiry,
)
from bigha.models.admin import AdminUser
from bigha.models.enums import SessionType
from bigha.models.mixins import utcnow
from bigha.models.session import AdminSession
from bigha.repositories.role_repository import RoleAssignmentRepository
from bigha.repositories.session_repository import AdminSessionRepository
from bigha.schemas.auth import SessionClaims
from bigha.services.activity_service import RequestMeta

logger = logging.getLogger(__name__)


class SessionService:
    """
    Service class for session bookkeeping.

    Usage:
        session_service = SessionService(db)
        token, row = await session_service.create_session(admin, meta)
        claims = await session_service.validate(token)   # SessionClaims | None
    """

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock
        self.session_repo = AdminSessionRepository(session)
        self.assignment_repo = RoleAssignmentRepository(session)

    # -------------------------------------------------------------------------
    # Access sessions
    # -------------------------------------------------------------------------

    async def primary_role(self, admin_id: uuid.UUID) -> str | None:
        """First active role slug (alphabetical), used for the ``role`` claim."""
        slugs = await self.assignment_repo.get_role_slugs(admin_id, self.clock())
        return slugs[0] if slugs else None

    async def create_session(
        self,
        admin: AdminUser,
        meta: RequestMeta | None = None,
    ) -> tuple[str, AdminSession]:
        """
        Create an access session for ``admin``.

        Persists an ACCESS row with its own expiry and returns a signed token
        whose ``sid`` claim is the row id.

        Returns:
            Tuple of (session token, persisted session row)
        """
        meta = meta or RequestMeta()
        now = self.clock()
        expires_at = access_token_expiry(now)

        row = AdminSession(
            admin_id=admin.id,
            session_type=SessionType.ACCESS,
            ip_address=meta.ip_address,
            user_agent=meta.user_agent,
            is_active=True,
            expires_at=expires_at,
            last_used_at=now,
        )
        row = await self.session_repo.add(row)

        token = create_session_token(
            admin_id=admin.id,
            email=admin.email,
            role=await self.primary_role(admin.id),
            session_id=row.id,
            expires_at=expires_at,
            issued_at=now,
        )
        logger.debug(f"Session created: admin={admin.id}, session={row.id}")
        return token, row

    async def validate(self, token: str) -> SessionClaims | None:
        """
        Validate a session token.

        Never raises for bad input: a wrong signature, malformed payload,
        expired token, wrong token type, or a session row that is missing,
        revoked, expired or owned by someone else all yield None.
        """
        try:
            payload = decode_token(token)
        except JWTError:
            return None

        if payload.get("type") != TOKEN_TYPE_ACCESS:
            return None

        try:
            admin_id = uuid.UUID(str(payload["sub"]))
            session_id = uuid.UUID(str(payload["sid"]))
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
        except (KeyError, TypeError, ValueError):
            logger.debug("Session token with malformed claims rejected")
            return None

        row = await self.session_repo.get_live_session(session_id, admin_id, self.clock())
        if row is None:
            return None

        return SessionClaims(
            admin_id=admin_id,
            email=payload.get("email", ""),
            role=payload.get("role"),
            session_id=session_id,
            issued_at=issued_at,
            expires_at=expires_at,
        )

    async def revoke(self, token: str) -> bool:
        """
        Revoke the session behind ``token``.

        Works on expired tokens too. An unparseable token is a no-op.

        Returns:
            True if an active session was revoked
        """
        claims = decode_token_unverified(token)
        if not claims or "sid" not in claims:
            return False
        try:
            session_id = uuid.UUID(str(claims["sid"]))
        except ValueError:
            return False

        revoked = await self.session_repo.revoke(session_id)
        if revoked:
            logger.debug(f"Session revoked: {session_id}")
        return revoked

    async def revoke_session_id(self, session_id: uuid.UUID) -> bool:
        return await self.session_repo.revoke(session_id)

    # -------------------------------------------------------------------------
    # Refresh tokens
    # -------------------------------------------------------------------------

    async def create_refresh_token(
        self,
        admin_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> tuple[str, AdminSession]:
        """
        Issue a refresh token.

        Only the SHA-256 digest is stored; the plaintext is returned once.

        Returns:
            Tuple of (plaintext refresh token, persisted REFRESH row)
        """
        meta = meta or RequestMeta()
        now = self.clock()
        token = generate_refresh_token()

        row = AdminSession(
            admin_id=admin_id,
            session_type=SessionType.REFRESH,
            token_hash=hash_refresh_token(token),
            ip_address=meta.ip_address,
            user_agent=meta.user_agent,
            is_active=True,
            expires_at=refresh_token_expiry(now),
        )
        row = await self.session_repo.add(row)
        return token, row

    async def validate_refresh_token(self, token: str) -> AdminSession | None:
        """
        Validate a refresh token and touch ``last_used_at``.

        Returns:
            The REFRESH row, or None if the token is unknown, revoked or expired
        """
        if not token:
            return None
        row = await self.session_repo.get_by_token_hash(hash_refresh_token(token))
        now = self.clock()
        if row is None or not row.is_usable(now):
            return None

        row.last_used_at = now
        await self.session.flush()
        return row

    async def revoke_refresh_token(self, token: str) -> bool:
        if not token:
            return False
        row = await self.session_repo.get_by_token_hash(hash_refresh_token(token))
        if row is None:
            return False
        return await self.session_repo.revoke(row.id)

    async def revoke_all_sessions(
        self,
        admin_id: uuid.UUID,
        except_session_id: uuid.UUID | None = None,
    ) -> int:
        """Revoke every access session and refresh token of an admin."""
        count = await self.session_repo.revoke_all_for_admin(admin_id, except_session_id)
        logger.info(f"Revoked {count} session(s) for admin {admin_id}")
        return count
