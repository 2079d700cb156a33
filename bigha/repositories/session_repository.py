"""
AdminSession repository for session and refresh-token bookkeeping.

This module provides database operations for the AdminSession model:
live-session lookups, refresh-token hash lookups, and revocation.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bigha.models.enums import SessionType
from bigha.models.session import AdminSession
from bigha.repositories.base import BaseRepository


class AdminSessionRepository(BaseRepository[AdminSession]):
    """
    Repository for AdminSession model operations.

    Extends BaseRepository with:
    - Live access-session lookup (active and unexpired)
    - Refresh token lookup by hash
    - Single and bulk revocation
    """

    def __init__(self, session: AsyncSession):
        super().__init__(AdminSession, session)

    async def get_live_session(
        self,
        session_id: uuid.UUID,
        admin_id: uuid.UUID,
        now: datetime,
    ) -> AdminSession | None:
        """
        Get an ACCESS session that is active, unexpired and owned by ``admin_id``.

        Returns:
            AdminSession or None when the session is unknown, revoked or expired
        """
        query = select(AdminSession).where(
            AdminSession.id == session_id,
            AdminSession.admin_id == admin_id,
            AdminSession.session_type == SessionType.ACCESS,
            AdminSession.is_active.is_(True),
            AdminSession.expires_at > now,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_token_hash(self, token_hash: str) -> AdminSession | None:
        """
        Get a REFRESH row by the SHA-256 digest of the presented token.

        Example:
            row = await session_repo.get_by_token_hash(hash_refresh_token(token))
        """
        query = select(AdminSession).where(
            AdminSession.token_hash == token_hash,
            AdminSession.session_type == SessionType.REFRESH,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def revoke(self, session_id: uuid.UUID) -> bool:
        """
        Deactivate one row.

        Returns:
            True if an active row was revoked, False if it was already inactive or unknown
        """
        result = await self.session.execute(
            update(AdminSession)
            .where(AdminSession.id == session_id, AdminSession.is_active.is_(True))
            .values(is_active=False, revoked_at=datetime.now(UTC))
        )
        return (result.rowcount or 0) > 0

    async def revoke_all_for_admin(
        self,
        admin_id: uuid.UUID,
        except_session_id: uuid.UUID | None = None,
    ) -> int:
        """
        Deactivate every active session and refresh token of an admin.

        Args:
            admin_id: Admin whose credentials are revoked
            except_session_id: Optional row to keep (the caller's own session)

        Returns:
            Number of rows revoked
        """
        query = (
            update(AdminSession)
            .where(AdminSession.admin_id == admin_id, AdminSession.is_active.is_(True))
            .values(is_active=False, revoked_at=datetime.now(UTC))
        )
        if except_session_id is not None:
            query = query.where(AdminSession.id != except_session_id)
        result = await self.session.execute(query)
        return result.rowcount or 0
