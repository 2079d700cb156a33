"""
Activity service for the admin activity trail.

This module provides:
- Request metadata carried into every log entry
- Activity log creation (staged, committed by the caller)
- Filtered activity log retrieval
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any

from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession

from bigha.core.config import settings
from bigha.models.activity_log import AdminActivityLog
from bigha.models.enums import ActivityAction
from bigha.repositories.activity_log_repository import ActivityLogRepository
from bigha.schemas.common import Page

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequestMeta:
    """Client information attached to activity and approval history rows."""

    ip_address: str | None = None
    user_agent: str | None = None
    request_id: str | None = None


class ActivityService:
    """
    Service class for admin activity logging.

    Entries are only added to the session. The service that performs the
    change commits them together with the change, so a rolled-back mutation
    never leaves an activity row behind and a committed one always does.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.log_repo = ActivityLogRepository(session)

    async def log_activity(
        self,
        admin_id: uuid.UUID | None,
        action: ActivityAction,
        resource: str,
        resource_id: uuid.UUID | None = None,
        details: dict[str, Any] | None = None,
        meta: RequestMeta | None = None,
        success: bool = True,
        error_message: str | None = None,
    ) -> AdminActivityLog | None:
        """
        Stage an activity log entry.

        Args:
            admin_id: Admin who acted (None for anonymous attempts)
            action: What happened
            resource: Kind of entity affected ("property", "role", ...)
            resource_id: Id of the affected entity
            details: Extra JSON context (UUIDs, enums and datetimes are converted)
            meta: Client ip, user agent and request id
            success: False for failed attempts
            error_message: Why the attempt failed

        Returns:
            The staged entry, or None when activity logging is disabled

        Example:
            await activity_service.log_activity(
                admin_id=admin.id,
                action=ActivityAction.ROLE_ASSIGN,
                resource="admin",
                resource_id=target.id,
                details={"role_ids": role_ids},
                meta=meta,
            )
        """
        if not settings.activity_log_enabled:
            return None

        meta = meta or RequestMeta()
        entry = AdminActivityLog(
            admin_id=admin_id,
            action=action,
            resource=resource,
            resource_id=resource_id,
            details=jsonable_encoder(details) if details else None,
            ip_address=meta.ip_address,
            user_agent=meta.user_agent,
            request_id=meta.request_id,
            success=success,
            error_message=error_message,
        )
        entry = await self.log_repo.create(entry)

        logger.debug(
            f"Activity staged: admin={admin_id}, action={action.value}, "
            f"resource={resource}:{resource_id}, success={success}"
        )
        return entry

    async def list_logs(
        self,
        admin_id: uuid.UUID | None = None,
        action: ActivityAction | None = None,
        resource: str | None = None,
        resource_id: uuid.UUID | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> Page[AdminActivityLog]:
        items, total = await self.log_repo.search(
            admin_id=admin_id,
            action=action,
            resource=resource,
            resource_id=resource_id,
            offset=offset,
            limit=limit,
        )
        return Page(items=items, total=total, limit=limit, offset=offset)
