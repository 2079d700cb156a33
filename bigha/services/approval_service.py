"""
Approval workflow for property listings.

Every transition updates the property, appends exactly one immutable
history row and writes one activity row, all in one transaction. The
listing owner is notified after the commit; a failed notification never
undoes the transition.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from bigha.exceptions import ConflictError, InvalidInputError, NotFoundError
from bigha.models.approval import PropertyApprovalHistory
from bigha.models.enums import ActivityAction, ApprovalAction, ApprovalStatus
from bigha.models.mixins import utcnow
from bigha.models.property import Property
from bigha.repositories.approval_repository import ApprovalHistoryRepository
from bigha.repositories.property_repository import PropertyRepository
from bigha.schemas.common import Page
from bigha.schemas.property import ModerationInput
from bigha.services.activity_service import ActivityService, RequestMeta
from bigha.services.notification_service import NotificationService, NotificationTemplate

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[ApprovalStatus, frozenset[ApprovalStatus]] = {
    ApprovalStatus.PENDING: frozenset(
        {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED, ApprovalStatus.FLAGGED}
    ),
    ApprovalStatus.APPROVED: frozenset(
        {ApprovalStatus.FLAGGED, ApprovalStatus.REJECTED, ApprovalStatus.PENDING}
    ),
    ApprovalStatus.REJECTED: frozenset({ApprovalStatus.PENDING, ApprovalStatus.APPROVED}),
    ApprovalStatus.FLAGGED: frozenset(
        {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED, ApprovalStatus.PENDING}
    ),
}


@dataclass(frozen=True)
class _Transition:
    action: ApprovalAction
    target: ApprovalStatus
    activity: ActivityAction
    template: NotificationTemplate | None


_APPROVE = _Transition(
    ApprovalAction.APPROVE,
    ApprovalStatus.APPROVED,
    ActivityAction.PROPERTY_APPROVE,
    NotificationTemplate.PROPERTY_APPROVED,
)
_REJECT = _Transition(
    ApprovalAction.REJECT,
    ApprovalStatus.REJECTED,
    ActivityAction.PROPERTY_REJECT,
    NotificationTemplate.PROPERTY_REJECTED,
)
_FLAG = _Transition(
    ApprovalAction.FLAG,
    ApprovalStatus.FLAGGED,
    ActivityAction.PROPERTY_FLAG,
    NotificationTemplate.PROPERTY_FLAGGED,
)
_REOPEN = _Transition(
    ApprovalAction.REOPEN,
    ApprovalStatus.PENDING,
    ActivityAction.PROPERTY_REOPEN,
    None,
)


def can_transition(current: ApprovalStatus, target: ApprovalStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


class ApprovalService:
    """
    Service class for the approval state machine.

    Usage:
        approvals = ApprovalService(session, notifications)
        prop = await approvals.approve(property_id, ModerationInput(message="Looks good"), actor_id)
    """

    def __init__(
        self,
        session: AsyncSession,
        notifications: NotificationService | None = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.clock = clock
        self.property_repo = PropertyRepository(session)
        self.history_repo = ApprovalHistoryRepository(session)
        self.activity = ActivityService(session)
        self.notifications = notifications or NotificationService()

    async def _transition(
        self,
        property_id: uuid.UUID,
        transition: _Transition,
        data: ModerationInput,
        actor_id: uuid.UUID,
        meta: RequestMeta | None,
    ) -> Property:
        """
        Apply one approval transition.

        Raises:
            NotFoundError: If the property does not exist
            ConflictError: If the property is already in the target state or
                the transition is not allowed from its current state
        """
        prop = await self.property_repo.get_detail(property_id)
        if prop is None:
            raise NotFoundError("Property")

        previous = prop.approval_status
        target = transition.target
        if previous == target:
            raise ConflictError(
                f"Property is already {target.value}",
                details={"current_status": previous.value},
            )
        if not can_transition(previous, target):
            raise ConflictError(
                f"Cannot move property from {previous.value} to {target.value}",
                details={"current_status": previous.value, "target_status": target.value},
            )

        now = self.clock()
        prop.approval_status = target
        prop.last_reviewed_by = actor_id
        prop.last_reviewed_at = now
        if data.message is not None:
            prop.approval_message = data.message
        if data.admin_notes is not None:
            prop.admin_notes = data.admin_notes

        if target == ApprovalStatus.APPROVED:
            prop.approved_by = actor_id
            prop.approved_at = now
            prop.rejection_reason = None
            prop.flag_reason = None
        elif target == ApprovalStatus.REJECTED:
            prop.rejected_by = actor_id
            prop.rejected_at = now
            prop.rejection_reason = data.reason
        elif target == ApprovalStatus.FLAGGED:
            prop.flagged_by = actor_id
            prop.flagged_at = now
            prop.flag_reason = data.reason

        await self.history_repo.append(
            PropertyApprovalHistory(
                property_id=prop.id,
                admin_id=actor_id,
                action=transition.action,
                previous_status=previous,
                new_status=target,
                message=data.message,
                admin_notes=data.admin_notes,
                reason=data.reason,
                ip_address=meta.ip_address if meta else None,
                user_agent=meta.user_agent if meta else None,
                created_at=now,
            )
        )
        await self.activity.log_activity(
            admin_id=actor_id,
            action=transition.activity,
            resource="property",
            resource_id=prop.id,
            details={
                "previous_status": previous,
                "new_status": target,
                "reason": data.reason,
            },
            meta=meta,
        )
        await self.session.commit()

        logger.info(
            f"Property {prop.id} moved {previous.value} -> {target.value} by admin {actor_id}"
        )

        if transition.template is not None:
            sent = await self.notifications.notify(
                transition.template,
                prop.owner_email,
                title=prop.title,
                name=prop.owner_name,
                message=data.message,
                reason=data.reason,
            )
            if not sent and prop.owner_email:
                logger.warning(f"Owner of property {prop.id} was not notified about {target.value}")

        return await self.property_repo.get_detail(prop.id)

    async def approve(
        self,
        property_id: uuid.UUID,
        data: ModerationInput,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> Property:
        return await self._transition(property_id, _APPROVE, data, actor_id, meta)

    async def reject(
        self,
        property_id: uuid.UUID,
        data: ModerationInput,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> Property:
        """
        Reject a listing.

        Raises:
            InvalidInputError: If no reason is given
        """
        if not data.reason or not data.reason.strip():
            raise InvalidInputError("A rejection reason is required")
        data = data.model_copy(update={"reason": data.reason.strip()})
        return await self._transition(property_id, _REJECT, data, actor_id, meta)

    async def flag(
        self,
        property_id: uuid.UUID,
        data: ModerationInput,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> Property:
        return await self._transition(property_id, _FLAG, data, actor_id, meta)

    async def reopen(
        self,
        property_id: uuid.UUID,
        data: ModerationInput,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> Property:
        """Send a listing back to the PENDING queue."""
        return await self._transition(property_id, _REOPEN, data, actor_id, meta)

    async def history(
        self,
        property_id: uuid.UUID,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PropertyApprovalHistory]:
        """History of a property, newest first."""
        if not await self.property_repo.exists(property_id):
            raise NotFoundError("Property")
        return await self.history_repo.list_for_property(property_id, offset=offset, limit=limit)

    async def pending(self, limit: int = 20, offset: int = 0) -> Page[Property]:
        """The moderation queue, oldest first."""
        items, total = await self.property_repo.by_approval_status(
            ApprovalStatus.PENDING, offset=offset, limit=limit, oldest_first=True
        )
        return Page(items=items, total=total, limit=limit, offset=offset)

    async def by_status(
        self,
        status: ApprovalStatus,
        limit: int = 20,
        offset: int = 0,
    ) -> Page[Property]:
        items, total = await self.property_repo.by_approval_status(
            status, offset=offset, limit=limit, oldest_first=False
        )
        return Page(items=items, total=total, limit=limit, offset=offset)
