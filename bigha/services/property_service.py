"""
Property service for admin listing management.

This module provides:
- Property creation with default SEO metadata
- Partial updates with price history
- Archive/restore, hard delete
- Publication and featured flags
- Verification (independent from approval)
- Image management
"""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from bigha.exceptions import InvalidInputError, NotFoundError
from bigha.models.approval import PropertyApprovalHistory
from bigha.models.enums import (
    ActivityAction,
    ApprovalStatus,
    CreatedByType,
    PublicationStatus,
)
from bigha.models.mixins import utcnow
from bigha.models.property import (
    Property,
    PropertyImage,
    PropertyPriceHistory,
    PropertyVerification,
)
from bigha.repositories.approval_repository import ApprovalHistoryRepository
from bigha.repositories.property_repository import (
    PropertyImageRepository,
    PropertyRepository,
)
from bigha.schemas.common import Page
from bigha.schemas.property import (
    PropertyCreate,
    PropertyFilter,
    PropertyImageCreate,
    PropertyUpdate,
)
from bigha.services.activity_service import ActivityService, RequestMeta
from bigha.services.seo_service import SeoService

logger = logging.getLogger(__name__)

_CENTS = Decimal("0.01")


def compute_price_per_unit(price: Decimal | None, area: Decimal | None) -> Decimal | None:
    """
    Price divided by area, rounded to paise.

    Example:
        >>> compute_price_per_unit(Decimal("500000"), Decimal("2"))
        Decimal('250000.00')
    """
    if price is None or area is None or area <= 0:
        return None
    return (Decimal(price) / Decimal(area)).quantize(_CENTS, rounding=ROUND_HALF_UP)


class PropertyService:
    """
    Service class for property CRUD.

    Approval-state transitions live in ApprovalService; this service never
    touches ``approval_status`` after creation.
    """

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock
        self.property_repo = PropertyRepository(session)
        self.image_repo = PropertyImageRepository(session)
        self.history_repo = ApprovalHistoryRepository(session)
        self.seo = SeoService(session)
        self.activity = ActivityService(session)

    async def get_property(self, property_id: uuid.UUID) -> Property:
        """
        Get a property with seo, verification, images and price history.

        Raises:
            NotFoundError: If the property does not exist
        """
        prop = await self.property_repo.get_detail(property_id)
        if prop is None:
            raise NotFoundError("Property")
        return prop

    async def approval_history(
        self,
        property_id: uuid.UUID,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PropertyApprovalHistory]:
        return await self.history_repo.list_for_property(property_id, offset=offset, limit=limit)

    async def list_properties(
        self,
        filters: PropertyFilter | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> Page[Property]:
        items, total = await self.property_repo.search(filters, offset=offset, limit=limit)
        return Page(items=items, total=total, limit=limit, offset=offset)

    async def create_property(
        self,
        data: PropertyCreate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> Property:
        """
        Create a listing on behalf of the admin panel.

        The listing starts in approval state PENDING. Publishing on creation
        stamps ``published_at``; approval is still required before it counts
        as an active listing.
        """
        now = self.clock()
        fields = data.model_dump(exclude_none=True, exclude={"status", "is_featured"})
        prop = Property(
            **fields,
            status=data.status,
            is_featured=data.is_featured,
            approval_status=ApprovalStatus.PENDING,
            created_by_type=CreatedByType.ADMIN,
            created_by_admin_id=actor_id,
            price_per_unit=compute_price_per_unit(data.price, data.area),
            published_at=now if data.status == PublicationStatus.PUBLISHED else None,
        )
        prop = await self.property_repo.add(prop)

        seo = await self.seo.build_for(prop)
        seo.property_id = prop.id
        self.session.add(seo)
        await self.session.flush()

        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.PROPERTY_CREATE,
            resource="property",
            resource_id=prop.id,
            details={"title": prop.title, "type": prop.property_type, "status": prop.status},
            meta=meta,
        )
        await self.session.commit()

        logger.info(f"Property created: {prop.id} ({prop.title}) by admin {actor_id}")
        return await self.get_property(prop.id)

    async def update_property(
        self,
        property_id: uuid.UUID,
        data: PropertyUpdate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> Property:
        """
        Partially update a listing.

        A changed price appends a price-history row in the same transaction
        and recomputes ``price_per_unit``.
        """
        prop = await self.get_property(property_id)
        changes = data.model_dump(exclude_unset=True, exclude={"price_change_reason"})

        for field in ("title", "property_type"):
            if field in changes and changes[field] is None:
                raise InvalidInputError(f"{field} cannot be null")

        old_price = prop.price
        for field, value in changes.items():
            setattr(prop, field, value)

        if "price" in changes and changes["price"] != old_price:
            self.session.add(
                PropertyPriceHistory(
                    property_id=prop.id,
                    old_price=old_price,
                    new_price=changes["price"],
                    change_reason=data.price_change_reason,
                    changed_by=actor_id,
                    created_at=self.clock(),
                )
            )
        if "price" in changes or "area" in changes:
            prop.price_per_unit = compute_price_per_unit(prop.price, prop.area)

        await self.session.flush()
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.PROPERTY_UPDATE,
            resource="property",
            resource_id=prop.id,
            details={"fields": sorted(changes)},
            meta=meta,
        )
        await self.session.commit()
        return await self.get_property(prop.id)

    async def _set_flag(
        self,
        property_id: uuid.UUID,
        actor_id: uuid.UUID,
        action: ActivityAction,
        meta: RequestMeta | None,
        **values,
    ) -> Property:
        prop = await self.get_property(property_id)
        for field, value in values.items():
            setattr(prop, field, value)

        await self.session.flush()
        await self.activity.log_activity(
            admin_id=actor_id,
            action=action,
            resource="property",
            resource_id=prop.id,
            details=values,
            meta=meta,
        )
        await self.session.commit()
        return await self.get_property(prop.id)

    async def archive_property(
        self, property_id: uuid.UUID, actor_id: uuid.UUID, meta: RequestMeta | None = None
    ) -> Property:
        return await self._set_flag(
            property_id, actor_id, ActivityAction.PROPERTY_ARCHIVE, meta, is_active=False
        )

    async def restore_property(
        self, property_id: uuid.UUID, actor_id: uuid.UUID, meta: RequestMeta | None = None
    ) -> Property:
        return await self._set_flag(
            property_id, actor_id, ActivityAction.PROPERTY_RESTORE, meta, is_active=True
        )

    async def publish_property(
        self, property_id: uuid.UUID, actor_id: uuid.UUID, meta: RequestMeta | None = None
    ) -> Property:
        prop = await self.get_property(property_id)
        published_at = prop.published_at or self.clock()
        return await self._set_flag(
            property_id,
            actor_id,
            ActivityAction.PROPERTY_PUBLISH,
            meta,
            status=PublicationStatus.PUBLISHED,
            published_at=published_at,
        )

    async def unpublish_property(
        self, property_id: uuid.UUID, actor_id: uuid.UUID, meta: RequestMeta | None = None
    ) -> Property:
        return await self._set_flag(
            property_id, actor_id, ActivityAction.PROPERTY_UNPUBLISH, meta, status=PublicationStatus.DRAFT
        )

    async def set_featured(
        self,
        property_id: uuid.UUID,
        featured: bool,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> Property:
        return await self._set_flag(
            property_id, actor_id, ActivityAction.PROPERTY_FEATURE, meta, is_featured=featured
        )

    async def delete_property(
        self,
        property_id: uuid.UUID,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> bool:
        """
        Hard delete a listing.

        SEO, verification, images, price history, views, inquiries and
        approval history are removed by database cascades.
        """
        prop = await self.property_repo.get_by_id(property_id)
        if prop is None:
            raise NotFoundError("Property")

        title = prop.title
        await self.property_repo.delete(prop)
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.PROPERTY_DELETE,
            resource="property",
            resource_id=property_id,
            details={"title": title},
            meta=meta,
        )
        await self.session.commit()

        logger.info(f"Property deleted: {property_id} by admin {actor_id}")
        return True

    async def verify_property(
        self,
        property_id: uuid.UUID,
        is_verified: bool,
        actor_id: uuid.UUID,
        message: str | None = None,
        notes: str | None = None,
        meta: RequestMeta | None = None,
    ) -> Property:
        """
        Record a verification decision.

        Upserts the one-to-one verification row and mirrors the flag onto
        the property. Approval status is left untouched.
        """
        prop = await self.get_property(property_id)
        now = self.clock()

        verification = prop.verification
        if verification is None:
            verification = PropertyVerification(property_id=prop.id)
            self.session.add(verification)

        verification.is_verified = is_verified
        verification.message = message
        verification.notes = notes
        verification.verified_by = actor_id
        verification.verified_at = now
        prop.is_verified = is_verified

        await self.session.flush()
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.PROPERTY_VERIFY,
            resource="property",
            resource_id=prop.id,
            details={"is_verified": is_verified},
            meta=meta,
        )
        await self.session.commit()
        return await self.get_property(prop.id)

    async def add_image(
        self,
        property_id: uuid.UUID,
        data: PropertyImageCreate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> Property:
        """Append an image. A new main image demotes the previous one."""
        prop = await self.get_property(property_id)

        if data.is_main:
            await self.image_repo.clear_main(prop.id)

        sort_order = data.sort_order
        if "sort_order" not in data.model_fields_set:
            sort_order = await self.image_repo.next_sort_order(prop.id)

        image = await self.image_repo.add(
            PropertyImage(
                property_id=prop.id,
                image_url=data.image_url,
                image_type=data.image_type,
                caption=data.caption,
                alt_text=data.alt_text,
                sort_order=sort_order,
                is_main=data.is_main,
                created_at=self.clock(),
            )
        )
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.PROPERTY_UPDATE,
            resource="property",
            resource_id=prop.id,
            details={"image_added": image.id, "is_main": image.is_main},
            meta=meta,
        )
        await self.session.commit()
        return await self.get_property(prop.id)

    async def remove_image(
        self,
        property_id: uuid.UUID,
        image_id: uuid.UUID,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> Property:
        image = await self.image_repo.get_for_property(property_id, image_id)
        if image is None:
            raise NotFoundError("Property image")

        await self.image_repo.delete(image)
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.PROPERTY_UPDATE,
            resource="property",
            resource_id=property_id,
            details={"image_removed": image_id},
            meta=meta,
        )
        await self.session.commit()
        return await self.get_property(property_id)
