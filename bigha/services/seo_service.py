"""
SEO metadata for properties.

This module provides:
- Slug generation and de-duplication
- Default SEO fields derived from type and location
- SeoService: upsert, regenerate and read a property's SEO record
"""

import logging
import re
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from bigha.exceptions import ConflictError, InvalidInputError, NotFoundError
from bigha.models.enums import ActivityAction, AreaUnit, PropertyType
from bigha.models.property import Property, PropertySeo
from bigha.repositories.property_repository import PropertyRepository, PropertySeoRepository
from bigha.schemas.property import PropertySeoUpdate
from bigha.services.activity_service import ActivityService, RequestMeta

logger = logging.getLogger(__name__)

BRAND = "2bigha"
SEO_TITLE_MAX_LENGTH = 60
SEO_DESCRIPTION_MAX_LENGTH = 160


def generate_slug(text: str) -> str:
    """
    Turn free text into a URL slug.

    Example:
        >>> generate_slug("Agricultural Land in Karnal, Haryana!")
        'agricultural-land-in-karnal-haryana'
    """
    slug = text.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


def _type_label(property_type: PropertyType | str) -> str:
    value = property_type.value if isinstance(property_type, PropertyType) else str(property_type)
    return value.replace("_", " ").title()


@dataclass(frozen=True)
class SeoFields:
    title: str
    slug_base: str
    seo_title: str
    seo_description: str
    seo_keywords: str


def generate_seo_fields(
    property_type: PropertyType | str,
    city: str | None = None,
    district: str | None = None,
    state: str | None = None,
    area_unit: AreaUnit | None = None,
) -> SeoFields:
    """
    Default SEO fields for a listing.

    Example:
        >>> generate_seo_fields(PropertyType.AGRICULTURAL, "Karnal", "Karnal").seo_title
        'Agricultural in Karnal, Karnal | 2bigha'
    """
    label = _type_label(property_type)
    title = label
    if city:
        title = f"{title} in {city}"
    if district:
        title = f"{title}, {district}"

    location = ", ".join(part for part in (city, district, state) if part) or "India"
    description = f"{label} property for sale in {location}. Contact the owner directly on {BRAND}."

    keywords = [label.lower(), city, district, state, area_unit.value.lower() if area_unit else None]
    keywords = [keyword.lower() for keyword in keywords if keyword]
    keywords.extend(["property for sale", BRAND])

    return SeoFields(
        title=title,
        slug_base=generate_slug(title) or "property",
        seo_title=_truncate(f"{title} | {BRAND}", SEO_TITLE_MAX_LENGTH),
        seo_description=_truncate(description, SEO_DESCRIPTION_MAX_LENGTH),
        seo_keywords=", ".join(dict.fromkeys(keywords)),
    )


class SeoService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.seo_repo = PropertySeoRepository(session)
        self.property_repo = PropertyRepository(session)
        self.activity = ActivityService(session)

    async def generate_unique_slug(self, base: str, exclude_property_id: uuid.UUID | None = None) -> str:
        """Return ``base`` or the first free ``base-1``, ``base-2``, ..."""
        base = generate_slug(base) or "property"
        slug = base
        counter = 1
        while await self.seo_repo.slug_exists(slug, exclude_property_id):
            slug = f"{base}-{counter}"
            counter += 1
        return slug

    async def build_for(self, prop: Property) -> PropertySeo:
        """Build (but do not add) a default SEO record for a new property."""
        fields = generate_seo_fields(prop.property_type, prop.city, prop.district, prop.state, prop.area_unit)
        return PropertySeo(
            slug=await self.generate_unique_slug(fields.slug_base, prop.id),
            seo_title=fields.seo_title,
            seo_description=fields.seo_description,
            seo_keywords=fields.seo_keywords,
        )

    async def _get_property(self, property_id: uuid.UUID) -> Property:
        prop = await self.property_repo.get_detail(property_id)
        if prop is None:
            raise NotFoundError("Property")
        return prop

    async def update_seo(
        self,
        property_id: uuid.UUID,
        data: PropertySeoUpdate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> Property:
        """
        Upsert SEO overrides for a property.

        Raises:
            NotFoundError: If the property does not exist
            ConflictError: If the slug is used by another property
        """
        prop = await self._get_property(property_id)
        changes = data.model_dump(exclude_unset=True)

        if "slug" in changes:
            slug = generate_slug(changes["slug"] or "")
            if not slug:
                raise InvalidInputError("Slug must contain at least one letter or digit")
            if await self.seo_repo.slug_exists(slug, exclude_property_id=prop.id):
                raise ConflictError(f"Slug '{slug}' is already used by another property")
            changes["slug"] = slug

        seo = prop.seo
        if seo is None:
            seo = await self.build_for(prop)
            seo.property_id = prop.id
            self.session.add(seo)

        for field, value in changes.items():
            if field == "slug" and value is None:
                continue
            setattr(seo, field, value)

        await self.session.flush()
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.PROPERTY_SEO_UPDATE,
            resource="property",
            resource_id=prop.id,
            details={"fields": sorted(changes)},
            meta=meta,
        )
        await self.session.commit()

        logger.info(f"SEO updated for property {prop.id}")
        return await self._get_property(prop.id)

    async def regenerate_seo(
        self,
        property_id: uuid.UUID,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> Property:
        """Replace SEO fields with freshly generated defaults (slug included)."""
        prop = await self._get_property(property_id)
        fresh = await self.build_for(prop)

        if prop.seo is None:
            fresh.property_id = prop.id
            self.session.add(fresh)
        else:
            prop.seo.slug = fresh.slug
            prop.seo.seo_title = fresh.seo_title
            prop.seo.seo_description = fresh.seo_description
            prop.seo.seo_keywords = fresh.seo_keywords

        await self.session.flush()
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.PROPERTY_SEO_UPDATE,
            resource="property",
            resource_id=prop.id,
            details={"regenerated": True},
            meta=meta,
        )
        await self.session.commit()
        return await self._get_property(prop.id)
