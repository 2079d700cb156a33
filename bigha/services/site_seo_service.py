"""
Site-wide SEO administration.

This module provides SiteSeoService, which manages:
- Global SEO settings (one row, created on first save)
- SEO entries for static pages, their publication and on/off switch
- The home page entry ("/" or "/home")
- schema.org markup blocks

Every write commits together with its activity log row.
"""

import logging
import uuid
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from bigha.exceptions import AlreadyExistsError, InvalidInputError, NotFoundError
from bigha.models.enums import ActivityAction, SeoPageStatus
from bigha.models.mixins import utcnow
from bigha.models.site_seo import GlobalSeoSettings, SchemaSetting, SeoPage
from bigha.repositories.site_seo_repository import (
    GlobalSeoSettingsRepository,
    SchemaSettingRepository,
    SeoPageRepository,
)
from bigha.schemas.site_seo import (
    GlobalSeoSettingsUpdate,
    HomePageSeoInput,
    SchemaSettingCreate,
    SchemaSettingUpdate,
    SeoPageCreate,
    SeoPageUpdate,
)
from bigha.services.activity_service import ActivityService, RequestMeta

logger = logging.getLogger(__name__)

HOME_PAGE_URL = "/"
HOME_PAGE_LABEL = "Home Page"
DEFAULT_SCHEMA_TYPE = "WebPage"


class SiteSeoService:
    """
    Service class for site-level SEO.

    Usage:
        seo = SiteSeoService(session)
        page = await seo.create_page(SeoPageCreate(page="About", url="/about", title="About 2bigha"), admin.id)
        await seo.publish_page(page.id, admin.id)
    """

    def __init__(self, session: AsyncSession, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock
        self.settings_repo = GlobalSeoSettingsRepository(session)
        self.page_repo = SeoPageRepository(session)
        self.schema_repo = SchemaSettingRepository(session)
        self.activity = ActivityService(session)

    # -------------------------------------------------------------------------
    # Global settings
    # -------------------------------------------------------------------------

    async def get_global_settings(self) -> GlobalSeoSettings | None:
        return await self.settings_repo.get_current()

    async def update_global_settings(
        self,
        data: GlobalSeoSettingsUpdate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> GlobalSeoSettings:
        """
        Update the global settings, creating them on first use.

        Raises:
            InvalidInputError: First save without a site title
        """
        changes = data.model_dump(exclude_unset=True)
        settings_row = await self.settings_repo.get_current()

        if settings_row is None:
            if not changes.get("site_title"):
                raise InvalidInputError("Site title is required when SEO settings are first saved")
            settings_row = await self.settings_repo.add(GlobalSeoSettings(updated_by=actor_id, **changes))
        else:
            for field, value in changes.items():
                setattr(settings_row, field, value)
            settings_row.updated_by = actor_id
            settings_row = await self.settings_repo.update(settings_row)

        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.SEO_SETTINGS_UPDATE,
            resource="seo_settings",
            resource_id=settings_row.id,
            details={"fields": sorted(changes)},
            meta=meta,
        )
        await self.session.commit()
        logger.info(f"Global SEO settings updated by {actor_id}")
        return settings_row

    # -------------------------------------------------------------------------
    # Pages
    # -------------------------------------------------------------------------

    async def list_pages(self, status: SeoPageStatus | None = None) -> list[SeoPage]:
        return await self.page_repo.list_pages(status)

    async def get_page(self, page_id: uuid.UUID) -> SeoPage:
        page = await self.page_repo.get_by_id(page_id)
        if page is None:
            raise NotFoundError("SEO page")
        return page

    async def get_page_by_url(self, url: str) -> SeoPage | None:
        return await self.page_repo.get_by_url(url)

    async def get_home_page(self) -> SeoPage | None:
        return await self.page_repo.get_home()

    async def _ensure_url_free(self, url: str, exclude_id: uuid.UUID | None = None) -> None:
        if await self.page_repo.url_exists(url, exclude_id):
            raise AlreadyExistsError("SEO page", "URL")

    async def create_page(
        self,
        data: SeoPageCreate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> SeoPage:
        """
        Create a page entry.

        Raises:
            AlreadyExistsError: Another entry uses the same URL
        """
        await self._ensure_url_free(data.url)

        fields = data.model_dump(exclude_none=True)
        fields.setdefault("schema_type", DEFAULT_SCHEMA_TYPE)
        page = SeoPage(created_by=actor_id, updated_by=actor_id, **fields)
        if page.status == SeoPageStatus.ACTIVE:
            page.published_at = self.clock()
        page = await self.page_repo.add(page)

        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.SEO_PAGE_CREATE,
            resource="seo_page",
            resource_id=page.id,
            details={"url": page.url, "status": page.status},
            meta=meta,
        )
        await self.session.commit()
        logger.info(f"SEO page created: {page.url} ({page.id})")
        return page

    async def update_page(
        self,
        page_id: uuid.UUID,
        data: SeoPageUpdate | HomePageSeoInput,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> SeoPage:
        """
        Apply the explicitly set fields of ``data``.

        Raises:
            NotFoundError: Unknown page
            AlreadyExistsError: The new URL belongs to another entry
        """
        page = await self.get_page(page_id)
        changes = data.model_dump(exclude_unset=True)
        if "url" in changes and changes["url"] != page.url:
            await self._ensure_url_free(changes["url"], exclude_id=page.id)

        for field, value in changes.items():
            setattr(page, field, value)
        page.updated_by = actor_id
        page = await self.page_repo.update(page)

        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.SEO_PAGE_UPDATE,
            resource="seo_page",
            resource_id=page.id,
            details={"fields": sorted(changes)},
            meta=meta,
        )
        await self.session.commit()
        return page

    async def delete_page(
        self,
        page_id: uuid.UUID,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> bool:
        page = await self.get_page(page_id)
        url = page.url
        await self.page_repo.delete(page)
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.SEO_PAGE_DELETE,
            resource="seo_page",
            resource_id=page_id,
            details={"url": url},
            meta=meta,
        )
        await self.session.commit()
        logger.info(f"SEO page deleted: {url} ({page_id})")
        return True

    async def _set_status(
        self,
        page: SeoPage,
        status: SeoPageStatus,
        actor_id: uuid.UUID,
        meta: RequestMeta | None,
    ) -> SeoPage:
        previous = page.status
        page.status = status
        if status == SeoPageStatus.ACTIVE and page.published_at is None:
            page.published_at = self.clock()
        page.updated_by = actor_id
        page = await self.page_repo.update(page)

        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.SEO_PAGE_STATUS,
            resource="seo_page",
            resource_id=page.id,
            details={"from": previous, "to": status},
            meta=meta,
        )
        await self.session.commit()
        return page

    async def publish_page(
        self,
        page_id: uuid.UUID,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> SeoPage:
        """Make the entry live. The first publication stamps ``published_at``."""
        return await self._set_status(await self.get_page(page_id), SeoPageStatus.ACTIVE, actor_id, meta)

    async def unpublish_page(
        self,
        page_id: uuid.UUID,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> SeoPage:
        """Take the entry back to DRAFT."""
        return await self._set_status(await self.get_page(page_id), SeoPageStatus.DRAFT, actor_id, meta)

    async def enable_page(
        self,
        page_id: uuid.UUID,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> SeoPage:
        """
        Switch a published entry back on.

        Raises:
            InvalidInputError: The entry was never published
        """
        page = await self.get_page(page_id)
        if page.published_at is None:
            raise InvalidInputError("Publish the SEO page before enabling it")
        return await self._set_status(page, SeoPageStatus.ACTIVE, actor_id, meta)

    async def disable_page(
        self,
        page_id: uuid.UUID,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> SeoPage:
        """Switch the entry off without losing its publication date."""
        return await self._set_status(await self.get_page(page_id), SeoPageStatus.INACTIVE, actor_id, meta)

    async def set_home_page(
        self,
        data: HomePageSeoInput,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> SeoPage:
        """
        Upsert the home page entry. A new entry is created at "/" as a draft.

        Raises:
            InvalidInputError: Creating the entry without a title
        """
        home = await self.page_repo.get_home()
        if home is not None:
            return await self.update_page(home.id, data, actor_id, meta=meta)

        if data.title is None:
            raise InvalidInputError("Title is required to create the home page SEO entry")
        fields = data.model_dump(exclude_none=True)
        return await self.create_page(
            SeoPageCreate(page=HOME_PAGE_LABEL, url=HOME_PAGE_URL, **fields),
            actor_id,
            meta=meta,
        )

    async def update_home_page(
        self,
        data: HomePageSeoInput,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> SeoPage:
        """
        Update the existing home page entry.

        Raises:
            NotFoundError: No home page entry exists yet
        """
        home = await self.page_repo.get_home()
        if home is None:
            raise NotFoundError("Home page SEO")
        return await self.update_page(home.id, data, actor_id, meta=meta)

    # -------------------------------------------------------------------------
    # Schema markup
    # -------------------------------------------------------------------------

    async def list_schema_settings(self, type: str | None = None, active_only: bool = False) -> list[SchemaSetting]:
        return await self.schema_repo.list_settings(type, active_only)

    async def get_schema_setting(self, setting_id: uuid.UUID) -> SchemaSetting:
        setting = await self.schema_repo.get_by_id(setting_id)
        if setting is None:
            raise NotFoundError("Schema setting")
        return setting

    async def create_schema_setting(
        self,
        data: SchemaSettingCreate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> SchemaSetting:
        setting = await self.schema_repo.add(SchemaSetting(**data.model_dump()))
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.SCHEMA_SETTING_CREATE,
            resource="schema_setting",
            resource_id=setting.id,
            details={"type": setting.type, "is_active": setting.is_active},
            meta=meta,
        )
        await self.session.commit()
        return setting

    async def update_schema_setting(
        self,
        setting_id: uuid.UUID,
        data: SchemaSettingUpdate,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> SchemaSetting:
        setting = await self.get_schema_setting(setting_id)
        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(setting, field, value)
        setting = await self.schema_repo.update(setting)

        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.SCHEMA_SETTING_UPDATE,
            resource="schema_setting",
            resource_id=setting.id,
            details={"fields": sorted(changes)},
            meta=meta,
        )
        await self.session.commit()
        return setting

    async def set_schema_setting_active(
        self,
        setting_id: uuid.UUID,
        active: bool | None,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> SchemaSetting:
        """Enable or disable a block; ``active=None`` flips the current state."""
        setting = await self.get_schema_setting(setting_id)
        target = (not setting.is_active) if active is None else active
        return await self.update_schema_setting(
            setting.id, SchemaSettingUpdate(is_active=target), actor_id, meta=meta
        )

    async def delete_schema_setting(
        self,
        setting_id: uuid.UUID,
        actor_id: uuid.UUID,
        meta: RequestMeta | None = None,
    ) -> bool:
        setting = await self.get_schema_setting(setting_id)
        schema_type = setting.type
        await self.schema_repo.delete(setting)
        await self.activity.log_activity(
            admin_id=actor_id,
            action=ActivityAction.SCHEMA_SETTING_DELETE,
            resource="schema_setting",
            resource_id=setting_id,
            details={"type": schema_type},
            meta=meta,
        )
        await self.session.commit()
        return True
