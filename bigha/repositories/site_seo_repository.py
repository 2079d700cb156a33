"""
Site SEO repositories.

This module provides database operations for:
- GlobalSeoSettingsRepository: the single settings row
- SeoPageRepository: URL lookups, home page lookup, status listing
- SchemaSettingRepository: listing by type and activity
"""

import uuid

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from bigha.models.enums import SeoPageStatus
from bigha.models.site_seo import HOME_PAGE_URLS, GlobalSeoSettings, SchemaSetting, SeoPage
from bigha.repositories.base import BaseRepository


class GlobalSeoSettingsRepository(BaseRepository[GlobalSeoSettings]):
    def __init__(self, session: AsyncSession):
        super().__init__(GlobalSeoSettings, session)

    async def get_current(self) -> GlobalSeoSettings | None:
        """The oldest settings row. Writers never create a second one."""
        result = await self.session.execute(
            select(GlobalSeoSettings).order_by(GlobalSeoSettings.created_at).limit(1)
        )
        return result.scalar_one_or_none()


class SeoPageRepository(BaseRepository[SeoPage]):
    def __init__(self, session: AsyncSession):
        super().__init__(SeoPage, session)

    async def list_pages(self, status: SeoPageStatus | None = None) -> list[SeoPage]:
        query = select(SeoPage).order_by(SeoPage.created_at, SeoPage.url)
        if status is not None:
            query = query.where(SeoPage.status == status)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_by_url(self, url: str) -> SeoPage | None:
        result = await self.session.execute(select(SeoPage).where(SeoPage.url == url))
        return result.scalar_one_or_none()

    async def get_home(self) -> SeoPage | None:
        """Entry for "/" if present, otherwise the one for "/home"."""
        result = await self.session.execute(
            select(SeoPage)
            .where(SeoPage.url.in_(HOME_PAGE_URLS))
            .order_by(case((SeoPage.url == "/", 0), else_=1))
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def url_exists(self, url: str, exclude_id: uuid.UUID | None = None) -> bool:
        query = select(func.count()).select_from(SeoPage).where(SeoPage.url == url)
        if exclude_id is not None:
            query = query.where(SeoPage.id != exclude_id)
        return (await self.session.execute(query)).scalar_one() > 0


class SchemaSettingRepository(BaseRepository[SchemaSetting]):
    def __init__(self, session: AsyncSession):
        super().__init__(SchemaSetting, session)

    async def list_settings(self, type: str | None = None, active_only: bool = False) -> list[SchemaSetting]:
        query = select(SchemaSetting).order_by(SchemaSetting.created_at)
        if type is not None:
            query = query.where(SchemaSetting.type == type)
        if active_only:
            query = query.where(SchemaSetting.is_active.is_(True))
        result = await self.session.execute(query)
        return list(result.scalars().all())
