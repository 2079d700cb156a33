"""
Unit tests for site SEO rules: URL normalization, page status changes,
home page upsert and schema block switching.

All tests are fully mocked - no database or external dependencies.
"""

import uuid
from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import pytest
from pydantic import ValidationError

from bigha.exceptions import AlreadyExistsError, InvalidInputError, NotFoundError
from bigha.models.enums import ActivityAction, SeoPageStatus
from bigha.schemas.site_seo import HomePageSeoInput, SeoPageCreate, SeoPageUpdate, normalize_url_path
from bigha.services.site_seo_service import SiteSeoService

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)
ADMIN_ID = uuid.uuid4()


def _page(status: SeoPageStatus = SeoPageStatus.DRAFT, published_at: datetime | None = None, url: str = "/about"):
    return SimpleNamespace(id=uuid.uuid4(), url=url, status=status, published_at=published_at, updated_by=None)


@pytest.fixture
def mock_page_repo():
    repo = AsyncMock()
    repo.update.side_effect = lambda page: page
    repo.add.side_effect = lambda page: page
    repo.url_exists.return_value = False
    return repo


@pytest.fixture
def mock_schema_repo():
    repo = AsyncMock()
    repo.update.side_effect = lambda setting: setting
    return repo


@pytest.fixture
def mock_activity():
    return AsyncMock()


@pytest.fixture
def seo_service(mock_page_repo, mock_schema_repo, mock_activity):
    with (
        patch("bigha.services.site_seo_service.GlobalSeoSettingsRepository", return_value=AsyncMock()),
        patch("bigha.services.site_seo_service.SeoPageRepository", return_value=mock_page_repo),
        patch("bigha.services.site_seo_service.SchemaSettingRepository", return_value=mock_schema_repo),
        patch("bigha.services.site_seo_service.ActivityService", return_value=mock_activity),
    ):
        return SiteSeoService(AsyncMock(), clock=lambda: NOW)


# ============================================================================
# URL paths
# ============================================================================
class TestUrlPaths:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("/", "/"),
            ("///", "/"),
            ("about", "/about"),
            (" /about/ ", "/about"),
            ("/guides/city/", "/guides/city"),
        ],
    )
    def test_normalized(self, raw, expected):
        assert normalize_url_path(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", "/about us", "https://2bigha.com/about"])
    def test_rejected(self, raw):
        with pytest.raises(ValueError):
            normalize_url_path(raw)

    def test_update_cannot_clear_required_fields(self):
        with pytest.raises(ValidationError):
            SeoPageUpdate.model_validate({"title": None})

        assert SeoPageUpdate.model_validate({}).model_dump(exclude_unset=True) == {}


# ============================================================================
# Page status
# ============================================================================
class TestPageStatus:
    @pytest.mark.asyncio
    async def test_publish_stamps_first_publication_only(self, seo_service, mock_page_repo, mock_activity):
        page = _page()
        mock_page_repo.get_by_id.return_value = page

        await seo_service.publish_page(page.id, ADMIN_ID)
        assert page.status == SeoPageStatus.ACTIVE
        assert page.published_at == NOW

        earlier = datetime(2024, 1, 1, tzinfo=UTC)
        republished = _page(SeoPageStatus.DRAFT, published_at=earlier)
        mock_page_repo.get_by_id.return_value = republished
        await seo_service.publish_page(republished.id, ADMIN_ID)
        assert republished.published_at == earlier

        details = mock_activity.log_activity.await_args.kwargs["details"]
        assert mock_activity.log_activity.await_args.kwargs["action"] == ActivityAction.SEO_PAGE_STATUS
        assert details == {"from": SeoPageStatus.DRAFT, "to": SeoPageStatus.ACTIVE}

    @pytest.mark.asyncio
    async def test_enable_needs_prior_publication(self, seo_service, mock_page_repo, mock_activity):
        mock_page_repo.get_by_id.return_value = _page()

        with pytest.raises(InvalidInputError):
            await seo_service.enable_page(uuid.uuid4(), ADMIN_ID)
        mock_activity.log_activity.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_disable_keeps_publication_date(self, seo_service, mock_page_repo):
        page = _page(SeoPageStatus.ACTIVE, published_at=NOW)
        mock_page_repo.get_by_id.return_value = page

        await seo_service.disable_page(page.id, ADMIN_ID)

        assert page.status == SeoPageStatus.INACTIVE
        assert page.published_at == NOW
        assert page.updated_by == ADMIN_ID

    @pytest.mark.asyncio
    async def test_missing_page(self, seo_service, mock_page_repo):
        mock_page_repo.get_by_id.return_value = None

        with pytest.raises(NotFoundError):
            await seo_service.unpublish_page(uuid.uuid4(), ADMIN_ID)


# ============================================================================
# Create and home page
# ============================================================================
class TestCreateAndHomePage:
    @pytest.mark.asyncio
    async def test_create_active_page_is_published_now(self, seo_service, mock_page_repo):
        data = SeoPageCreate(page="FAQ", url="faq", title="FAQ", status=SeoPageStatus.ACTIVE)

        page = await seo_service.create_page(data, ADMIN_ID)

        assert page.url == "/faq"
        assert page.schema_type == "WebPage"
        assert page.published_at == NOW
        assert page.created_by == ADMIN_ID

    @pytest.mark.asyncio
    async def test_create_rejects_taken_url(self, seo_service, mock_page_repo):
        mock_page_repo.url_exists.return_value = True

        with pytest.raises(AlreadyExistsError):
            await seo_service.create_page(SeoPageCreate(page="FAQ", url="/faq", title="FAQ"), ADMIN_ID)
        mock_page_repo.add.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_home_page_creates_root_entry(self, seo_service, mock_page_repo):
        mock_page_repo.get_home.return_value = None

        page = await seo_service.set_home_page(HomePageSeoInput(title="2bigha"), ADMIN_ID)

        assert (page.url, page.page, page.title) == ("/", "Home Page", "2bigha")
        assert page.status == SeoPageStatus.DRAFT

    @pytest.mark.asyncio
    async def test_set_home_page_without_title(self, seo_service, mock_page_repo):
        mock_page_repo.get_home.return_value = None

        with pytest.raises(InvalidInputError):
            await seo_service.set_home_page(HomePageSeoInput(description="Land marketplace"), ADMIN_ID)

    @pytest.mark.asyncio
    async def test_update_home_page_requires_entry(self, seo_service, mock_page_repo):
        mock_page_repo.get_home.return_value = None

        with pytest.raises(NotFoundError):
            await seo_service.update_home_page(HomePageSeoInput(title="2bigha"), ADMIN_ID)


# ============================================================================
# Schema blocks
# ============================================================================
class TestSchemaBlocks:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "current,requested,expected",
        [
            (True, None, False),
            (False, None, True),
            (True, True, True),
            (False, False, False),
        ],
    )
    async def test_set_active(self, seo_service, mock_schema_repo, current, requested, expected):
        setting = SimpleNamespace(id=uuid.uuid4(), type="organization", is_active=current)
        mock_schema_repo.get_by_id.return_value = setting

        result = await seo_service.set_schema_setting_active(setting.id, requested, ADMIN_ID)

        assert result.is_active is expected
