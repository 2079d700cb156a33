"""
Pytest configuration and fixtures for the 2bigha admin API tests.

This module provides:
- Per-test SQLite database (aiosqlite) with the full schema
- Async HTTP client bound to the FastAPI app
- Admin, role and property factories
- Authentication header fixtures backed by real sessions
"""

# Set environment variables BEFORE importing anything from bigha
import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256-signing"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["ARGON2_TIME_COST"] = "1"
os.environ["ARGON2_MEMORY_COST"] = "8192"
os.environ["ARGON2_PARALLELISM"] = "1"

from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from bigha.core.database import (
    create_database_engine,
    create_session_factory,
    get_db,
    get_session_factory,
)
from bigha.core.security import hash_password
from bigha.main import app
from bigha.models import (
    AdminPermission,
    AdminRole,
    AdminRolePermission,
    AdminUser,
    AdminUserRole,
    Base,
    Property,
)
from bigha.models.enums import ApprovalStatus, PropertyType
from bigha.services.notification_service import NotificationService, RenderedMessage
from bigha.services.session_service import SessionService

TEST_PASSWORD = "Str0ng!Passw0rd"


# ============================================================================
# Database Fixtures
# ============================================================================
@pytest_asyncio.fixture
async def test_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Create a throwaway database for one test.

    A file-backed SQLite database is used so that the request sessions
    opened by the app and the test's own session see the same data.
    """
    engine = create_database_engine(f"sqlite+aiosqlite:///{tmp_path / 'bigha_test.db'}")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(test_engine)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Session used by the test itself for seeding and assertions."""
    async with session_factory() as session:
        yield session


# ============================================================================
# FastAPI Client Fixtures
# ============================================================================
@pytest_asyncio.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Async client for the app, with database dependencies pointed at the test database."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def graphql(async_client: AsyncClient):
    """
    Post one GraphQL operation and return the decoded body.

    Usage:
        body = await graphql("query { me { email } }", headers=auth)
    """

    async def _execute(query: str, variables: dict | None = None, headers: dict | None = None) -> dict:
        payload = {"query": query}
        if variables is not None:
            payload["variables"] = variables
        response = await async_client.post("/graphql", json=payload, headers=headers or {})
        assert response.status_code == 200, response.text
        return response.json()

    return _execute


# ============================================================================
# Factories
# ============================================================================
async def _get_or_create_permission(session: AsyncSession, name: str) -> AdminPermission:
    result = await session.execute(select(AdminPermission).where(AdminPermission.name == name))
    permission = result.scalar_one_or_none()
    if permission is None:
        resource, action = name.split(":", 1)
        permission = AdminPermission(resource=resource, action=action, name=name)
        session.add(permission)
        await session.flush()
    return permission


@pytest.fixture
def make_role(db_session: AsyncSession) -> Callable[..., Awaitable[AdminRole]]:
    """Create a role granting the named permissions."""

    async def _make(
        name: str,
        permissions: Iterable[str] = (),
        *,
        is_active: bool = True,
        is_system_role: bool = False,
    ) -> AdminRole:
        role = AdminRole(
            name=name,
            slug=name.lower().replace(" ", "-"),
            is_active=is_active,
            is_system_role=is_system_role,
        )
        db_session.add(role)
        await db_session.flush()
        for permission_name in permissions:
            permission = await _get_or_create_permission(db_session, permission_name)
            db_session.add(AdminRolePermission(role_id=role.id, permission_id=permission.id))
        await db_session.commit()
        return role

    return _make


@pytest.fixture
def make_admin(db_session: AsyncSession, make_role) -> Callable[..., Awaitable[AdminUser]]:
    """
    Create an admin, optionally holding one role with ``permissions``.

    Usage:
        admin = await make_admin("ops@2bigha.com", permissions=["properties:view"])
    """

    async def _make(
        email: str = "ops@2bigha.com",
        *,
        password: str = TEST_PASSWORD,
        permissions: Iterable[str] = (),
        is_active: bool = True,
        role_active: bool = True,
        expires_at: datetime | None = None,
        two_factor_enabled: bool = False,
    ) -> AdminUser:
        admin = AdminUser(
            email=email,
            password_hash=hash_password(password),
            first_name="Test",
            last_name="Admin",
            is_active=is_active,
            two_factor_enabled=two_factor_enabled,
        )
        db_session.add(admin)
        await db_session.flush()

        permissions = list(permissions)
        if permissions:
            role = await make_role(f"Role {admin.id.hex[:8]}", permissions, is_active=role_active)
            db_session.add(AdminUserRole(admin_id=admin.id, role_id=role.id, expires_at=expires_at))
        await db_session.commit()
        return admin

    return _make


@pytest.fixture
def make_property(db_session: AsyncSession) -> Callable[..., Awaitable[Property]]:
    async def _make(
        title: str = "Agricultural land near Karnal",
        *,
        approval_status: ApprovalStatus = ApprovalStatus.PENDING,
        **fields,
    ) -> Property:
        prop = Property(
            title=title,
            property_type=fields.pop("property_type", PropertyType.AGRICULTURAL),
            approval_status=approval_status,
            city=fields.pop("city", "Karnal"),
            state=fields.pop("state", "Haryana"),
            **fields,
        )
        db_session.add(prop)
        await db_session.commit()
        return prop

    return _make


@pytest.fixture
def auth_headers(db_session: AsyncSession) -> Callable[[AdminUser], Awaitable[dict[str, str]]]:
    """Open a real session for ``admin`` and return its Authorization header."""

    async def _headers(admin: AdminUser) -> dict[str, str]:
        token, _ = await SessionService(db_session).create_session(admin)
        await db_session.commit()
        return {"Authorization": f"Bearer {token}"}

    return _headers


# ============================================================================
# Common Admins
# ============================================================================
ALL_PERMISSIONS = [
    "admin:view",
    "admin:create",
    "admin:edit",
    "admin:delete",
    "admin:roles",
    "properties:view",
    "properties:create",
    "properties:edit",
    "properties:delete",
    "properties:approve",
    "properties:reject",
    "properties:feature",
    "properties:verify",
    "properties:seo_manage",
    "analytics:view",
]


@pytest_asyncio.fixture
async def super_admin(make_admin) -> AdminUser:
    return await make_admin("root@2bigha.com", permissions=ALL_PERMISSIONS)


@pytest_asyncio.fixture
async def super_admin_headers(super_admin, auth_headers) -> dict[str, str]:
    return await auth_headers(super_admin)


# ============================================================================
# Notifications
# ============================================================================
class RecordingSender:
    """Sender that keeps every message instead of delivering it."""

    def __init__(self, outbox: list[RenderedMessage]):
        self.outbox = outbox

    async def send(self, message: RenderedMessage) -> None:
        self.outbox.append(message)


@pytest.fixture
def outbox(monkeypatch) -> list[RenderedMessage]:
    """Messages the app sends during the test, oldest first."""
    messages: list[RenderedMessage] = []
    monkeypatch.setattr(
        app.state,
        "notifications",
        NotificationService(RecordingSender(messages)),
        raising=False,
    )
    return messages
