"""
Pydantic schemas for service-layer validation.

This package provides the models used for:
- Validating GraphQL inputs before they reach services
- Typed results returned by services (dashboard, auth, RBAC statistics)
"""

from bigha.schemas.auth import LoginInput, LoginResult, OTPRequestResult, OTPStatus, SessionClaims, TokenPair
from bigha.schemas.common import Page, PaginationParams
from bigha.schemas.dashboard import DashboardFilters, DateRange
from bigha.schemas.property import (
    ModerationInput,
    PropertyCreate,
    PropertyFilter,
    PropertyImageCreate,
    PropertySeoUpdate,
    PropertyUpdate,
)
from bigha.schemas.rbac import AdminCreate, AdminUpdate, PermissionCreate, RBACStats, RoleCreate, RoleUpdate
from bigha.schemas.site_seo import (
    GlobalSeoSettingsUpdate,
    HomePageSeoInput,
    SchemaSettingCreate,
    SchemaSettingUpdate,
    SeoPageCreate,
    SeoPageUpdate,
)

__all__ = [
    # Auth
    "LoginInput",
    "LoginResult",
    "OTPRequestResult",
    "OTPStatus",
    "SessionClaims",
    "TokenPair",
    # Common
    "Page",
    "PaginationParams",
    # Dashboard
    "DashboardFilters",
    "DateRange",
    # Property
    "ModerationInput",
    "PropertyCreate",
    "PropertyFilter",
    "PropertyImageCreate",
    "PropertySeoUpdate",
    "PropertyUpdate",
    # RBAC
    "AdminCreate",
    "AdminUpdate",
    "PermissionCreate",
    "RBACStats",
    "RoleCreate",
    "RoleUpdate",
    # Site SEO
    "GlobalSeoSettingsUpdate",
    "HomePageSeoInput",
    "SchemaSettingCreate",
    "SchemaSettingUpdate",
    "SeoPageCreate",
    "SeoPageUpdate",
]
