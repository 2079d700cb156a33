"""
Database models for the 2bigha admin backend.

This module exports all SQLAlchemy models and the declarative base.
Import models from this module to ensure proper initialization.
"""

from bigha.models.activity_log import AdminActivityLog
from bigha.models.admin import (
    AdminPermission,
    AdminRole,
    AdminRolePermission,
    AdminUser,
    AdminUserRole,
)
from bigha.models.approval import PropertyApprovalHistory
from bigha.models.base import Base
from bigha.models.enums import (
    ActivityAction,
    ActivityType,
    ApprovalAction,
    ApprovalStatus,
    AreaUnit,
    ChangeType,
    CreatedByType,
    InquiryStatus,
    ListingAs,
    OTPType,
    PlatformUserRole,
    PropertyType,
    PublicationStatus,
    SeoPageStatus,
    SessionType,
)
from bigha.models.inquiry import PropertyInquiry
from bigha.models.mixins import TimestampMixin, UTCDateTime
from bigha.models.otp import AdminOTP
from bigha.models.platform_user import PlatformUser
from bigha.models.property import (
    Property,
    PropertyImage,
    PropertyPriceHistory,
    PropertySeo,
    PropertyVerification,
    PropertyView,
)
from bigha.models.session import AdminSession
from bigha.models.site_seo import GlobalSeoSettings, SchemaSetting, SeoPage

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "UTCDateTime",
    # Admin and RBAC
    "AdminUser",
    "AdminRole",
    "AdminPermission",
    "AdminRolePermission",
    "AdminUserRole",
    "AdminSession",
    "AdminOTP",
    "AdminActivityLog",
    # Properties
    "Property",
    "PropertySeo",
    "PropertyVerification",
    "PropertyImage",
    "PropertyPriceHistory",
    "PropertyView",
    "PropertyApprovalHistory",
    "PropertyInquiry",
    "PlatformUser",
    # Site SEO
    "GlobalSeoSettings",
    "SeoPage",
    "SchemaSetting",
    # Enums
    "ActivityAction",
    "ActivityType",
    "ApprovalAction",
    "ApprovalStatus",
    "AreaUnit",
    "ChangeType",
    "CreatedByType",
    "InquiryStatus",
    "ListingAs",
    "OTPType",
    "PlatformUserRole",
    "PropertyType",
    "PublicationStatus",
    "SeoPageStatus",
    "SessionType",
]
