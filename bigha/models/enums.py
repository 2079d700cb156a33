"""
Enums shared by the database models, services and GraphQL schema.

Names and values are identical so that values round-trip unchanged
through SQLAlchemy ``Enum`` columns and graphene enums.
"""

import enum


# =============================================================================
# Properties
# =============================================================================


class ApprovalStatus(str, enum.Enum):
    """Moderation state of a listing. Independent from PublicationStatus."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    FLAGGED = "FLAGGED"
    REJECTED = "REJECTED"


class PublicationStatus(str, enum.Enum):
    """Whether the owner has published the listing."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


class PropertyType(str, enum.Enum):
    AGRICULTURAL = "AGRICULTURAL"
    COMMERCIAL = "COMMERCIAL"
    RESIDENTIAL = "RESIDENTIAL"
    INDUSTRIAL = "INDUSTRIAL"
    VILLA = "VILLA"
    APARTMENT = "APARTMENT"
    PLOT = "PLOT"
    FARMHOUSE = "FARMHOUSE"
    WAREHOUSE = "WAREHOUSE"
    OFFICE = "OFFICE"
    OTHER = "OTHER"


class AreaUnit(str, enum.Enum):
    SQFT = "SQFT"
    SQM = "SQM"
    ACRE = "ACRE"
    HECTARE = "HECTARE"
    BIGHA = "BIGHA"
    KATHA = "KATHA"
    MARLA = "MARLA"
    KANAL = "KANAL"
    GUNTA = "GUNTA"
    CENT = "CENT"


class CreatedByType(str, enum.Enum):
    """Who created a listing: a platform user (owner/agent) or an admin."""

    USER = "USER"
    ADMIN = "ADMIN"


class ListingAs(str, enum.Enum):
    OWNER = "OWNER"
    AGENT = "AGENT"


class ApprovalAction(str, enum.Enum):
    """Kind of moderation transition recorded in property_approval_history."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"
    FLAG = "FLAG"
    REOPEN = "REOPEN"


class InquiryStatus(str, enum.Enum):
    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    CLOSED = "CLOSED"


class PlatformUserRole(str, enum.Enum):
    OWNER = "OWNER"
    AGENT = "AGENT"
    USER = "USER"


# =============================================================================
# Site SEO
# =============================================================================


class SeoPageStatus(str, enum.Enum):
    """
    Lifecycle of a site page's SEO entry.

    DRAFT entries were never published or were unpublished. INACTIVE entries
    were published once and are switched off.
    """

    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


# =============================================================================
# Admin Authentication
# =============================================================================


class SessionType(str, enum.Enum):
    """Rows in admin_sessions are either access sessions or refresh tokens."""

    ACCESS = "ACCESS"
    REFRESH = "REFRESH"


class OTPType(str, enum.Enum):
    LOGIN = "LOGIN"
    PASSWORD_RESET = "PASSWORD_RESET"
    EMAIL_VERIFICATION = "EMAIL_VERIFICATION"


class ActivityAction(str, enum.Enum):
    """Actions recorded in admin_activity_logs."""

    # Authentication
    LOGIN = "LOGIN"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"
    LOGOUT_ALL = "LOGOUT_ALL"
    TOKEN_REFRESH = "TOKEN_REFRESH"
    PASSWORD_CHANGE = "PASSWORD_CHANGE"
    OTP_CREATED = "OTP_CREATED"
    OTP_VERIFIED = "OTP_VERIFIED"

    # RBAC
    ADMIN_CREATE = "ADMIN_CREATE"
    ADMIN_UPDATE = "ADMIN_UPDATE"
    ADMIN_DISABLE = "ADMIN_DISABLE"
    ADMIN_ENABLE = "ADMIN_ENABLE"
    ROLE_CREATE = "ROLE_CREATE"
    ROLE_UPDATE = "ROLE_UPDATE"
    ROLE_DELETE = "ROLE_DELETE"
    ROLE_ASSIGN = "ROLE_ASSIGN"
    ROLE_REVOKE = "ROLE_REVOKE"
    ROLE_REPLACE = "ROLE_REPLACE"
    PERMISSION_CREATE = "PERMISSION_CREATE"

    # Properties
    PROPERTY_CREATE = "PROPERTY_CREATE"
    PROPERTY_UPDATE = "PROPERTY_UPDATE"
    PROPERTY_DELETE = "PROPERTY_DELETE"
    PROPERTY_ARCHIVE = "PROPERTY_ARCHIVE"
    PROPERTY_RESTORE = "PROPERTY_RESTORE"
    PROPERTY_PUBLISH = "PROPERTY_PUBLISH"
    PROPERTY_UNPUBLISH = "PROPERTY_UNPUBLISH"
    PROPERTY_FEATURE = "PROPERTY_FEATURE"
    PROPERTY_APPROVE = "PROPERTY_APPROVE"
    PROPERTY_REJECT = "PROPERTY_REJECT"
    PROPERTY_FLAG = "PROPERTY_FLAG"
    PROPERTY_REOPEN = "PROPERTY_REOPEN"
    PROPERTY_VERIFY = "PROPERTY_VERIFY"
    PROPERTY_SEO_UPDATE = "PROPERTY_SEO_UPDATE"

    # Site SEO
    SEO_SETTINGS_UPDATE = "SEO_SETTINGS_UPDATE"
    SEO_PAGE_CREATE = "SEO_PAGE_CREATE"
    SEO_PAGE_UPDATE = "SEO_PAGE_UPDATE"
    SEO_PAGE_DELETE = "SEO_PAGE_DELETE"
    SEO_PAGE_STATUS = "SEO_PAGE_STATUS"
    SCHEMA_SETTING_CREATE = "SCHEMA_SETTING_CREATE"
    SCHEMA_SETTING_UPDATE = "SCHEMA_SETTING_UPDATE"
    SCHEMA_SETTING_DELETE = "SCHEMA_SETTING_DELETE"


# =============================================================================
# Dashboard
# =============================================================================


class ChangeType(str, enum.Enum):
    INCREASE = "INCREASE"
    DECREASE = "DECREASE"
    NEUTRAL = "NEUTRAL"


class ActivityType(str, enum.Enum):
    """Event kinds merged into the dashboard activity feed."""

    PROPERTY_CREATED = "PROPERTY_CREATED"
    INQUIRY_RECEIVED = "INQUIRY_RECEIVED"
