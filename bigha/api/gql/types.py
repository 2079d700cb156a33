"""
GraphQL output types and enums.

Object types read ORM instances and pydantic results attribute by
attribute. Nested fields are synchronous and only touch data the parent
resolver loaded eagerly; the one exception is Property.approvalHistory,
which is guarded and runs its own query.
"""

import graphene
from graphene.types.generic import GenericScalar

from bigha.models.enums import (
    ActivityAction,
    ActivityType,
    ApprovalAction,
    ApprovalStatus,
    AreaUnit,
    ChangeType,
    CreatedByType,
    ListingAs,
    OTPType,
    PropertyType,
    PublicationStatus,
    SeoPageStatus,
)
from bigha.models.mixins import utcnow

# =============================================================================
# Enums
# =============================================================================

ApprovalStatusEnum = graphene.Enum.from_enum(ApprovalStatus)
PublicationStatusEnum = graphene.Enum.from_enum(PublicationStatus)
PropertyTypeEnum = graphene.Enum.from_enum(PropertyType)
AreaUnitEnum = graphene.Enum.from_enum(AreaUnit)
CreatedByTypeEnum = graphene.Enum.from_enum(CreatedByType)
ListingAsEnum = graphene.Enum.from_enum(ListingAs)
ApprovalActionEnum = graphene.Enum.from_enum(ApprovalAction)
OTPTypeEnum = graphene.Enum.from_enum(OTPType)
ActivityActionEnum = graphene.Enum.from_enum(ActivityAction)
ChangeTypeEnum = graphene.Enum.from_enum(ChangeType)
ActivityTypeEnum = graphene.Enum.from_enum(ActivityType)
SeoPageStatusEnum = graphene.Enum.from_enum(SeoPageStatus)


class PageFields:
    total = graphene.Int(required=True)
    limit = graphene.Int(required=True)
    offset = graphene.Int(required=True)
    has_more = graphene.Boolean(required=True)


# =============================================================================
# RBAC
# =============================================================================


class Permission(graphene.ObjectType):
    id = graphene.UUID(required=True)
    resource = graphene.String(required=True)
    action = graphene.String(required=True)
    name = graphene.String(required=True)
    description = graphene.String()
    created_at = graphene.DateTime()


class PermissionGroup(graphene.ObjectType):
    resource = graphene.String(required=True)
    permissions = graphene.List(graphene.NonNull(Permission), required=True)


class Role(graphene.ObjectType):
    id = graphene.UUID(required=True)
    name = graphene.String(required=True)
    slug = graphene.String(required=True)
    description = graphene.String()
    color = graphene.String()
    is_system_role = graphene.Boolean(required=True)
    is_active = graphene.Boolean(required=True)
    user_count = graphene.Int(required=True)
    permissions = graphene.List(graphene.NonNull(Permission), required=True)
    created_at = graphene.DateTime()
    updated_at = graphene.DateTime()


class RolePage(PageFields, graphene.ObjectType):
    items = graphene.List(graphene.NonNull(Role), required=True)


class RoleAssignment(graphene.ObjectType):
    role = graphene.Field(Role, required=True)
    assigned_by = graphene.UUID()
    assigned_at = graphene.DateTime(required=True)
    expires_at = graphene.DateTime()
    is_expired = graphene.Boolean(required=True)

    @staticmethod
    def resolve_is_expired(assignment, info):
        return not assignment.is_current(utcnow())


class Admin(graphene.ObjectType):
    id = graphene.UUID(required=True)
    email = graphene.String(required=True)
    first_name = graphene.String(required=True)
    last_name = graphene.String(required=True)
    full_name = graphene.String(required=True)
    department = graphene.String()
    employee_id = graphene.String()
    phone = graphene.String()
    avatar = graphene.String()
    bio = graphene.String()
    is_active = graphene.Boolean(required=True)
    is_verified = graphene.Boolean(required=True)
    two_factor_enabled = graphene.Boolean(required=True)
    last_login_at = graphene.DateTime()
    created_at = graphene.DateTime()
    updated_at = graphene.DateTime()
    roles = graphene.List(
        graphene.NonNull(Role),
        required=True,
        description="Active, unexpired roles",
    )
    role_assignments = graphene.List(graphene.NonNull(RoleAssignment), required=True)
    permissions = graphene.List(
        graphene.NonNull(graphene.String),
        required=True,
        description="Effective permission names",
    )

    @staticmethod
    def resolve_roles(admin, info):
        return [assignment.role for assignment in admin.active_assignments(utcnow())]

    @staticmethod
    def resolve_permissions(admin, info):
        names = {
            permission.name
            for assignment in admin.active_assignments(utcnow())
            for permission in assignment.role.permissions
        }
        return sorted(names)


class AdminPage(PageFields, graphene.ObjectType):
    items = graphene.List(graphene.NonNull(Admin), required=True)


class RoleHolderCount(graphene.ObjectType):
    role_id = graphene.UUID(required=True)
    role_name = graphene.String(required=True)
    role_slug = graphene.String(required=True)
    admin_count = graphene.Int(required=True)


class RBACStats(graphene.ObjectType):
    total_admins = graphene.Int(required=True)
    active_admins = graphene.Int(required=True)
    total_roles = graphene.Int(required=True)
    total_permissions = graphene.Int(required=True)
    admins_by_role = graphene.List(graphene.NonNull(RoleHolderCount), required=True)


class ActivityLog(graphene.ObjectType):
    id = graphene.UUID(required=True)
    admin_id = graphene.UUID()
    action = graphene.Field(ActivityActionEnum, required=True)
    resource = graphene.String(required=True)
    resource_id = graphene.UUID()
    details = GenericScalar()
    ip_address = graphene.String()
    user_agent = graphene.String()
    request_id = graphene.String()
    success = graphene.Boolean(required=True)
    error_message = graphene.String()
    created_at = graphene.DateTime(required=True)


class ActivityLogPage(PageFields, graphene.ObjectType):
    items = graphene.List(graphene.NonNull(ActivityLog), required=True)


# =============================================================================
# Authentication
# =============================================================================


class AuthTokens(graphene.ObjectType):
    access_token = graphene.String(required=True)
    refresh_token = graphene.String(required=True)
    token_type = graphene.String(required=True)
    expires_in = graphene.Int(required=True)


class AuthPayload(graphene.ObjectType):
    admin = graphene.Field(Admin)
    tokens = graphene.Field(AuthTokens)
    requires_otp = graphene.Boolean(required=True)
    message = graphene.String()


class OTPStatus(graphene.ObjectType):
    can_resend = graphene.Boolean(required=True)
    next_resend_in = graphene.Int(required=True)
    attempts_remaining = graphene.Int(required=True)
    is_blocked = graphene.Boolean(required=True)
    block_expires_in = graphene.Int(required=True)


class OTPRequestResult(graphene.ObjectType):
    success = graphene.Boolean(required=True)
    message = graphene.String(required=True)
    expires_in = graphene.Int()
    status = graphene.Field(OTPStatus)


class TokenVerification(graphene.ObjectType):
    valid = graphene.Boolean(required=True)
    admin = graphene.Field(Admin)


class OperationResult(graphene.ObjectType):
    success = graphene.Boolean(required=True)
    message = graphene.String()
    count = graphene.Int()


# =============================================================================
# Properties
# =============================================================================


class PropertySeo(graphene.ObjectType):
    slug = graphene.String(required=True)
    seo_title = graphene.String()
    seo_description = graphene.String()
    seo_keywords = graphene.String()
    canonical_url = graphene.String()
    structured_data = GenericScalar()
    updated_at = graphene.DateTime()


class PropertyVerification(graphene.ObjectType):
    is_verified = graphene.Boolean(required=True)
    message = graphene.String()
    notes = graphene.String()
    verified_by = graphene.UUID()
    verified_at = graphene.DateTime()


class PropertyImage(graphene.ObjectType):
    id = graphene.UUID(required=True)
    image_url = graphene.String(required=True)
    image_type = graphene.String()
    caption = graphene.String()
    alt_text = graphene.String()
    sort_order = graphene.Int(required=True)
    is_main = graphene.Boolean(required=True)
    created_at = graphene.DateTime()


class PriceChange(graphene.ObjectType):
    id = graphene.UUID(required=True)
    old_price = graphene.Float()
    new_price = graphene.Float()
    change_reason = graphene.String()
    changed_by = graphene.UUID()
    created_at = graphene.DateTime(required=True)


class ApprovalHistoryEntry(graphene.ObjectType):
    id = graphene.UUID(required=True)
    property_id = graphene.UUID(required=True)
    admin_id = graphene.UUID()
    action = graphene.Field(ApprovalActionEnum, required=True)
    previous_status = graphene.Field(ApprovalStatusEnum, required=True)
    new_status = graphene.Field(ApprovalStatusEnum, required=True)
    message = graphene.String()
    admin_notes = graphene.String()
    reason = graphene.String()
    is_system_action = graphene.Boolean(required=True)
    created_at = graphene.DateTime(required=True)


class Property(graphene.ObjectType):
    id = graphene.UUID(required=True)
    title = graphene.String(required=True)
    description = graphene.String()
    property_type = graphene.Field(PropertyTypeEnum, required=True)
    status = graphene.Field(PublicationStatusEnum, required=True)
    price = graphene.Float()
    price_per_unit = graphene.Float()
    area = graphene.Float()
    area_unit = graphene.Field(AreaUnitEnum)
    khasra_number = graphene.String()
    murabba_number = graphene.String()
    khewat_number = graphene.String()
    address = graphene.String()
    city = graphene.String()
    district = graphene.String()
    state = graphene.String()
    country = graphene.String()
    pin_code = graphene.String()
    location = GenericScalar()
    created_by_type = graphene.Field(CreatedByTypeEnum, required=True)
    listing_as = graphene.Field(ListingAsEnum, required=True)
    owner_name = graphene.String()
    owner_phone = graphene.String()
    owner_whatsapp = graphene.String()
    owner_email = graphene.String()
    created_by_admin_id = graphene.UUID()
    created_by_user_id = graphene.UUID()
    is_featured = graphene.Boolean(required=True)
    is_verified = graphene.Boolean(required=True)
    is_active = graphene.Boolean(required=True)
    view_count = graphene.Int(required=True)
    inquiry_count = graphene.Int(required=True)
    published_at = graphene.DateTime()
    approval_status = graphene.Field(ApprovalStatusEnum, required=True)
    approval_message = graphene.String()
    approved_by = graphene.UUID()
    approved_at = graphene.DateTime()
    rejection_reason = graphene.String()
    rejected_by = graphene.UUID()
    rejected_at = graphene.DateTime()
    flag_reason = graphene.String()
    flagged_by = graphene.UUID()
    flagged_at = graphene.DateTime()
    admin_notes = graphene.String()
    last_reviewed_by = graphene.UUID()
    last_reviewed_at = graphene.DateTime()
    created_at = graphene.DateTime()
    updated_at = graphene.DateTime()
    seo = graphene.Field(PropertySeo)
    verification = graphene.Field(PropertyVerification)
    images = graphene.List(graphene.NonNull(PropertyImage), required=True)
    price_history = graphene.List(graphene.NonNull(PriceChange), required=True)
    approval_history = graphene.List(
        graphene.NonNull(ApprovalHistoryEntry),
        required=True,
        description="Approval transitions, newest first",
    )

    @staticmethod
    async def resolve_approval_history(prop, info):
        # Imported here: the resolver module imports these types.
        from bigha.api.gql.properties import load_approval_history

        return await load_approval_history(prop, info)


class PropertyPage(PageFields, graphene.ObjectType):
    items = graphene.List(graphene.NonNull(Property), required=True)


# =============================================================================
# Site SEO
# =============================================================================


class GlobalSeoSettings(graphene.ObjectType):
    id = graphene.UUID(required=True)
    site_title = graphene.String(required=True)
    meta_description = graphene.String()
    keywords = graphene.String()
    og_title = graphene.String()
    og_description = graphene.String()
    og_image = graphene.String()
    updated_by = graphene.UUID()
    created_at = graphene.DateTime()
    updated_at = graphene.DateTime()


class SeoPage(graphene.ObjectType):
    id = graphene.UUID(required=True)
    page = graphene.String(required=True)
    url = graphene.String(required=True)
    title = graphene.String(required=True)
    description = graphene.String()
    keywords = graphene.String()
    image = graphene.String()
    status = graphene.Field(SeoPageStatusEnum, required=True)
    schema_type = graphene.String(required=True)
    schema_description = graphene.String()
    is_home_page = graphene.Boolean(required=True)
    published_at = graphene.DateTime()
    created_by = graphene.UUID()
    updated_by = graphene.UUID()
    created_at = graphene.DateTime()
    updated_at = graphene.DateTime()


class SchemaSetting(graphene.ObjectType):
    id = graphene.UUID(required=True)
    type = graphene.String(required=True)
    data = GenericScalar(required=True)
    is_active = graphene.Boolean(required=True)
    created_at = graphene.DateTime()
    updated_at = graphene.DateTime()


# =============================================================================
# Dashboard
# =============================================================================


class DashboardMetric(graphene.ObjectType):
    value = graphene.Float(required=True)
    change = graphene.Float(required=True)
    change_type = graphene.Field(ChangeTypeEnum, required=True)
    previous_value = graphene.Float(required=True)


class TodayActivity(graphene.ObjectType):
    views = graphene.Int(required=True)
    inquiries = graphene.Int(required=True)
    new_listings = graphene.Int(required=True)
    approvals = graphene.Int(required=True)
    rejections = graphene.Int(required=True)
    estimated_response_rate = graphene.Float()


class RecentActivity(graphene.ObjectType):
    id = graphene.ID(required=True)
    type = graphene.Field(ActivityTypeEnum, required=True)
    title = graphene.String(required=True)
    description = graphene.String(required=True)
    timestamp = graphene.DateTime(required=True)
    property_id = graphene.UUID()
    user_name = graphene.String()
    location = graphene.String()


class PropertyStatusCount(graphene.ObjectType):
    status = graphene.Field(ApprovalStatusEnum, required=True)
    count = graphene.Int(required=True)
    percentage = graphene.Float(required=True)
    estimated_change = graphene.Float()


class MonthlyTrend(graphene.ObjectType):
    month = graphene.String(required=True)
    year = graphene.Int(required=True)
    properties = graphene.Int(required=True)
    inquiries = graphene.Int(required=True)
    approvals = graphene.Int(required=True)
    revenue = graphene.Float(required=True)


class CityStats(graphene.ObjectType):
    city = graphene.String(required=True)
    state = graphene.String()
    property_count = graphene.Int(required=True)
    average_price = graphene.Float(required=True)
    inquiry_count = graphene.Int(required=True)
    estimated_growth_percent = graphene.Float()


class AgentPerformance(graphene.ObjectType):
    agent_id = graphene.UUID(required=True)
    agent_name = graphene.String(required=True)
    total_listings = graphene.Int(required=True)
    approved_listings = graphene.Int(required=True)
    inquiry_count = graphene.Int(required=True)
    revenue = graphene.Float(required=True)
    estimated_response_rate = graphene.Float()
    estimated_average_response_time = graphene.Float()
    estimated_rating = graphene.Float()


class DashboardStats(graphene.ObjectType):
    total_properties = graphene.Field(DashboardMetric, required=True)
    pending_approvals = graphene.Field(DashboardMetric, required=True)
    active_listings = graphene.Field(DashboardMetric, required=True)
    today_activity = graphene.Field(TodayActivity, required=True)
    recent_activities = graphene.List(graphene.NonNull(RecentActivity), required=True)
    property_status_distribution = graphene.List(graphene.NonNull(PropertyStatusCount), required=True)
    monthly_trends = graphene.List(graphene.NonNull(MonthlyTrend), required=True)
    top_cities = graphene.List(graphene.NonNull(CityStats), required=True)
    agent_performance = graphene.List(graphene.NonNull(AgentPerformance), required=True)
    generated_at = graphene.DateTime(required=True)


class RealTimeMetrics(graphene.ObjectType):
    today_activity = graphene.Field(TodayActivity, required=True)
    pending_approvals = graphene.Int(required=True)
    active_listings = graphene.Int(required=True)
    generated_at = graphene.DateTime(required=True)


class ActivityFeed(graphene.ObjectType):
    items = graphene.List(graphene.NonNull(RecentActivity), required=True)
    has_more = graphene.Boolean(required=True)


class TopProperty(graphene.ObjectType):
    property_id = graphene.UUID(required=True)
    title = graphene.String(required=True)
    views = graphene.Int(required=True)
    inquiries = graphene.Int(required=True)
    conversion_rate = graphene.Float(required=True)
    revenue = graphene.Float(required=True)


class GeographicStat(graphene.ObjectType):
    region = graphene.String()
    properties = graphene.Int(required=True)
    inquiries = graphene.Int(required=True)
    average_price = graphene.Float(required=True)
    estimated_growth_percent = graphene.Float()


class PropertyAnalytics(graphene.ObjectType):
    total_views = graphene.Int(required=True)
    unique_visitors = graphene.Int(required=True)
    total_inquiries = graphene.Int(required=True)
    conversion_rate = graphene.Float(required=True)
    top_performing_properties = graphene.List(graphene.NonNull(TopProperty), required=True)
    geographic_distribution = graphene.List(graphene.NonNull(GeographicStat), required=True)
    estimated_average_time_on_page = graphene.Float()
