"""
Service layer for business logic.

This package provides service classes that implement business logic,
coordinate between repositories, and handle transaction management.
"""

from bigha.services.activity_service import ActivityService, RequestMeta
from bigha.services.approval_service import ApprovalService
from bigha.services.auth_service import AuthService
from bigha.services.dashboard_service import DashboardService
from bigha.services.notification_service import NotificationService
from bigha.services.otp_service import OTPService
from bigha.services.permission_service import PermissionResolver
from bigha.services.property_service import PropertyService
from bigha.services.rbac_service import RBACService
from bigha.services.seo_service import SeoService
from bigha.services.session_service import SessionService

__all__ = [
    "ActivityService",
    "ApprovalService",
    "AuthService",
    "DashboardService",
    "NotificationService",
    "OTPService",
    "PermissionResolver",
    "PropertyService",
    "RBACService",
    "RequestMeta",
    "SeoService",
    "SessionService",
]
