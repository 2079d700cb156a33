"""
Database repositories for the 2bigha admin backend.

This module exports all repository classes for database operations.
"""

from bigha.repositories.activity_log_repository import ActivityLogRepository
from bigha.repositories.admin_repository import AdminUserRepository
from bigha.repositories.approval_repository import ApprovalHistoryRepository
from bigha.repositories.base import BaseRepository
from bigha.repositories.dashboard_repository import DashboardRepository
from bigha.repositories.otp_repository import OTPRepository
from bigha.repositories.permission_repository import PermissionRepository
from bigha.repositories.property_repository import (
    PropertyImageRepository,
    PropertyRepository,
    PropertySeoRepository,
)
from bigha.repositories.role_repository import RoleAssignmentRepository, RoleRepository
from bigha.repositories.session_repository import AdminSessionRepository
from bigha.repositories.site_seo_repository import (
    GlobalSeoSettingsRepository,
    SchemaSettingRepository,
    SeoPageRepository,
)

__all__ = [
    "BaseRepository",
    "AdminUserRepository",
    "RoleRepository",
    "RoleAssignmentRepository",
    "PermissionRepository",
    "AdminSessionRepository",
    "OTPRepository",
    "ActivityLogRepository",
    "PropertyRepository",
    "PropertySeoRepository",
    "PropertyImageRepository",
    "ApprovalHistoryRepository",
    "DashboardRepository",
    "GlobalSeoSettingsRepository",
    "SeoPageRepository",
    "SchemaSettingRepository",
]
