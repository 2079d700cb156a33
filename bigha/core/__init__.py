"""
Core module for the 2bigha admin backend.

Exports the main configuration and database lifecycle helpers.
"""

from bigha.core.config import settings
from bigha.core.database import check_database_connection

__all__ = [
    # Config
    "settings",
    # Database
    "check_database_connection",
]
