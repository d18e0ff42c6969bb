# src/forge_api/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .analytics import router as analytics_router
from .moderation import router as moderation_router
from .report_centre import router as report_centre_router
from .reports import router as reports_router
from .system import router as system_router
from .users import router as users_router
from .visitors import router as visitors_router

__all__ = [
    "analytics_router",
    "moderation_router",
    "report_centre_router",
    "reports_router",
    "system_router",
    "users_router",
    "visitors_router",
]
