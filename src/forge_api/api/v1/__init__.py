# src/forge_api/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    analytics_router,
    moderation_router,
    report_centre_router,
    reports_router,
    system_router,
    users_router,
    visitors_router,
)

__all__ = [
    "analytics_router",
    "moderation_router",
    "report_centre_router",
    "reports_router",
    "system_router",
    "users_router",
    "visitors_router",
]
