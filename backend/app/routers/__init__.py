"""Routers package."""

from .admin_activity import router as admin_activity_router
from .announcements import admin_router as announcements_admin_router
from .announcements import router as announcements_router
from .auth import router as auth_router
from .default_alive import router as default_alive_router
from .financial_entries import router as financial_entries_router
from .payments import router as payments_router
from .pricing_tiers import router as pricing_tiers_router

__all__ = [
    "admin_activity_router",
    "announcements_admin_router",
    "announcements_router",
    "auth_router",
    "default_alive_router",
    "financial_entries_router",
    "payments_router",
    "pricing_tiers_router",
]
