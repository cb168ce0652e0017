"""Service layer encapsulating business logic for API routers."""

from .admin_activity import AdminActivityService
from .announcements import AnnouncementNotFoundError, AnnouncementService
from .ebitda_snapshots import (
    CurrentStatus,
    EbitdaSnapshotService,
    SnapshotValidationError,
    WeekComparison,
    WeekFinancials,
)
from .financial_entries import FinancialEntryNotFoundError, FinancialEntryService
from .payments import PaymentService, PaymentServiceError
from .pricing_tiers import PricingTierNotFoundError, PricingTierService
from .projections import DefaultAliveStatus, EbitdaPoint, ProjectionSettings, project_status

__all__ = [
    "AdminActivityService",
    "AnnouncementNotFoundError",
    "AnnouncementService",
    "CurrentStatus",
    "EbitdaSnapshotService",
    "SnapshotValidationError",
    "WeekComparison",
    "WeekFinancials",
    "FinancialEntryNotFoundError",
    "FinancialEntryService",
    "PaymentService",
    "PaymentServiceError",
    "PricingTierNotFoundError",
    "PricingTierService",
    "DefaultAliveStatus",
    "EbitdaPoint",
    "ProjectionSettings",
    "project_status",
]
