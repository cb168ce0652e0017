"""Expose Pydantic schemas for convenient imports."""

from .announcement import (
    AnnouncementBase,
    AnnouncementCreate,
    AnnouncementRead,
    AnnouncementUpdate,
)
from .audit import AdminActionLogRead
from .auth import AdminLoginRequest, TokenResponse
from .common import PaginatedResponse
from .ebitda import (
    CurrentStatusResponse,
    EbitdaCalculationRequest,
    EbitdaSnapshotListResponse,
    EbitdaSnapshotRead,
    WeekComparisonResponse,
    WeeklyTrendsResponse,
)
from .financial_entry import (
    FinancialEntryBase,
    FinancialEntryCreate,
    FinancialEntryListResponse,
    FinancialEntryRead,
    FinancialEntryUpdate,
)
from .payment import PaymentBase, PaymentCreate, PaymentListResponse, PaymentRead
from .pricing_tier import PricingTierCreate, PricingTierRead

__all__ = [
    "AnnouncementBase",
    "AnnouncementCreate",
    "AnnouncementRead",
    "AnnouncementUpdate",
    "AdminActionLogRead",
    "AdminLoginRequest",
    "TokenResponse",
    "PaginatedResponse",
    "CurrentStatusResponse",
    "EbitdaCalculationRequest",
    "EbitdaSnapshotListResponse",
    "EbitdaSnapshotRead",
    "WeekComparisonResponse",
    "WeeklyTrendsResponse",
    "FinancialEntryBase",
    "FinancialEntryCreate",
    "FinancialEntryListResponse",
    "FinancialEntryRead",
    "FinancialEntryUpdate",
    "PaymentBase",
    "PaymentCreate",
    "PaymentListResponse",
    "PaymentRead",
    "PricingTierCreate",
    "PricingTierRead",
]
