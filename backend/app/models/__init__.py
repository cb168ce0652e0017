"""Expose SQLAlchemy models for convenient imports."""

from .announcement import Announcement, AnnouncementType
from .audit import AdminActionLog
from .ebitda_snapshot import EbitdaSnapshot
from .financial_entry import FinancialEntry
from .payment import Payment, PaymentMethod
from .pricing_tier import PricingTier

__all__ = [
    "Announcement",
    "AnnouncementType",
    "AdminActionLog",
    "EbitdaSnapshot",
    "FinancialEntry",
    "Payment",
    "PaymentMethod",
    "PricingTier",
]
