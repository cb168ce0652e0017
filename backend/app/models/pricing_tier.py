"""Historical membership pricing levels."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, DateTime, Index, Numeric, func

from ..database import Base
from ..db_types import GUID


class PricingTier(Base):
    """A pricing level; at most one row is flagged as the current tier."""

    __tablename__ = "pricing_tiers"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    amount = Column(Numeric(10, 2), nullable=False)
    effective_date = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    is_current_tier = Column(Boolean, nullable=False, default=False, server_default="0")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


Index("pricing_tiers_current_idx", PricingTier.is_current_tier, PricingTier.effective_date)
Index(
    "pricing_tiers_single_current_idx",
    PricingTier.is_current_tier,
    unique=True,
    postgresql_where=PricingTier.is_current_tier.is_(True),
    sqlite_where=PricingTier.is_current_tier.is_(True),
)
