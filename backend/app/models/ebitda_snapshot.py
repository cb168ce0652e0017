"""Computed EBITDA figures per canonical week."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, Date, DateTime, Numeric, UniqueConstraint

from ..database import Base
from ..db_types import GUID


class EbitdaSnapshot(Base):
    """Stores the recomputable EBITDA result of exactly one week.

    ``week_start_date`` is always a Saturday and is the upsert key: every
    recomputation overwrites the figures of the existing row instead of adding
    a new one.
    """

    __tablename__ = "ebitda_snapshots"
    __table_args__ = (
        UniqueConstraint("week_start_date", name="uq_ebitda_snapshots_week_start"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    week_start_date = Column(Date, nullable=False)
    revenue = Column(Numeric(14, 2), nullable=False, default=0)
    operating_expenses = Column(Numeric(14, 2), nullable=False, default=0)
    depreciation = Column(Numeric(14, 2), nullable=False, default=0)
    amortization = Column(Numeric(14, 2), nullable=False, default=0)
    ebitda = Column(Numeric(14, 2), nullable=False, default=0)
    current_funding = Column(Numeric(14, 2), nullable=True)
    is_default_alive = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
