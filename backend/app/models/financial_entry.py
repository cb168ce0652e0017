"""Manually entered weekly expense figures."""

from __future__ import annotations

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)

from ..database import Base
from ..db_types import GUID


class FinancialEntry(Base):
    """Operating expenses, depreciation and amortization for one week."""

    __tablename__ = "financial_entries"
    __table_args__ = (
        UniqueConstraint("week_start_date", name="uq_financial_entries_week_start"),
        CheckConstraint("operating_expenses >= 0", name="ck_financial_entries_opex_non_negative"),
        CheckConstraint("depreciation >= 0", name="ck_financial_entries_depreciation_non_negative"),
        CheckConstraint("amortization >= 0", name="ck_financial_entries_amortization_non_negative"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    week_start_date = Column(Date, nullable=False)
    operating_expenses = Column(Numeric(14, 2), nullable=False, default=0)
    depreciation = Column(Numeric(14, 2), nullable=False, default=0, server_default="0")
    amortization = Column(Numeric(14, 2), nullable=False, default=0, server_default="0")
    notes = Column(Text, nullable=True)
    created_by = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)
