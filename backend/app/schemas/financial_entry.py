from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..weeks import parse_week_start
from .common import PaginatedResponse


class FinancialEntryBase(BaseModel):
    operating_expenses: Decimal = Field(..., ge=0, description="Operating expenses of the week")
    depreciation: Decimal = Field(default=Decimal("0"), ge=0, description="Depreciation of the week")
    amortization: Decimal = Field(default=Decimal("0"), ge=0, description="Amortization of the week")
    notes: Optional[str] = Field(default=None, description="Free-text notes")


class FinancialEntryCreate(FinancialEntryBase):
    """Schema used to create or replace the entry of a week.

    Any date inside the week is accepted and normalized to its Saturday.
    """

    week_start_date: date = Field(..., description="Any date inside the target week")

    @field_validator("week_start_date", mode="before")
    @classmethod
    def _normalize_week(cls, value):
        return parse_week_start(value)


class FinancialEntryUpdate(BaseModel):
    """Partial update of an existing entry; the week itself cannot change."""

    operating_expenses: Optional[Decimal] = Field(default=None, ge=0)
    depreciation: Optional[Decimal] = Field(default=None, ge=0)
    amortization: Optional[Decimal] = Field(default=None, ge=0)
    notes: Optional[str] = None


class FinancialEntryRead(FinancialEntryBase):
    id: str
    week_start_date: date
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FinancialEntryListResponse(PaginatedResponse[FinancialEntryRead]):
    """Paginated financial entry listing."""
