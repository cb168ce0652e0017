"""Request and response contracts of the Default Alive or Dead endpoints."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..weeks import parse_week_start
from .common import PaginatedResponse


class EbitdaCalculationRequest(BaseModel):
    """Payload of ``POST /default-alive-or-dead/calculate-ebitda``."""

    week_start_date: date = Field(
        ..., description="ISO-8601 date inside the week to compute; normalized to Saturday"
    )
    current_funding: Optional[Decimal] = Field(
        default=None, ge=0, description="Cash currently available, used for runway projections"
    )

    @field_validator("week_start_date", mode="before")
    @classmethod
    def _normalize_week(cls, value):
        return parse_week_start(value)


class EbitdaSnapshotRead(BaseModel):
    id: str
    week_start_date: date
    revenue: Decimal
    operating_expenses: Decimal
    depreciation: Decimal
    amortization: Decimal
    ebitda: Decimal
    current_funding: Optional[Decimal] = None
    is_default_alive: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class EbitdaSnapshotListResponse(PaginatedResponse[EbitdaSnapshotRead]):
    """Paginated snapshot listing ordered by week, newest first."""


class CurrentStatusResponse(BaseModel):
    current_snapshot: Optional[EbitdaSnapshotRead] = None
    is_default_alive: bool = False
    weekly_ebitda_trend: Optional[Decimal] = None
    projected_profitability_date: Optional[date] = None
    projected_capital_needed: Optional[Decimal] = None
    weeks_until_profitability: Optional[int] = Field(default=None, ge=0)


class WeekComparisonResponse(BaseModel):
    first_week: Optional[EbitdaSnapshotRead] = None
    second_week: Optional[EbitdaSnapshotRead] = None
    revenue_change_pct: Optional[Decimal] = None
    operating_expenses_change_pct: Optional[Decimal] = None
    ebitda_change_pct: Optional[Decimal] = None


WeeklyTrendsResponse = List[EbitdaSnapshotRead]
