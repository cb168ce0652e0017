from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class PricingTierCreate(BaseModel):
    amount: Decimal = Field(..., gt=0, description="Monthly membership price")
    effective_date: Optional[datetime] = Field(
        default=None, description="When the tier takes effect; defaults to now"
    )
    is_current_tier: bool = Field(default=False, description="Make this the current tier")


class PricingTierRead(BaseModel):
    id: str
    amount: Decimal
    effective_date: datetime
    is_current_tier: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
