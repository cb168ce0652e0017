from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.payment import PaymentMethod
from .common import PaginatedResponse


class PaymentBase(BaseModel):
    """Shared attributes for payment operations."""

    user_id: str = Field(..., min_length=1, description="Member the payment belongs to")
    amount: Decimal = Field(..., gt=0, description="Amount received")
    payment_method: PaymentMethod = Field(
        default=PaymentMethod.CASH, description="Method used to pay"
    )
    notes: Optional[str] = Field(default=None, description="Optional note for the payment")


class PaymentCreate(PaymentBase):
    """Schema used when recording a payment."""

    payment_date: Union[datetime, date] = Field(
        ..., description="When the payment was received (reference timezone)"
    )

    @field_validator("user_id")
    @classmethod
    def _strip_user_id(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("user_id cannot be blank")
        return stripped


class PaymentRead(PaymentBase):
    """Schema representing stored payments."""

    id: str
    payment_date: datetime
    recorded_by: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentListResponse(PaginatedResponse[PaymentRead]):
    """Paginated payment listing."""
