"""SQLAlchemy model definitions for recorded member payments."""

from __future__ import annotations

import enum
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, Index, Numeric, String, Text, func

from ..database import Base
from ..db_types import GUID


class PaymentMethod(str, enum.Enum):
    """Supported payment methods."""

    CASH = "cash"
    VENMO = "venmo"
    PAYPAL = "paypal"
    ZELLE = "zelle"
    BANK_TRANSFER = "bank_transfer"
    OTHER = "other"


PAYMENT_METHOD_ENUM = Enum(
    PaymentMethod,
    name="payment_method_enum",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    native_enum=True,
    validate_strings=True,
)


class Payment(Base):
    """A payment received from a member; the revenue source for EBITDA."""

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
    )

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(100), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_date = Column(DateTime, nullable=False)
    payment_method = Column(
        PAYMENT_METHOD_ENUM,
        nullable=False,
        default=PaymentMethod.CASH,
        server_default=PaymentMethod.CASH.value,
    )
    notes = Column(Text, nullable=True)
    recorded_by = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


Index("payments_payment_date_idx", Payment.payment_date)
Index("payments_user_id_idx", Payment.user_id)
