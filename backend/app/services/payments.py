"""Business logic for recorded member payments."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas

LOGGER = logging.getLogger(__name__)


class PaymentServiceError(ValueError):
    """Raised when a payment cannot be recorded."""


class PaymentService:
    """Encapsulates CRUD operations for payments."""

    @staticmethod
    def list_payments(
        db: Session,
        *,
        skip: int = 0,
        limit: int = 50,
        user_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Tuple[Iterable[models.Payment], int]:
        query = db.query(models.Payment)

        if user_id:
            query = query.filter(models.Payment.user_id == user_id.strip())
        if start_date:
            query = query.filter(models.Payment.payment_date >= datetime.combine(start_date, time.min))
        if end_date:
            next_day = datetime.combine(end_date + timedelta(days=1), time.min)
            query = query.filter(models.Payment.payment_date < next_day)

        total = query.count()
        items = (
            query.order_by(models.Payment.payment_date.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def record_payment(
        db: Session,
        data: schemas.PaymentCreate,
        *,
        recorded_by: str,
    ) -> models.Payment:
        amount = Decimal(str(data.amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
        if amount <= 0:
            raise PaymentServiceError("Payment amount must be greater than zero")

        payment_date = data.payment_date
        if not isinstance(payment_date, datetime):
            payment_date = datetime.combine(payment_date, time.min)
        elif payment_date.tzinfo is not None:
            # Stored in the reference timezone as naive values.
            payment_date = payment_date.replace(tzinfo=None)

        payment = models.Payment(
            user_id=data.user_id.strip(),
            amount=amount,
            payment_date=payment_date,
            payment_method=data.payment_method,
            notes=data.notes,
            recorded_by=recorded_by,
        )
        try:
            db.add(payment)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(payment)
        LOGGER.info("Recorded payment %s of %s for %s", payment.id, amount, payment.user_id)
        return payment

    @staticmethod
    def get_payment(db: Session, payment_id: str) -> Optional[models.Payment]:
        return db.query(models.Payment).filter(models.Payment.id == payment_id).first()

    @staticmethod
    def delete_payment(db: Session, payment: models.Payment) -> None:
        db.delete(payment)
        db.commit()
