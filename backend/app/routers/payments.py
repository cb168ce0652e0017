"""Router exposing payment operations used as weekly revenue."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..security import CurrentUser, require_admin
from ..services import AdminActivityService, PaymentService, PaymentServiceError

LOGGER = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("", response_model=schemas.PaymentListResponse)
def list_payments(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0, description="Number of payments to skip"),
    limit: int = Query(50, ge=1, le=200, description="Maximum number of payments to return"),
    user_id: Optional[str] = Query(None, description="Filter by member"),
    start_date: Optional[date] = Query(None, description="Return payments on or after this date"),
    end_date: Optional[date] = Query(None, description="Return payments on or before this date"),
) -> schemas.PaymentListResponse:
    if start_date and end_date and start_date > end_date:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="start_date cannot be after end_date",
        )
    items, total = PaymentService.list_payments(
        db,
        skip=skip,
        limit=limit,
        user_id=user_id,
        start_date=start_date,
        end_date=end_date,
    )
    return schemas.PaymentListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("", response_model=schemas.PaymentRead, status_code=status.HTTP_201_CREATED)
def create_payment(
    payload: schemas.PaymentCreate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> schemas.PaymentRead:
    try:
        payment = PaymentService.record_payment(db, payload, recorded_by=admin.user_id)
    except PaymentServiceError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        LOGGER.exception("Failed to record payment for %s", payload.user_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to record the payment.",
        ) from exc
    AdminActivityService.log_action(
        db,
        admin.user_id,
        "create_payment",
        "payment",
        payment.id,
        {"amount": str(payment.amount), "user_id": payment.user_id},
    )
    return payment


@router.get("/{payment_id}", response_model=schemas.PaymentRead)
def get_payment(payment_id: str, db: Session = Depends(get_db)) -> schemas.PaymentRead:
    payment = PaymentService.get_payment(db, payment_id)
    if payment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    return payment


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_payment(
    payment_id: str,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> None:
    payment = PaymentService.get_payment(db, payment_id)
    if payment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment not found")
    PaymentService.delete_payment(db, payment)
    AdminActivityService.log_action(db, admin.user_id, "delete_payment", "payment", payment_id)
