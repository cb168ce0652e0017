"""Router exposing the manually entered weekly expense records."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..security import CurrentUser, require_admin
from ..services import AdminActivityService, FinancialEntryNotFoundError, FinancialEntryService

LOGGER = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


def _require_entry(db: Session, entry_id: str):
    try:
        return FinancialEntryService.require_entry(db, entry_id)
    except FinancialEntryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("", response_model=schemas.FinancialEntryListResponse)
def list_entries(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> schemas.FinancialEntryListResponse:
    items, total = FinancialEntryService.list_entries(db, skip=skip, limit=limit)
    return schemas.FinancialEntryListResponse(items=items, total=total, limit=limit, skip=skip)


@router.post("", response_model=schemas.FinancialEntryRead, status_code=status.HTTP_201_CREATED)
def save_entry(
    payload: schemas.FinancialEntryCreate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> schemas.FinancialEntryRead:
    """Create the entry of a week, replacing the figures when one already exists."""

    try:
        entry = FinancialEntryService.save_entry(db, payload, actor=admin.user_id)
    except SQLAlchemyError as exc:
        LOGGER.exception("Failed to save financial entry for week %s", payload.week_start_date)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to save the financial entry.",
        ) from exc
    AdminActivityService.log_action(
        db,
        admin.user_id,
        "save_financial_entry",
        "financial_entry",
        entry.id,
        {"week_start_date": entry.week_start_date.isoformat()},
    )
    return entry


@router.get("/{entry_id}", response_model=schemas.FinancialEntryRead)
def get_entry(entry_id: str, db: Session = Depends(get_db)) -> schemas.FinancialEntryRead:
    return _require_entry(db, entry_id)


@router.put("/{entry_id}", response_model=schemas.FinancialEntryRead)
def update_entry(
    entry_id: str,
    payload: schemas.FinancialEntryUpdate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> schemas.FinancialEntryRead:
    entry = _require_entry(db, entry_id)
    try:
        entry = FinancialEntryService.update_entry(db, entry, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    AdminActivityService.log_action(
        db,
        admin.user_id,
        "update_financial_entry",
        "financial_entry",
        entry.id,
        payload.model_dump(mode="json", exclude_unset=True),
    )
    return entry


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(
    entry_id: str,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> None:
    entry = _require_entry(db, entry_id)
    FinancialEntryService.delete_entry(db, entry)
    AdminActivityService.log_action(
        db, admin.user_id, "delete_financial_entry", "financial_entry", entry_id
    )
