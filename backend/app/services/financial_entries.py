"""Business logic for manually entered weekly expense records."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db_types import upsert
from ..weeks import week_bounds

LOGGER = logging.getLogger(__name__)

CENT = Decimal("0.01")

ENTRY_UPDATE_COLUMNS = (
    "operating_expenses",
    "depreciation",
    "amortization",
    "notes",
    "updated_at",
)


class FinancialEntryNotFoundError(LookupError):
    """Raised when the requested financial entry does not exist."""


def _quantize(value: Decimal | None) -> Decimal:
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


class FinancialEntryService:
    """CRUD operations for weekly financial entries.

    Entries are unique per normalized week start. Saving an entry for a week
    that already has one replaces its figures; snapshots are not recomputed
    automatically.
    """

    @staticmethod
    def list_entries(
        db: Session, *, skip: int = 0, limit: int = 50
    ) -> Tuple[List[models.FinancialEntry], int]:
        query = db.query(models.FinancialEntry)
        total = query.count()
        items = (
            query.order_by(models.FinancialEntry.week_start_date.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def get_entry(db: Session, entry_id: str) -> Optional[models.FinancialEntry]:
        return db.query(models.FinancialEntry).filter(models.FinancialEntry.id == entry_id).first()

    @staticmethod
    def get_entry_for_week(db: Session, week_start) -> Optional[models.FinancialEntry]:
        return (
            db.query(models.FinancialEntry)
            .populate_existing()
            .filter(models.FinancialEntry.week_start_date == week_bounds(week_start).start_date)
            .one_or_none()
        )

    @classmethod
    def save_entry(
        cls,
        db: Session,
        data: schemas.FinancialEntryCreate,
        *,
        actor: Optional[str] = None,
    ) -> models.FinancialEntry:
        """Create the entry of a week or overwrite the existing one."""

        week_start = week_bounds(data.week_start_date).start_date
        now = datetime.now(timezone.utc)
        try:
            upsert(
                db,
                models.FinancialEntry,
                {
                    "id": str(uuid.uuid4()),
                    "week_start_date": week_start,
                    "operating_expenses": _quantize(data.operating_expenses),
                    "depreciation": _quantize(data.depreciation),
                    "amortization": _quantize(data.amortization),
                    "notes": data.notes,
                    "created_by": actor,
                    "created_at": now,
                    "updated_at": now,
                },
                index_elements=("week_start_date",),
                update_columns=ENTRY_UPDATE_COLUMNS,
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        LOGGER.info("Saved financial entry for week %s", week_start)
        return cls.get_entry_for_week(db, week_start)

    @classmethod
    def update_entry(
        cls,
        db: Session,
        entry: models.FinancialEntry,
        data: schemas.FinancialEntryUpdate,
    ) -> models.FinancialEntry:
        changes = data.model_dump(exclude_unset=True)
        for field in ("operating_expenses", "depreciation", "amortization"):
            if field in changes:
                if changes[field] is None:
                    raise ValueError(f"{field} cannot be null")
                setattr(entry, field, _quantize(changes[field]))
        if "notes" in changes:
            entry.notes = changes["notes"]
        entry.updated_at = datetime.now(timezone.utc)
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    @staticmethod
    def delete_entry(db: Session, entry: models.FinancialEntry) -> None:
        week_start = entry.week_start_date
        db.delete(entry)
        db.commit()
        LOGGER.info("Deleted financial entry for week %s", week_start)

    @classmethod
    def require_entry(cls, db: Session, entry_id: str) -> models.FinancialEntry:
        entry = cls.get_entry(db, entry_id)
        if entry is None:
            raise FinancialEntryNotFoundError("Financial entry not found")
        return entry
