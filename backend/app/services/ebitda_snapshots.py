"""Weekly EBITDA aggregation and idempotent snapshot storage."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models
from ..db_types import upsert
from ..weeks import week_bounds
from .projections import DefaultAliveStatus, EbitdaPoint, ProjectionSettings, project_status

LOGGER = logging.getLogger(__name__)

CENT = Decimal("0.01")

SNAPSHOT_UPDATE_COLUMNS = (
    "revenue",
    "operating_expenses",
    "depreciation",
    "amortization",
    "ebitda",
    "current_funding",
    "is_default_alive",
    "updated_at",
)


class SnapshotValidationError(ValueError):
    """Raised when a snapshot computation receives invalid input."""


@dataclass(frozen=True)
class WeekFinancials:
    """Aggregated figures of one canonical week."""

    week_start: date
    week_end: datetime
    revenue: Decimal
    operating_expenses: Decimal
    depreciation: Decimal
    amortization: Decimal
    ebitda: Decimal


@dataclass(frozen=True)
class CurrentStatus:
    snapshot: Optional[models.EbitdaSnapshot]
    status: DefaultAliveStatus


@dataclass(frozen=True)
class WeekComparison:
    first: Optional[models.EbitdaSnapshot]
    second: Optional[models.EbitdaSnapshot]
    revenue_change_pct: Optional[Decimal]
    operating_expenses_change_pct: Optional[Decimal]
    ebitda_change_pct: Optional[Decimal]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EbitdaSnapshotService:
    """Compute, store and read weekly EBITDA snapshots."""

    @staticmethod
    def _normalize_amount(value: Decimal | float | int | str | None) -> Decimal:
        return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)

    @classmethod
    def _normalize_funding(cls, value: Decimal | float | int | str | None) -> Optional[Decimal]:
        if value is None:
            return None
        try:
            funding = Decimal(str(value))
        except InvalidOperation as exc:
            raise SnapshotValidationError("current_funding must be a decimal amount") from exc
        if not funding.is_finite():
            raise SnapshotValidationError("current_funding must be a decimal amount")
        if funding < 0:
            raise SnapshotValidationError("current_funding cannot be negative")
        return funding.quantize(CENT, rounding=ROUND_HALF_UP)

    @classmethod
    def aggregate_week(cls, db: Session, week_start_input: date | datetime) -> WeekFinancials:
        """Sum the revenue and expense inputs of the week containing ``week_start_input``.

        Weeks without payments or without a financial entry yield zeros.
        """

        bounds = week_bounds(week_start_input)
        raw_revenue = (
            db.query(func.coalesce(func.sum(models.Payment.amount), 0))
            .filter(
                models.Payment.payment_date >= bounds.start,
                models.Payment.payment_date < bounds.next_start,
            )
            .scalar()
        )
        entry = (
            db.query(models.FinancialEntry)
            .filter(models.FinancialEntry.week_start_date == bounds.start_date)
            .one_or_none()
        )

        revenue = cls._normalize_amount(raw_revenue)
        operating_expenses = cls._normalize_amount(entry.operating_expenses if entry else None)
        depreciation = cls._normalize_amount(entry.depreciation if entry else None)
        amortization = cls._normalize_amount(entry.amortization if entry else None)
        return WeekFinancials(
            week_start=bounds.start_date,
            week_end=bounds.end,
            revenue=revenue,
            operating_expenses=operating_expenses,
            depreciation=depreciation,
            amortization=amortization,
            ebitda=revenue - operating_expenses + depreciation + amortization,
        )

    @staticmethod
    def _points(snapshots: Iterable[models.EbitdaSnapshot]) -> List[EbitdaPoint]:
        return [
            EbitdaPoint(week_start=snapshot.week_start_date, ebitda=Decimal(str(snapshot.ebitda)))
            for snapshot in snapshots
        ]

    @classmethod
    def _history_before(cls, db: Session, week_start: date, *, limit: int) -> List[EbitdaPoint]:
        if limit <= 0:
            return []
        snapshots = (
            db.query(models.EbitdaSnapshot)
            .filter(models.EbitdaSnapshot.week_start_date < week_start)
            .order_by(models.EbitdaSnapshot.week_start_date.desc())
            .limit(limit)
            .all()
        )
        return cls._points(snapshots)

    @classmethod
    def calculate_and_store(
        cls,
        db: Session,
        week_start_input: date | datetime,
        current_funding: Decimal | float | int | str | None = None,
        *,
        settings: ProjectionSettings | None = None,
    ) -> models.EbitdaSnapshot:
        """Recompute the snapshot of a week and upsert it keyed on the week start.

        The write is a single ``INSERT ... ON CONFLICT DO UPDATE`` statement, so
        concurrent calls for the same week converge on one row and never raise a
        unique constraint violation. All computed columns, the supplied funding
        and ``updated_at`` are replaced; ``id`` and ``created_at`` are kept.
        """

        funding = cls._normalize_funding(current_funding)
        settings = settings or ProjectionSettings.from_env()
        bounds = week_bounds(week_start_input)

        try:
            financials = cls.aggregate_week(db, bounds.start)
            history = cls._history_before(
                db, bounds.start_date, limit=settings.trend_window_weeks - 1
            )
            status = project_status(
                [EbitdaPoint(week_start=bounds.start_date, ebitda=financials.ebitda), *history],
                funding,
                settings,
            )
            now = _utcnow()
            upsert(
                db,
                models.EbitdaSnapshot,
                {
                    "id": str(uuid.uuid4()),
                    "week_start_date": bounds.start_date,
                    "revenue": financials.revenue,
                    "operating_expenses": financials.operating_expenses,
                    "depreciation": financials.depreciation,
                    "amortization": financials.amortization,
                    "ebitda": financials.ebitda,
                    "current_funding": funding,
                    "is_default_alive": status.is_default_alive,
                    "created_at": now,
                    "updated_at": now,
                },
                index_elements=("week_start_date",),
                update_columns=SNAPSHOT_UPDATE_COLUMNS,
            )
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            LOGGER.exception("Failed to store EBITDA snapshot for week %s", bounds.start_date)
            raise

        snapshot = cls.get_snapshot(db, bounds.start_date)
        if snapshot is None:  # pragma: no cover - the upsert above guarantees a row
            raise LookupError(f"EBITDA snapshot for week {bounds.start_date} was not persisted")
        LOGGER.info(
            "Stored EBITDA snapshot for week %s: revenue=%s ebitda=%s default_alive=%s",
            bounds.start_date,
            financials.revenue,
            financials.ebitda,
            status.is_default_alive,
        )
        return snapshot

    @staticmethod
    def get_snapshot(db: Session, week_start_input: date | datetime) -> Optional[models.EbitdaSnapshot]:
        week_start = week_bounds(week_start_input).start_date
        return (
            db.query(models.EbitdaSnapshot)
            .populate_existing()
            .filter(models.EbitdaSnapshot.week_start_date == week_start)
            .one_or_none()
        )

    @staticmethod
    def latest_snapshot(db: Session) -> Optional[models.EbitdaSnapshot]:
        return (
            db.query(models.EbitdaSnapshot)
            .order_by(models.EbitdaSnapshot.week_start_date.desc())
            .first()
        )

    @staticmethod
    def list_snapshots(
        db: Session, *, skip: int = 0, limit: int = 50
    ) -> Tuple[List[models.EbitdaSnapshot], int]:
        query = db.query(models.EbitdaSnapshot)
        total = query.count()
        items = (
            query.order_by(models.EbitdaSnapshot.week_start_date.desc())
            .offset(max(skip, 0))
            .limit(max(limit, 1))
            .all()
        )
        return items, total

    @staticmethod
    def weekly_trends(db: Session, weeks: int = 12) -> List[models.EbitdaSnapshot]:
        """Return the most recent ``weeks`` snapshots, newest first."""

        return (
            db.query(models.EbitdaSnapshot)
            .order_by(models.EbitdaSnapshot.week_start_date.desc())
            .limit(max(weeks, 1))
            .all()
        )

    @classmethod
    def current_status(
        cls, db: Session, *, settings: ProjectionSettings | None = None
    ) -> CurrentStatus:
        """Derive the default alive status from the stored history without writing."""

        settings = settings or ProjectionSettings.from_env()
        history = cls.weekly_trends(db, settings.trend_window_weeks)
        if not history:
            return CurrentStatus(snapshot=None, status=DefaultAliveStatus(is_default_alive=False))
        latest = history[0]
        status = project_status(cls._points(history), latest.current_funding, settings)
        return CurrentStatus(snapshot=latest, status=status)

    @staticmethod
    def _percent_change(base: Decimal | None, value: Decimal | None) -> Optional[Decimal]:
        if base is None or value is None:
            return None
        base = Decimal(str(base))
        if base == 0:
            return None
        change = (Decimal(str(value)) - base) / abs(base) * 100
        return change.quantize(CENT, rounding=ROUND_HALF_UP)

    @classmethod
    def compare_weeks(
        cls, db: Session, first_week: date | datetime, second_week: date | datetime
    ) -> WeekComparison:
        """Compare two weeks; percentages are relative to ``first_week``."""

        first = cls.get_snapshot(db, first_week)
        second = cls.get_snapshot(db, second_week)

        def _change(attribute: str) -> Optional[Decimal]:
            if first is None or second is None:
                return None
            return cls._percent_change(getattr(first, attribute), getattr(second, attribute))

        return WeekComparison(
            first=first,
            second=second,
            revenue_change_pct=_change("revenue"),
            operating_expenses_change_pct=_change("operating_expenses"),
            ebitda_change_pct=_change("ebitda"),
        )
