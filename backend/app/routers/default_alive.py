"""Router exposing the weekly EBITDA snapshots and the default alive status."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..security import CurrentUser, require_admin
from ..services import EbitdaSnapshotService, SnapshotValidationError
from ..weeks import InvalidWeekStartError, parse_week_start

LOGGER = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


def _parse_week_param(raw: str, name: str):
    try:
        return parse_week_start(raw)
    except InvalidWeekStartError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{name}: {exc}",
        ) from exc


def _snapshot_or_none(snapshot):
    if snapshot is None:
        return None
    return schemas.EbitdaSnapshotRead.model_validate(snapshot)


@router.post("/calculate-ebitda", response_model=schemas.EbitdaSnapshotRead)
def calculate_ebitda(
    payload: schemas.EbitdaCalculationRequest,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> schemas.EbitdaSnapshotRead:
    """Compute the snapshot of a week and store it, replacing any previous one."""

    try:
        snapshot = EbitdaSnapshotService.calculate_and_store(
            db, payload.week_start_date, payload.current_funding
        )
    except SnapshotValidationError as exc:
        LOGGER.warning("Rejected EBITDA calculation for week %s: %s", payload.week_start_date, exc)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to store the EBITDA snapshot.",
        ) from exc

    LOGGER.debug(
        "EBITDA snapshot for week %s recomputed by %s", snapshot.week_start_date, admin.user_id
    )
    return snapshot


@router.get("/current-status", response_model=schemas.CurrentStatusResponse)
def current_status(db: Session = Depends(get_db)) -> schemas.CurrentStatusResponse:
    result = EbitdaSnapshotService.current_status(db)
    projection = result.status
    return schemas.CurrentStatusResponse(
        current_snapshot=_snapshot_or_none(result.snapshot),
        is_default_alive=projection.is_default_alive,
        weekly_ebitda_trend=projection.weekly_trend,
        projected_profitability_date=projection.projected_profitability_date,
        projected_capital_needed=projection.projected_capital_needed,
        weeks_until_profitability=projection.weeks_until_profitability,
    )


@router.get("/weekly-trends", response_model=schemas.WeeklyTrendsResponse)
def weekly_trends(
    db: Session = Depends(get_db),
    weeks: int = Query(12, ge=1, le=104, description="Number of most recent weeks to return"),
) -> schemas.WeeklyTrendsResponse:
    return EbitdaSnapshotService.weekly_trends(db, weeks)


@router.get("/ebitda-snapshots", response_model=schemas.EbitdaSnapshotListResponse)
def list_snapshots(
    db: Session = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
) -> schemas.EbitdaSnapshotListResponse:
    items, total = EbitdaSnapshotService.list_snapshots(db, skip=skip, limit=limit)
    return schemas.EbitdaSnapshotListResponse(items=items, total=total, limit=limit, skip=skip)


@router.get("/ebitda-snapshots/{week}", response_model=schemas.EbitdaSnapshotRead)
def get_snapshot(week: str, db: Session = Depends(get_db)) -> schemas.EbitdaSnapshotRead:
    snapshot = EbitdaSnapshotService.get_snapshot(db, _parse_week_param(week, "week"))
    if snapshot is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Snapshot not found")
    return snapshot


@router.get("/week-comparison", response_model=schemas.WeekComparisonResponse)
def week_comparison(
    first_week: str = Query(..., description="Baseline week"),
    second_week: str = Query(..., description="Week compared against the baseline"),
    db: Session = Depends(get_db),
) -> schemas.WeekComparisonResponse:
    comparison = EbitdaSnapshotService.compare_weeks(
        db,
        _parse_week_param(first_week, "first_week"),
        _parse_week_param(second_week, "second_week"),
    )
    return schemas.WeekComparisonResponse(
        first_week=_snapshot_or_none(comparison.first),
        second_week=_snapshot_or_none(comparison.second),
        revenue_change_pct=comparison.revenue_change_pct,
        operating_expenses_change_pct=comparison.operating_expenses_change_pct,
        ebitda_change_pct=comparison.ebitda_change_pct,
    )
