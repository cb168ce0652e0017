"""Default alive / default dead classification and runway projections.

The classification extrapolates the weekly EBITDA trend of the most recent
snapshots. A company is *default alive* when the trend reaches profitability
and the cumulative burn until then is covered by current funding. Thresholds
are read from the environment so they can be tuned without code changes.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Sequence

LOGGER = logging.getLogger(__name__)

TREND_WINDOW_ENV = "DEFAULT_ALIVE_TREND_WINDOW_WEEKS"
MIN_WEEKLY_IMPROVEMENT_ENV = "DEFAULT_ALIVE_MIN_WEEKLY_IMPROVEMENT"
MAX_HORIZON_ENV = "DEFAULT_ALIVE_MAX_HORIZON_WEEKS"
FUNDING_BUFFER_ENV = "DEFAULT_ALIVE_FUNDING_BUFFER"

DEFAULT_TREND_WINDOW = 8
DEFAULT_MIN_WEEKLY_IMPROVEMENT = Decimal("0")
DEFAULT_MAX_HORIZON = 520
DEFAULT_FUNDING_BUFFER = Decimal("1")

CENT = Decimal("0.01")


def _read_int_env(name: str, default: int, *, minimum: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        LOGGER.warning("Invalid %s=%s; falling back to %s", name, raw, default)
        return default
    if value < minimum:
        LOGGER.warning("%s must be at least %s; using %s", name, minimum, default)
        return default
    return value


def _read_decimal_env(name: str, default: Decimal, *, minimum: Decimal) -> Decimal:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        LOGGER.warning("Invalid %s=%s; falling back to %s", name, raw, default)
        return default
    if not value.is_finite() or value < minimum:
        LOGGER.warning("%s must be at least %s; using %s", name, minimum, default)
        return default
    return value


@dataclass(frozen=True)
class ProjectionSettings:
    """Tunable parameters of the default alive heuristic."""

    trend_window_weeks: int = DEFAULT_TREND_WINDOW
    min_weekly_improvement: Decimal = DEFAULT_MIN_WEEKLY_IMPROVEMENT
    max_horizon_weeks: int = DEFAULT_MAX_HORIZON
    funding_buffer: Decimal = DEFAULT_FUNDING_BUFFER

    @classmethod
    def from_env(cls) -> "ProjectionSettings":
        return cls(
            trend_window_weeks=_read_int_env(TREND_WINDOW_ENV, DEFAULT_TREND_WINDOW, minimum=2),
            min_weekly_improvement=_read_decimal_env(
                MIN_WEEKLY_IMPROVEMENT_ENV, DEFAULT_MIN_WEEKLY_IMPROVEMENT, minimum=Decimal("0")
            ),
            max_horizon_weeks=_read_int_env(MAX_HORIZON_ENV, DEFAULT_MAX_HORIZON, minimum=1),
            funding_buffer=_read_decimal_env(
                FUNDING_BUFFER_ENV, DEFAULT_FUNDING_BUFFER, minimum=Decimal("1")
            ),
        )


@dataclass(frozen=True)
class EbitdaPoint:
    week_start: date
    ebitda: Decimal


@dataclass(frozen=True)
class DefaultAliveStatus:
    """Derived classification; projection fields are ``None`` when not applicable."""

    is_default_alive: bool
    weekly_trend: Optional[Decimal] = None
    weeks_until_profitability: Optional[int] = None
    projected_profitability_date: Optional[date] = None
    projected_burn: Optional[Decimal] = None
    projected_capital_needed: Optional[Decimal] = None


def _to_decimal(value: Decimal | int | float | str | None) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def _cents(value: Optional[Decimal]) -> Optional[Decimal]:
    if value is None:
        return None
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def weekly_trend(points: Sequence[EbitdaPoint]) -> Optional[Decimal]:
    """Return the least-squares EBITDA slope per week, or ``None`` without enough data.

    ``points`` may be in any order; gaps between weeks are honoured by using
    the distance in weeks from the oldest point as the abscissa.
    """

    if len(points) < 2:
        return None
    ordered = sorted(points, key=lambda point: point.week_start)
    origin = ordered[0].week_start
    xs = [Decimal((point.week_start - origin).days) / Decimal(7) for point in ordered]
    ys = [_to_decimal(point.ebitda) for point in ordered]

    count = Decimal(len(ordered))
    mean_x = sum(xs, Decimal(0)) / count
    mean_y = sum(ys, Decimal(0)) / count
    denominator = sum(((x - mean_x) ** 2 for x in xs), Decimal(0))
    if denominator == 0:
        return None
    numerator = sum(((x - mean_x) * (y - mean_y) for x, y in zip(xs, ys)), Decimal(0))
    return numerator / denominator


def project_status(
    history: Sequence[EbitdaPoint],
    current_funding: Decimal | int | float | str | None = None,
    settings: ProjectionSettings | None = None,
) -> DefaultAliveStatus:
    """Classify the latest week and project the path to profitability.

    ``history`` holds stored snapshots newest first; only the first
    ``trend_window_weeks`` entries are considered. The function never raises
    for missing data: an empty or single-point history yields ``None``
    projections.
    """

    settings = settings or ProjectionSettings()
    if not history:
        return DefaultAliveStatus(is_default_alive=False)

    window = sorted(history, key=lambda point: point.week_start, reverse=True)
    window = window[: settings.trend_window_weeks]
    latest = window[0]
    latest_ebitda = _to_decimal(latest.ebitda)
    if latest_ebitda >= 0:
        return DefaultAliveStatus(
            is_default_alive=True, weekly_trend=_cents(weekly_trend(window))
        )

    slope = weekly_trend(window)
    if slope is None or slope <= max(settings.min_weekly_improvement, Decimal(0)):
        return DefaultAliveStatus(is_default_alive=False, weekly_trend=_cents(slope))

    weeks = int((-latest_ebitda / slope).to_integral_value(rounding=ROUND_CEILING))
    if weeks > settings.max_horizon_weeks:
        return DefaultAliveStatus(is_default_alive=False, weekly_trend=_cents(slope))

    burn = Decimal(0)
    for offset in range(weeks):
        projected = latest_ebitda + slope * offset
        if projected < 0:
            burn -= projected
    burn = burn.quantize(CENT, rounding=ROUND_HALF_UP)

    funding = _to_decimal(current_funding)
    capital_needed = max(burn - funding, Decimal(0)).quantize(CENT, rounding=ROUND_HALF_UP)
    return DefaultAliveStatus(
        is_default_alive=burn * settings.funding_buffer <= funding,
        weekly_trend=_cents(slope),
        weeks_until_profitability=weeks,
        projected_profitability_date=latest.week_start + timedelta(weeks=weeks),
        projected_burn=burn,
        projected_capital_needed=capital_needed,
    )
