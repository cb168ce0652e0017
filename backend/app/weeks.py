"""Canonical week boundaries used to bucket financial figures.

Every week starts on Saturday at midnight and ends on the following Friday at
23:59:59.999. Inputs are expected in the single reference timezone used by the
application; naive values are treated as local time.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta

# ``date.weekday()`` ordinal: Monday is 0, Saturday is 5.
WEEK_ANCHOR_WEEKDAY = 5
WEEK_LENGTH = timedelta(days=7)
WEEK_END_TIME = time(23, 59, 59, 999000)


class InvalidWeekStartError(ValueError):
    """Raised when a week start value cannot be parsed."""


@dataclass(frozen=True)
class WeekBounds:
    """Inclusive start and end instants of a canonical week."""

    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def next_start(self) -> datetime:
        return self.start + WEEK_LENGTH


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def normalize_week_start(value: date | datetime) -> datetime:
    """Return the most recent Saturday at midnight on or before ``value``.

    Raises ``InvalidWeekStartError`` when that Saturday falls before ``date.min``.
    """

    day = _as_date(value)
    days_back = (day.weekday() - WEEK_ANCHOR_WEEKDAY) % 7
    try:
        return datetime.combine(day - timedelta(days=days_back), time.min)
    except OverflowError as exc:
        raise InvalidWeekStartError(
            f"The week of {day.isoformat()} starts before the supported calendar range"
        ) from exc


def _supported_week_start(value: date | datetime) -> date:
    start = normalize_week_start(value)
    try:
        start + WEEK_LENGTH
    except OverflowError as exc:
        raise InvalidWeekStartError(
            f"The week of {_as_date(value).isoformat()} ends after the supported calendar range"
        ) from exc
    return start.date()


def week_end_for(week_start: date | datetime) -> datetime:
    """Return the Friday 23:59:59.999 closing the week that starts on ``week_start``."""

    return datetime.combine(_as_date(week_start) + timedelta(days=6), WEEK_END_TIME)


def week_bounds(value: date | datetime) -> WeekBounds:
    start = normalize_week_start(value)
    return WeekBounds(start=start, end=week_end_for(start))


def parse_week_start(raw: str | date | datetime | None) -> date:
    """Parse an ISO-8601 date or date-time and return its normalized week start."""

    if isinstance(raw, (date, datetime)):
        return _supported_week_start(raw)
    if raw is None or not str(raw).strip():
        raise InvalidWeekStartError("week_start_date is required")

    candidate = str(raw).strip()
    try:
        parsed: date | datetime = date.fromisoformat(candidate)
    except ValueError:
        try:
            parsed = datetime.fromisoformat(candidate.replace("Z", "+00:00"))
        except ValueError as exc:
            raise InvalidWeekStartError(
                "Invalid week_start_date, expected an ISO-8601 date (YYYY-MM-DD)"
            ) from exc
    return _supported_week_start(parsed)
