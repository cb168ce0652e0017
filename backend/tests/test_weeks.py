from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from backend.app.weeks import (
    InvalidWeekStartError,
    normalize_week_start,
    parse_week_start,
    week_bounds,
    week_end_for,
)


def test_saturday_is_its_own_week_start() -> None:
    assert normalize_week_start(date(2024, 11, 30)) == datetime(2024, 11, 30)


def test_midweek_date_steps_back_to_saturday() -> None:
    assert normalize_week_start(date(2024, 12, 5)) == datetime(2024, 11, 30)
    assert normalize_week_start(datetime(2024, 12, 6, 23, 59, 59)) == datetime(2024, 11, 30)


def test_next_saturday_starts_a_new_week() -> None:
    assert normalize_week_start(date(2024, 12, 7)) == datetime(2024, 12, 7)


def test_sunday_belongs_to_the_previous_saturday() -> None:
    assert normalize_week_start(date(2024, 12, 1)) == datetime(2024, 11, 30)


def test_every_day_of_a_fortnight_is_contained_in_its_week() -> None:
    first = date(2024, 11, 23)
    for offset in range(14):
        day = first + timedelta(days=offset)
        bounds = week_bounds(day)
        assert bounds.start.weekday() == 5
        assert bounds.start.date() <= day < bounds.start.date() + timedelta(days=7)
        # normalizing the start again is a no-op
        assert normalize_week_start(bounds.start) == bounds.start


def test_week_end_is_friday_just_before_midnight() -> None:
    end = week_end_for(date(2024, 11, 30))

    assert end == datetime(2024, 12, 6, 23, 59, 59, 999000)
    assert end.weekday() == 4


def test_week_bounds_next_start_is_the_following_saturday() -> None:
    bounds = week_bounds(date(2024, 12, 3))

    assert bounds.start_date == date(2024, 11, 30)
    assert bounds.next_start == datetime(2024, 12, 7)
    assert bounds.end < bounds.next_start


@pytest.mark.parametrize(
    "raw",
    ["2024-12-05", "2024-12-05T10:30:00", "2024-12-05T10:30:00Z", date(2024, 12, 5)],
)
def test_parse_week_start_accepts_dates_and_datetimes(raw) -> None:
    assert parse_week_start(raw) == date(2024, 11, 30)


@pytest.mark.parametrize("raw", ["", "   ", None, "not-a-date", "2024-13-01"])
def test_parse_week_start_rejects_malformed_input(raw) -> None:
    with pytest.raises(InvalidWeekStartError):
        parse_week_start(raw)


@pytest.mark.parametrize("raw", ["0001-01-01", "9999-12-31", date(9999, 12, 28)])
def test_parse_week_start_rejects_weeks_outside_the_calendar(raw) -> None:
    with pytest.raises(InvalidWeekStartError):
        parse_week_start(raw)


def test_parse_week_start_accepts_the_outermost_complete_weeks() -> None:
    # 0001-01-01 is a Monday and 9999-12-31 a Friday.
    assert parse_week_start("0001-01-06") == date(1, 1, 6)
    assert parse_week_start("9999-12-24") == date(9999, 12, 18)
