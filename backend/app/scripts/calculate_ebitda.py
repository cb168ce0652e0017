"""Recompute the weekly EBITDA snapshots of one week or a range of weeks."""

from __future__ import annotations

import argparse
import logging
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Iterator, Optional

from sqlalchemy.exc import SQLAlchemyError

from ..database import session_scope
from ..services import EbitdaSnapshotService, SnapshotValidationError
from ..weeks import WEEK_LENGTH, InvalidWeekStartError, parse_week_start

LOGGER = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _week_arg(raw: str) -> date:
    try:
        return parse_week_start(raw)
    except InvalidWeekStartError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _funding_arg(raw: str) -> Decimal:
    try:
        value = Decimal(raw)
    except InvalidOperation as exc:
        raise argparse.ArgumentTypeError(f"invalid amount: {raw!r}") from exc
    if not value.is_finite() or value < 0:
        raise argparse.ArgumentTypeError("funding must be a non-negative amount")
    return value


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Recompute and store the EBITDA snapshot of a week (or every week up to "
            "--through). Any date inside a week selects that week."
        )
    )
    parser.add_argument("--week", type=_week_arg, required=True, help="First week to compute.")
    parser.add_argument(
        "--through",
        type=_week_arg,
        default=None,
        help="Last week to compute (inclusive); defaults to --week.",
    )
    parser.add_argument(
        "--funding",
        type=_funding_arg,
        default=None,
        help="Current funding stored with every recomputed snapshot.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args(argv)
    if args.through is not None and args.through < args.week:
        parser.error("--through must not be earlier than --week")
    return args


def iter_weeks(first: date, last: date) -> Iterator[date]:
    """Yield every week start from ``first`` to ``last`` inclusive."""

    current = first
    while current <= last:
        yield current
        current += WEEK_LENGTH


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.verbose)

    last_week = args.through or args.week
    computed = 0
    try:
        with session_scope() as db:
            for week_start in iter_weeks(args.week, last_week):
                snapshot = EbitdaSnapshotService.calculate_and_store(db, week_start, args.funding)
                computed += 1
                LOGGER.info(
                    "Week %s: revenue=%s operating_expenses=%s ebitda=%s default_alive=%s",
                    snapshot.week_start_date,
                    snapshot.revenue,
                    snapshot.operating_expenses,
                    snapshot.ebitda,
                    snapshot.is_default_alive,
                )
    except SnapshotValidationError as exc:
        LOGGER.error("Invalid input: %s", exc)
        return 2
    except SQLAlchemyError:
        LOGGER.error("Stopped after %s week(s) because of a database error", computed)
        return 1

    LOGGER.info("Recomputed %s weekly snapshot(s)", computed)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
