from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from backend.app import models
from backend.app.database import Base, build_engine_kwargs
from backend.app.scripts import calculate_ebitda


@pytest.fixture
def script_sessions(tmp_path, monkeypatch):
    url = f"sqlite:///{(tmp_path / 'cli.db').as_posix()}"
    file_engine = create_engine(url, **build_engine_kwargs(url))
    Base.metadata.create_all(bind=file_engine)
    SessionFactory = sessionmaker(bind=file_engine, autoflush=False)

    @contextmanager
    def _scope():
        session = SessionFactory()
        try:
            yield session
            session.commit()
        finally:
            session.close()

    monkeypatch.setattr(calculate_ebitda, "session_scope", _scope)
    yield SessionFactory
    file_engine.dispose()


def test_recomputes_every_week_in_range(script_sessions) -> None:
    with script_sessions() as session:
        session.add(
            models.Payment(
                user_id="member-1",
                amount=Decimal("60.00"),
                payment_date=datetime(2024, 12, 10, 12, 0),
                recorded_by="admin@example.com",
            )
        )
        session.commit()

    exit_code = calculate_ebitda.main(
        ["--week", "2024-12-02", "--through", "2024-12-20", "--funding", "500"]
    )

    assert exit_code == 0
    with script_sessions() as session:
        snapshots = (
            session.query(models.EbitdaSnapshot)
            .order_by(models.EbitdaSnapshot.week_start_date)
            .all()
        )
        assert [snapshot.week_start_date for snapshot in snapshots] == [
            date(2024, 11, 30),
            date(2024, 12, 7),
            date(2024, 12, 14),
        ]
        assert snapshots[1].revenue == Decimal("60.00")
        assert all(snapshot.current_funding == Decimal("500.00") for snapshot in snapshots)


def test_iter_weeks_is_inclusive() -> None:
    weeks = list(calculate_ebitda.iter_weeks(date(2024, 11, 30), date(2024, 12, 14)))

    assert weeks == [date(2024, 11, 30), date(2024, 12, 7), date(2024, 12, 14)]


@pytest.mark.parametrize(
    "argv",
    [
        ["--week", "nope"],
        ["--week", "2024-12-07", "--through", "2024-11-30"],
        ["--week", "2024-12-07", "--funding", "-10"],
    ],
)
def test_invalid_arguments_exit_with_usage_error(argv, script_sessions) -> None:
    with pytest.raises(SystemExit) as excinfo:
        calculate_ebitda.main(argv)

    assert excinfo.value.code == 2
