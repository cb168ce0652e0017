from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from backend.app import models
from backend.app.services import EbitdaSnapshotService

PREFIX = "/default-alive-or-dead"


def _calculate(client, week: str, funding: str | None = None):
    payload = {"week_start_date": week}
    if funding is not None:
        payload["current_funding"] = funding
    return client.post(f"{PREFIX}/calculate-ebitda", json=payload)


def test_calculate_ebitda_returns_normalized_snapshot(client, add_payment) -> None:
    add_payment("120.50", datetime(2024, 12, 2, 8, 0))
    entry = client.post(
        f"{PREFIX}/financial-entries",
        json={"week_start_date": "2024-11-30", "operating_expenses": "200.00"},
    )
    assert entry.status_code == 201, entry.text

    response = _calculate(client, "2024-12-05", "1000")

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["week_start_date"] == "2024-11-30"
    assert Decimal(data["revenue"]) == Decimal("120.50")
    assert Decimal(data["operating_expenses"]) == Decimal("200.00")
    assert Decimal(data["ebitda"]) == Decimal("-79.50")
    assert Decimal(data["current_funding"]) == Decimal("1000.00")
    assert data["is_default_alive"] is False


def test_calculate_ebitda_twice_keeps_one_snapshot(client, db_session) -> None:
    first = _calculate(client, "2024-11-30").json()
    second = _calculate(client, "2024-12-06").json()

    assert first["id"] == second["id"]
    assert db_session.query(models.EbitdaSnapshot).count() == 1


def test_calculate_ebitda_rejects_malformed_week(client, db_session) -> None:
    response = _calculate(client, "30/11/2024")

    assert response.status_code == 422
    assert db_session.query(models.EbitdaSnapshot).count() == 0


def test_calculate_ebitda_rejects_negative_funding(client) -> None:
    response = _calculate(client, "2024-11-30", "-5")

    assert response.status_code == 422


def test_only_input_edits_are_recorded_in_activity_log(client, security_settings) -> None:
    client.post(
        f"{PREFIX}/financial-entries",
        json={"week_start_date": "2024-11-30", "operating_expenses": "10"},
    )
    _calculate(client, "2024-11-30")

    response = client.get("/admin/activity")

    assert response.status_code == 200
    assert [item["action"] for item in response.json()] == ["save_financial_entry"]
    assert response.json()[0]["admin_id"] == security_settings["username"]
    assert response.json()[0]["details"] == {"week_start_date": "2024-11-30"}


def test_calculate_ebitda_surfaces_storage_failures(client, monkeypatch) -> None:
    def fail(*_args, **_kwargs):
        raise SQLAlchemyError("boom")

    monkeypatch.setattr(EbitdaSnapshotService, "calculate_and_store", fail)

    response = _calculate(client, "2024-11-30")

    assert response.status_code == 500
    assert response.json()["detail"] == "Unable to store the EBITDA snapshot."


def test_current_status_without_snapshots(client) -> None:
    response = client.get(f"{PREFIX}/current-status")

    assert response.status_code == 200
    assert response.json() == {
        "current_snapshot": None,
        "is_default_alive": False,
        "weekly_ebitda_trend": None,
        "projected_profitability_date": None,
        "projected_capital_needed": None,
        "weeks_until_profitability": None,
    }


def test_current_status_projects_profitability(client) -> None:
    for week, expenses in (("2024-11-16", "400"), ("2024-11-23", "300"), ("2024-11-30", "200")):
        client.post(
            f"{PREFIX}/financial-entries",
            json={"week_start_date": week, "operating_expenses": expenses},
        )
        _calculate(client, week, "250")

    data = client.get(f"{PREFIX}/current-status").json()

    assert data["current_snapshot"]["week_start_date"] == "2024-11-30"
    assert data["is_default_alive"] is False
    assert data["weekly_ebitda_trend"] == "100.00"
    assert data["weeks_until_profitability"] == 2
    assert data["projected_profitability_date"] == "2024-12-14"
    assert Decimal(data["projected_capital_needed"]) == Decimal("50.00")


def test_weekly_trends_and_listing(client) -> None:
    for week in ("2024-11-16", "2024-11-23", "2024-11-30"):
        _calculate(client, week)

    trends = client.get(f"{PREFIX}/weekly-trends", params={"weeks": 2})
    listing = client.get(f"{PREFIX}/ebitda-snapshots", params={"limit": 1, "skip": 1})

    assert [item["week_start_date"] for item in trends.json()] == ["2024-11-30", "2024-11-23"]
    assert listing.json()["total"] == 3
    assert [item["week_start_date"] for item in listing.json()["items"]] == ["2024-11-23"]


def test_weekly_trends_validates_range(client) -> None:
    assert client.get(f"{PREFIX}/weekly-trends", params={"weeks": 0}).status_code == 422
    assert client.get(f"{PREFIX}/weekly-trends", params={"weeks": 105}).status_code == 422


def test_get_snapshot_by_any_day_of_the_week(client) -> None:
    _calculate(client, "2024-11-30")

    found = client.get(f"{PREFIX}/ebitda-snapshots/2024-12-04")
    missing = client.get(f"{PREFIX}/ebitda-snapshots/2024-12-07")
    malformed = client.get(f"{PREFIX}/ebitda-snapshots/yesterday")

    assert found.status_code == 200
    assert found.json()["week_start_date"] == "2024-11-30"
    assert missing.status_code == 404
    assert malformed.status_code == 400


def test_week_comparison(client, add_payment) -> None:
    add_payment("100.00", datetime(2024, 11, 25, 12, 0))
    add_payment("150.00", datetime(2024, 12, 3, 12, 0))
    _calculate(client, "2024-11-23")
    _calculate(client, "2024-11-30")

    response = client.get(
        f"{PREFIX}/week-comparison",
        params={"first_week": "2024-11-23", "second_week": "2024-11-30"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["first_week"]["week_start_date"] == "2024-11-23"
    assert Decimal(data["revenue_change_pct"]) == Decimal("50.00")
    assert Decimal(data["ebitda_change_pct"]) == Decimal("50.00")
    assert data["operating_expenses_change_pct"] is None


def test_endpoints_require_a_token(client) -> None:
    client.headers.pop("Authorization")

    response = client.get(f"{PREFIX}/current-status")

    assert response.status_code == 401


def test_endpoints_reject_non_admin_users(client, member_headers) -> None:
    response = client.post(
        f"{PREFIX}/calculate-ebitda",
        json={"week_start_date": "2024-11-30"},
        headers=member_headers,
    )

    assert response.status_code == 403


def test_weeks_at_the_edges_of_the_calendar_are_client_errors(client, db_session) -> None:
    assert _calculate(client, "9999-12-31").status_code == 422
    assert _calculate(client, "0001-01-01").status_code == 422
    assert client.get(f"{PREFIX}/ebitda-snapshots/0001-01-01").status_code == 400
    comparison = client.get(
        f"{PREFIX}/week-comparison",
        params={"first_week": "2024-11-30", "second_week": "9999-12-31"},
    )
    assert comparison.status_code == 400
    assert db_session.query(models.EbitdaSnapshot).count() == 0
