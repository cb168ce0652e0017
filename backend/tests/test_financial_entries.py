from __future__ import annotations

from decimal import Decimal

from backend.app import models, schemas
from backend.app.services import FinancialEntryService

ENTRIES = "/default-alive-or-dead/financial-entries"


def test_create_entry_normalizes_week_and_records_author(client, security_settings) -> None:
    response = client.post(
        ENTRIES,
        json={
            "week_start_date": "2024-12-04",
            "operating_expenses": "1250.40",
            "depreciation": "100",
            "notes": "Rent and utilities",
        },
    )

    assert response.status_code == 201, response.text
    data = response.json()
    assert data["week_start_date"] == "2024-11-30"
    assert Decimal(data["operating_expenses"]) == Decimal("1250.40")
    assert Decimal(data["amortization"]) == Decimal("0.00")
    assert data["created_by"] == security_settings["username"]


def test_saving_the_same_week_replaces_the_entry(client, db_session) -> None:
    first = client.post(ENTRIES, json={"week_start_date": "2024-11-30", "operating_expenses": "10"})
    second = client.post(ENTRIES, json={"week_start_date": "2024-12-01", "operating_expenses": "20"})

    assert first.json()["id"] == second.json()["id"]
    assert Decimal(second.json()["operating_expenses"]) == Decimal("20.00")
    assert db_session.query(models.FinancialEntry).count() == 1


def test_negative_amounts_are_rejected(client) -> None:
    response = client.post(
        ENTRIES, json={"week_start_date": "2024-11-30", "operating_expenses": "-1"}
    )

    assert response.status_code == 422


def test_list_update_and_delete_entry(client) -> None:
    for week in ("2024-11-23", "2024-11-30"):
        client.post(ENTRIES, json={"week_start_date": week, "operating_expenses": "50"})

    listing = client.get(ENTRIES)
    assert listing.status_code == 200
    assert listing.json()["total"] == 2
    latest = listing.json()["items"][0]
    assert latest["week_start_date"] == "2024-11-30"

    updated = client.put(f"{ENTRIES}/{latest['id']}", json={"amortization": "7.5"})
    assert updated.status_code == 200, updated.text
    assert Decimal(updated.json()["amortization"]) == Decimal("7.50")
    assert Decimal(updated.json()["operating_expenses"]) == Decimal("50.00")

    deleted = client.delete(f"{ENTRIES}/{latest['id']}")
    assert deleted.status_code == 204
    assert client.get(f"{ENTRIES}/{latest['id']}").status_code == 404
    assert client.get(ENTRIES).json()["total"] == 1


def test_update_rejects_null_amounts(client) -> None:
    created = client.post(ENTRIES, json={"week_start_date": "2024-11-30", "operating_expenses": "5"})

    response = client.put(f"{ENTRIES}/{created.json()['id']}", json={"operating_expenses": None})

    assert response.status_code == 400


def test_unknown_entry_returns_404(client) -> None:
    assert client.get(f"{ENTRIES}/00000000-0000-0000-0000-000000000000").status_code == 404


def test_resaving_a_week_keeps_the_original_author(db_session) -> None:
    FinancialEntryService.save_entry(
        db_session,
        schemas.FinancialEntryCreate(week_start_date="2024-11-30", operating_expenses="10"),
        actor="first-admin",
    )
    entry = FinancialEntryService.save_entry(
        db_session,
        schemas.FinancialEntryCreate(week_start_date="2024-12-02", operating_expenses="30"),
        actor="second-admin",
    )

    assert entry.created_by == "first-admin"
    assert entry.operating_expenses == Decimal("30.00")
