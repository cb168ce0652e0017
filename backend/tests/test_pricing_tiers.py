from __future__ import annotations

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from backend.app import models
from backend.app.database import Base, build_engine_kwargs
from backend.app.services import PricingTierService

TIERS = "/admin/pricing-tiers"


def test_no_current_tier_returns_404(client) -> None:
    assert client.get(f"{TIERS}/current").status_code == 404


def test_creating_a_current_tier_replaces_the_previous_one(client, db_session) -> None:
    first = client.post(
        TIERS, json={"amount": "49.00", "effective_date": "2024-01-01T00:00:00", "is_current_tier": True}
    )
    second = client.post(
        TIERS, json={"amount": "59.00", "effective_date": "2024-06-01T00:00:00", "is_current_tier": True}
    )

    assert first.status_code == 201, first.text
    assert second.status_code == 201, second.text

    current = client.get(f"{TIERS}/current").json()
    assert current["id"] == second.json()["id"]
    assert Decimal(current["amount"]) == Decimal("59.00")

    db_session.expire_all()
    flagged = db_session.query(models.PricingTier).filter_by(is_current_tier=True).all()
    assert len(flagged) == 1


def test_set_current_tier(client) -> None:
    old = client.post(
        TIERS, json={"amount": "39.00", "effective_date": "2023-01-01T00:00:00"}
    ).json()
    client.post(
        TIERS, json={"amount": "49.00", "effective_date": "2024-01-01T00:00:00", "is_current_tier": True}
    )

    response = client.put(f"{TIERS}/{old['id']}/set-current")

    assert response.status_code == 200
    assert response.json()["is_current_tier"] is True
    assert client.get(f"{TIERS}/current").json()["id"] == old["id"]
    listing = client.get(TIERS).json()
    assert [tier["is_current_tier"] for tier in listing] == [False, True]


def test_set_current_tier_unknown_id(client) -> None:
    response = client.put(f"{TIERS}/00000000-0000-0000-0000-000000000000/set-current")

    assert response.status_code == 404


def test_tier_amount_must_be_positive(client) -> None:
    assert client.post(TIERS, json={"amount": "0"}).status_code == 422


@pytest.fixture
def tier_sessions(tmp_path):
    url = f"sqlite:///{(tmp_path / 'tiers.db').as_posix()}"
    file_engine = create_engine(url, **build_engine_kwargs(url))
    Base.metadata.create_all(bind=file_engine)
    yield sessionmaker(bind=file_engine, autoflush=False)
    file_engine.dispose()


def test_database_rejects_a_second_current_tier(tier_sessions) -> None:
    with tier_sessions() as session:
        session.add(models.PricingTier(amount=Decimal("49.00"), is_current_tier=True))
        session.commit()

    with tier_sessions() as session:
        session.add(models.PricingTier(amount=Decimal("59.00"), is_current_tier=True))
        with pytest.raises(IntegrityError):
            session.commit()
        session.rollback()

    with tier_sessions() as session:
        assert session.query(models.PricingTier).filter_by(is_current_tier=True).count() == 1


def test_switching_tiers_repeatedly_keeps_one_current(tier_sessions) -> None:
    with tier_sessions() as session:
        tiers = [
            models.PricingTier(amount=Decimal(amount), is_current_tier=False)
            for amount in ("39.00", "49.00", "59.00")
        ]
        session.add_all(tiers)
        session.commit()
        tier_ids = [tier.id for tier in tiers]

    for tier_id in [*tier_ids, tier_ids[0], tier_ids[0]]:
        with tier_sessions() as session:
            PricingTierService.set_current_tier(session, tier_id)

    with tier_sessions() as session:
        current = session.query(models.PricingTier).filter_by(is_current_tier=True).all()
        assert [tier.id for tier in current] == [tier_ids[0]]
