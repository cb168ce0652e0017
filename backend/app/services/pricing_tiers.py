"""Configuration service for the current membership pricing tier."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas

LOGGER = logging.getLogger(__name__)


class PricingTierNotFoundError(LookupError):
    """Raised when a pricing tier id does not exist."""


class PricingTierService:
    """Reads and replaces the current pricing tier.

    The current tier is always read from the database. Replacing it clears the
    previous flag and sets the new one within a single transaction; a partial
    unique index rejects a second current row if two switches still race.
    """

    @staticmethod
    def get_current_tier(db: Session) -> Optional[models.PricingTier]:
        return (
            db.query(models.PricingTier)
            .filter(models.PricingTier.is_current_tier.is_(True))
            .order_by(models.PricingTier.effective_date.desc())
            .first()
        )

    @staticmethod
    def list_tiers(db: Session) -> List[models.PricingTier]:
        return (
            db.query(models.PricingTier)
            .order_by(models.PricingTier.effective_date.desc())
            .all()
        )

    @staticmethod
    def _clear_current(db: Session) -> None:
        # SQLite ignores FOR UPDATE; the partial unique index still applies there.
        locked = (
            db.query(models.PricingTier.id)
            .filter(models.PricingTier.is_current_tier.is_(True))
            .with_for_update()
            .all()
        )
        LOGGER.debug("Clearing %d current pricing tier flag(s)", len(locked))
        db.execute(
            update(models.PricingTier)
            .where(models.PricingTier.is_current_tier.is_(True))
            .values(is_current_tier=False)
            .execution_options(synchronize_session="fetch")
        )

    @classmethod
    def create_tier(cls, db: Session, data: schemas.PricingTierCreate) -> models.PricingTier:
        tier = models.PricingTier(
            amount=Decimal(str(data.amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
            effective_date=data.effective_date or datetime.now(timezone.utc),
            is_current_tier=data.is_current_tier,
        )
        try:
            if data.is_current_tier:
                cls._clear_current(db)
            db.add(tier)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(tier)
        LOGGER.info("Created pricing tier %s (current=%s)", tier.id, tier.is_current_tier)
        return tier

    @classmethod
    def set_current_tier(cls, db: Session, tier_id: str) -> models.PricingTier:
        tier = db.query(models.PricingTier).filter(models.PricingTier.id == tier_id).first()
        if tier is None:
            raise PricingTierNotFoundError("Pricing tier not found")
        try:
            cls._clear_current(db)
            tier.is_current_tier = True
            db.add(tier)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(tier)
        LOGGER.info("Pricing tier %s is now current", tier.id)
        return tier
