"""Administrative endpoints for the membership pricing tiers."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..security import CurrentUser, require_admin
from ..services import AdminActivityService, PricingTierNotFoundError, PricingTierService

LOGGER = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("", response_model=List[schemas.PricingTierRead])
def list_tiers(db: Session = Depends(get_db)) -> List[schemas.PricingTierRead]:
    return PricingTierService.list_tiers(db)


@router.get("/current", response_model=schemas.PricingTierRead)
def current_tier(db: Session = Depends(get_db)) -> schemas.PricingTierRead:
    tier = PricingTierService.get_current_tier(db)
    if tier is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No current pricing tier")
    return tier


@router.post("", response_model=schemas.PricingTierRead, status_code=status.HTTP_201_CREATED)
def create_tier(
    payload: schemas.PricingTierCreate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> schemas.PricingTierRead:
    try:
        tier = PricingTierService.create_tier(db, payload)
    except SQLAlchemyError as exc:
        LOGGER.exception("Failed to create pricing tier")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to create the pricing tier.",
        ) from exc
    AdminActivityService.log_action(
        db,
        admin.user_id,
        "create_pricing_tier",
        "pricing_tier",
        tier.id,
        {"amount": str(tier.amount), "is_current_tier": tier.is_current_tier},
    )
    return tier


@router.put("/{tier_id}/set-current", response_model=schemas.PricingTierRead)
def set_current_tier(
    tier_id: str,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> schemas.PricingTierRead:
    try:
        tier = PricingTierService.set_current_tier(db, tier_id)
    except PricingTierNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        LOGGER.exception("Failed to activate pricing tier %s", tier_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to update the pricing tier.",
        ) from exc
    AdminActivityService.log_action(
        db, admin.user_id, "set_current_pricing_tier", "pricing_tier", tier.id
    )
    return tier
