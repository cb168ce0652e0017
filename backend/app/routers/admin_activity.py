"""Read-only view over the administrator action log."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..security import require_admin
from ..services import AdminActivityService

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("", response_model=List[schemas.AdminActionLogRead])
def list_recent_activity(
    db: Session = Depends(get_db),
    limit: int = Query(100, ge=1, le=500),
) -> List[schemas.AdminActionLogRead]:
    return AdminActivityService.list_recent(db, limit)
