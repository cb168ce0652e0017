"""Dashboard announcements: member listing and administrator management."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import schemas
from ..database import get_db
from ..security import CurrentUser, get_current_user, require_admin
from ..services import AdminActivityService, AnnouncementNotFoundError, AnnouncementService

LOGGER = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_user)])
admin_router = APIRouter(dependencies=[Depends(require_admin)])


def _require_announcement(db: Session, announcement_id: str):
    try:
        return AnnouncementService.require_announcement(db, announcement_id)
    except AnnouncementNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


def _storage_failure() -> HTTPException:
    LOGGER.exception("Failed to store announcement")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Unable to store the announcement.",
    )


@router.get("", response_model=List[schemas.AnnouncementRead])
def list_active_announcements(db: Session = Depends(get_db)) -> List[schemas.AnnouncementRead]:
    """Return the active announcements that have not expired yet."""

    return AnnouncementService.list_active(db)


@admin_router.get("", response_model=List[schemas.AnnouncementRead])
def list_all_announcements(db: Session = Depends(get_db)) -> List[schemas.AnnouncementRead]:
    return AnnouncementService.list_all(db)


@admin_router.post("", response_model=schemas.AnnouncementRead, status_code=status.HTTP_201_CREATED)
def create_announcement(
    payload: schemas.AnnouncementCreate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> schemas.AnnouncementRead:
    try:
        announcement = AnnouncementService.create_announcement(db, payload, actor=admin.user_id)
    except SQLAlchemyError as exc:
        raise _storage_failure() from exc
    AdminActivityService.log_action(
        db,
        admin.user_id,
        "create_announcement",
        "announcement",
        announcement.id,
        {"title": announcement.title, "type": announcement.type.value},
    )
    return announcement


@admin_router.put("/{announcement_id}", response_model=schemas.AnnouncementRead)
def update_announcement(
    announcement_id: str,
    payload: schemas.AnnouncementUpdate,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> schemas.AnnouncementRead:
    announcement = _require_announcement(db, announcement_id)
    try:
        announcement = AnnouncementService.update_announcement(db, announcement, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except SQLAlchemyError as exc:
        raise _storage_failure() from exc
    AdminActivityService.log_action(
        db,
        admin.user_id,
        "update_announcement",
        "announcement",
        announcement.id,
        payload.model_dump(mode="json", exclude_unset=True),
    )
    return announcement


@admin_router.delete("/{announcement_id}", response_model=schemas.AnnouncementRead)
def deactivate_announcement(
    announcement_id: str,
    db: Session = Depends(get_db),
    admin: CurrentUser = Depends(require_admin),
) -> schemas.AnnouncementRead:
    """Hide an announcement from members; the record itself is kept."""

    announcement = _require_announcement(db, announcement_id)
    try:
        announcement = AnnouncementService.deactivate_announcement(db, announcement)
    except SQLAlchemyError as exc:
        raise _storage_failure() from exc
    AdminActivityService.log_action(
        db, admin.user_id, "deactivate_announcement", "announcement", announcement.id
    )
    return announcement
