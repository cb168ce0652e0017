"""Business logic for the dashboard announcements."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas

LOGGER = logging.getLogger(__name__)


class AnnouncementNotFoundError(LookupError):
    """Raised when the requested announcement does not exist."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AnnouncementService:
    """Create, edit and publish announcements.

    Expiry instants are stored in UTC. Deleting an announcement only
    deactivates it so the admin listing keeps its history.
    """

    NON_NULLABLE_FIELDS = ("title", "content", "type", "is_active")

    @staticmethod
    def list_active(db: Session, *, now: Optional[datetime] = None) -> List[models.Announcement]:
        moment = _as_utc(now) or _utcnow()
        return (
            db.query(models.Announcement)
            .filter(models.Announcement.is_active.is_(True))
            .filter(
                or_(
                    models.Announcement.expires_at.is_(None),
                    models.Announcement.expires_at >= moment,
                )
            )
            .order_by(models.Announcement.created_at.desc())
            .all()
        )

    @staticmethod
    def list_all(db: Session) -> List[models.Announcement]:
        return db.query(models.Announcement).order_by(models.Announcement.created_at.desc()).all()

    @staticmethod
    def require_announcement(db: Session, announcement_id: str) -> models.Announcement:
        announcement = (
            db.query(models.Announcement)
            .filter(models.Announcement.id == announcement_id)
            .first()
        )
        if announcement is None:
            raise AnnouncementNotFoundError("Announcement not found")
        return announcement

    @staticmethod
    def create_announcement(
        db: Session,
        data: schemas.AnnouncementCreate,
        *,
        actor: Optional[str] = None,
    ) -> models.Announcement:
        now = _utcnow()
        announcement = models.Announcement(
            title=data.title,
            content=data.content,
            type=data.type,
            is_active=data.is_active,
            expires_at=_as_utc(data.expires_at),
            created_by=actor,
            created_at=now,
            updated_at=now,
        )
        try:
            db.add(announcement)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(announcement)
        LOGGER.info("Created %s announcement %s", announcement.type.value, announcement.id)
        return announcement

    @classmethod
    def update_announcement(
        cls,
        db: Session,
        announcement: models.Announcement,
        data: schemas.AnnouncementUpdate,
    ) -> models.Announcement:
        changes = data.model_dump(exclude_unset=True)
        for field in cls.NON_NULLABLE_FIELDS:
            if field in changes and changes[field] is None:
                raise ValueError(f"{field} cannot be null")
        if "expires_at" in changes:
            changes["expires_at"] = _as_utc(changes["expires_at"])
        for field, value in changes.items():
            setattr(announcement, field, value)
        announcement.updated_at = _utcnow()
        try:
            db.add(announcement)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(announcement)
        return announcement

    @staticmethod
    def deactivate_announcement(
        db: Session, announcement: models.Announcement
    ) -> models.Announcement:
        announcement.is_active = False
        announcement.updated_at = _utcnow()
        try:
            db.add(announcement)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(announcement)
        LOGGER.info("Deactivated announcement %s", announcement.id)
        return announcement
