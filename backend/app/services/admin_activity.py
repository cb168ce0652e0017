"""Helpers to persist and read the administrator action log."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models

LOGGER = logging.getLogger(__name__)


class AdminActivityService:
    @staticmethod
    def log_action(
        db: Session,
        admin_id: str,
        action: str,
        resource_type: str,
        resource_id: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        entry = models.AdminActionLog(
            admin_id=admin_id,
            action=action,
            resource_type=resource_type,
            resource_id=resource_id,
            details=details or None,
        )
        try:
            db.add(entry)
            db.commit()
        except SQLAlchemyError:  # pragma: no cover - logging must not break the request
            db.rollback()
            LOGGER.exception("Unable to record admin action %s on %s", action, resource_type)

    @staticmethod
    def list_recent(db: Session, limit: int = 100) -> List[models.AdminActionLog]:
        return (
            db.query(models.AdminActionLog)
            .order_by(models.AdminActionLog.created_at.desc())
            .limit(max(limit, 1))
            .all()
        )
