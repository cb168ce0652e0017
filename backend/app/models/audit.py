"""Audit trail of administrator actions."""

from __future__ import annotations

import uuid

from sqlalchemy import JSON, Column, DateTime, Index, String, func

from ..database import Base
from ..db_types import GUID


class AdminActionLog(Base):
    """Records a state-changing request performed by an administrator."""

    __tablename__ = "admin_action_logs"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    admin_id = Column(String(100), nullable=False)
    action = Column(String(100), nullable=False)
    resource_type = Column(String(100), nullable=False)
    resource_id = Column(String(100), nullable=True)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


Index("admin_action_logs_created_at_idx", AdminActionLog.created_at)
