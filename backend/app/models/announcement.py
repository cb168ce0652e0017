"""Notices published by administrators on the default alive dashboard."""

from __future__ import annotations

import enum
import uuid

from sqlalchemy import Boolean, Column, DateTime, Enum, Index, String, Text

from ..database import Base
from ..db_types import GUID


class AnnouncementType(str, enum.Enum):
    """Visual category of an announcement."""

    INFO = "info"
    WARNING = "warning"
    MAINTENANCE = "maintenance"
    UPDATE = "update"
    PROMOTION = "promotion"


ANNOUNCEMENT_TYPE_ENUM = Enum(
    AnnouncementType,
    name="announcement_type_enum",
    values_callable=lambda enum_cls: [member.value for member in enum_cls],
    native_enum=True,
    validate_strings=True,
)


class Announcement(Base):
    """A dashboard notice, visible while active and not yet expired."""

    __tablename__ = "announcements"

    id = Column(GUID(), primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    content = Column(Text, nullable=False)
    type = Column(
        ANNOUNCEMENT_TYPE_ENUM,
        nullable=False,
        default=AnnouncementType.INFO,
        server_default=AnnouncementType.INFO.value,
    )
    is_active = Column(Boolean, nullable=False, default=True, server_default="1")
    expires_at = Column(DateTime(timezone=True), nullable=True)
    created_by = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)


Index("announcements_active_expiry_idx", Announcement.is_active, Announcement.expires_at)
