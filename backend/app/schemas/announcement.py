from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.announcement import AnnouncementType


class AnnouncementBase(BaseModel):
    """Shared attributes for dashboard announcements."""

    title: str = Field(..., min_length=1, max_length=200)
    content: str = Field(..., min_length=1)
    type: AnnouncementType = Field(default=AnnouncementType.INFO)
    is_active: bool = Field(default=True)
    expires_at: Optional[datetime] = Field(
        default=None, description="Hidden from members after this instant; never expires when null"
    )


class AnnouncementCreate(AnnouncementBase):
    @field_validator("title", "content")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("value cannot be blank")
        return stripped


class AnnouncementUpdate(BaseModel):
    """Partial update; ``expires_at`` may be set to null to remove the expiry."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1)
    type: Optional[AnnouncementType] = None
    is_active: Optional[bool] = None
    expires_at: Optional[datetime] = None


class AnnouncementRead(AnnouncementBase):
    id: str
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
