"""Notification schemas."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class NotificationResponse(BaseModel):
    """Schema for notification response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    type: str
    data: dict[str, Any]
    created_at: datetime
    read_at: datetime | None


class NotificationListResponse(BaseModel):
    """Schema for notification list."""

    notifications: list[NotificationResponse]
    unread_count: int
