"""Pydantic schemas for notifications."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from promption.modules.notifications.models import (
    NotificationStatus,
    NotificationType,
)
from promption.modules.users.schemas import UserSummary
from promption.modules.workspaces.schemas import WorkspaceSummary


class NotificationResponse(BaseModel):
    """Schema for notification response data."""

    id: UUID
    type: NotificationType
    title: str
    message: str
    status: NotificationStatus
    read_at: datetime | None = None
    action_url: str | None = None
    data: dict[str, Any] | None = None
    prompt_id: UUID | None = None
    actor: UserSummary | None = None
    workspace: WorkspaceSummary | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationListResponse(BaseModel):
    """Paginated notifications plus the recipient's unread total."""

    items: list[NotificationResponse]
    total: int
    page: int
    page_size: int
    unread_count: int


class NotificationUpdate(BaseModel):
    """Toggle the read state of a notification."""

    read: bool


class UnreadCountResponse(BaseModel):
    unread_count: int


class BulkResultResponse(BaseModel):
    """Number of notifications touched by a bulk operation."""

    count: int
