"""Notification API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from promption.core.auth import CurrentUser
from promption.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MAX_TITLE_LENGTH
from promption.modules.notifications.models import (
    NotificationStatus,
    NotificationType,
)
from promption.modules.notifications.schemas import (
    BulkResultResponse,
    NotificationListResponse,
    NotificationResponse,
    NotificationUpdate,
    UnreadCountResponse,
)
from promption.modules.notifications.services import NotificationSvc


router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List notifications",
    description="List the caller's notifications, newest first.",
)
async def list_notifications(
    service: NotificationSvc,
    current_user: CurrentUser,
    page: int = Query(1, ge=1),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    type: NotificationType | None = Query(None),
    status_filter: NotificationStatus | None = Query(None, alias="status"),
    search: str | None = Query(None, max_length=MAX_TITLE_LENGTH),
) -> NotificationListResponse:
    """List notifications with filters."""
    items, total, unread = await service.list_notifications(
        current_user.id,
        page=page,
        page_size=page_size,
        type=type,
        status=status_filter,
        search=search,
    )
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in items],
        total=total,
        page=page,
        page_size=page_size,
        unread_count=unread,
    )


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    summary="Count unread notifications",
)
async def unread_count(
    service: NotificationSvc,
    current_user: CurrentUser,
) -> UnreadCountResponse:
    return UnreadCountResponse(unread_count=await service.unread_count(current_user.id))


@router.post(
    "/mark-all-read",
    response_model=BulkResultResponse,
    summary="Mark all notifications read",
)
async def mark_all_read(
    service: NotificationSvc,
    current_user: CurrentUser,
) -> BulkResultResponse:
    """Mark every unread notification read."""
    return BulkResultResponse(count=await service.mark_all_read(current_user.id))


@router.delete(
    "",
    response_model=BulkResultResponse,
    summary="Clear notifications",
    description="Delete all of the caller's notifications.",
)
async def clear_notifications(
    service: NotificationSvc,
    current_user: CurrentUser,
) -> BulkResultResponse:
    """Delete all notifications."""
    return BulkResultResponse(count=await service.clear_all(current_user.id))


@router.get(
    "/{notification_id}",
    response_model=NotificationResponse,
    summary="Get notification",
)
async def get_notification(
    notification_id: UUID,
    service: NotificationSvc,
    current_user: CurrentUser,
) -> NotificationResponse:
    notification = await service.get_notification(notification_id, current_user.id)
    return NotificationResponse.model_validate(notification)


@router.patch(
    "/{notification_id}",
    response_model=NotificationResponse,
    summary="Mark notification read or unread",
)
async def update_notification(
    notification_id: UUID,
    data: NotificationUpdate,
    service: NotificationSvc,
    current_user: CurrentUser,
) -> NotificationResponse:
    """Toggle a notification's read state."""
    notification = await service.set_read(notification_id, current_user.id, data.read)
    return NotificationResponse.model_validate(notification)


@router.delete(
    "/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete notification",
)
async def delete_notification(
    notification_id: UUID,
    service: NotificationSvc,
    current_user: CurrentUser,
) -> None:
    await service.delete_notification(notification_id, current_user.id)
