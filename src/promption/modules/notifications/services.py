"""Notification service for business logic."""

from datetime import UTC, datetime
from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends

from promption.core.errors import NotFoundError
from promption.modules.notifications.models import (
    Notification,
    NotificationStatus,
    NotificationType,
)
from promption.modules.notifications.repos import NotificationRepo


logger = structlog.get_logger()


class NotificationService:
    """Service for creating and managing a user's notifications."""

    def __init__(self, repo: NotificationRepo) -> None:
        self.repo = repo

    async def notify(
        self,
        recipient_id: UUID,
        type: NotificationType,
        title: str,
        message: str,
        *,
        actor_id: UUID | None = None,
        workspace_id: UUID | None = None,
        prompt_id: UUID | None = None,
        action_url: str | None = None,
        data: dict[str, Any] | None = None,
    ) -> Notification:
        """Append a notification in the caller's transaction.

        The row commits or rolls back together with the change that
        caused it.

        Args:
            recipient_id: The user to notify
            type: Event kind
            title: Short headline
            message: Body text
            actor_id: User whose action caused the event
            workspace_id: Workspace the event concerns
            prompt_id: Prompt the event concerns
            action_url: Client link for the notification
            data: Extra event payload

        Returns:
            The created notification
        """
        notification = await self.repo.create(
            Notification(
                recipient_id=recipient_id,
                type=type,
                title=title,
                message=message,
                actor_id=actor_id,
                workspace_id=workspace_id,
                prompt_id=prompt_id,
                action_url=action_url,
                data=data,
            )
        )
        logger.info(
            "notification_created",
            notification_id=str(notification.id),
            recipient_id=str(recipient_id),
            type=type.value,
        )
        return notification

    async def list_notifications(
        self,
        recipient_id: UUID,
        page: int = 1,
        page_size: int = 20,
        type: NotificationType | None = None,
        status: NotificationStatus | None = None,
        search: str | None = None,
    ) -> tuple[list[Notification], int, int]:
        """List notifications with the recipient's unread count.

        Returns:
            Tuple of (notifications, total matching, unread count)
        """
        items, total = await self.repo.list_for_recipient(
            recipient_id,
            page=page,
            page_size=page_size,
            type=type,
            status=status,
            search=search.strip() if search else None,
        )
        unread = await self.repo.unread_count(recipient_id)
        return items, total, unread

    async def unread_count(self, recipient_id: UUID) -> int:
        return await self.repo.unread_count(recipient_id)

    async def get_notification(
        self, notification_id: UUID, recipient_id: UUID
    ) -> Notification:
        """Get one of the recipient's notifications.

        Raises:
            NotFoundError: If missing or addressed to someone else
        """
        notification = await self.repo.get_for_recipient(notification_id, recipient_id)
        if notification is None:
            raise NotFoundError(
                "Notification not found",
                resource="notification",
                resource_id=str(notification_id),
            )
        return notification

    async def set_read(
        self, notification_id: UUID, recipient_id: UUID, read: bool
    ) -> Notification:
        """Mark a notification read or unread."""
        notification = await self.get_notification(notification_id, recipient_id)
        if read:
            notification.status = NotificationStatus.READ
            notification.read_at = notification.read_at or datetime.now(UTC)
        else:
            notification.status = NotificationStatus.UNREAD
            notification.read_at = None
        return await self.repo.update(notification)

    async def mark_all_read(self, recipient_id: UUID) -> int:
        count = await self.repo.mark_all_read(recipient_id, datetime.now(UTC))
        logger.info("notifications_marked_read", recipient_id=str(recipient_id), count=count)
        return count

    async def delete_notification(self, notification_id: UUID, recipient_id: UUID) -> None:
        notification = await self.get_notification(notification_id, recipient_id)
        await self.repo.delete(notification)

    async def clear_all(self, recipient_id: UUID) -> int:
        """Delete every notification of the recipient."""
        count = await self.repo.delete_all(recipient_id)
        logger.info("notifications_cleared", recipient_id=str(recipient_id), count=count)
        return count


# Type alias for dependency injection
NotificationSvc = Annotated[NotificationService, Depends(NotificationService)]
