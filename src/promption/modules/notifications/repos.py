"""Notification repository for database operations."""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import Select, delete, func, or_, select, update

from promption.api.dependencies import DBSession
from promption.modules.notifications.models import (
    Notification,
    NotificationStatus,
    NotificationType,
)


class NotificationRepository:
    """Repository for Notification database operations.

    Every query is filtered by recipient so one user can never reach
    another user's rows.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, notification: Notification) -> Notification:
        """Create a new notification."""
        self.session.add(notification)
        await self.session.flush()
        await self.session.refresh(notification)
        return notification

    async def get_for_recipient(
        self, notification_id: UUID, recipient_id: UUID
    ) -> Notification | None:
        """Get a notification only if it belongs to the recipient."""
        stmt = select(Notification).where(
            Notification.id == notification_id,
            Notification.recipient_id == recipient_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    def _filtered(
        self,
        stmt: Select,
        recipient_id: UUID,
        type: NotificationType | None,
        status: NotificationStatus | None,
        search: str | None,
    ) -> Select:
        stmt = stmt.where(Notification.recipient_id == recipient_id)
        if type is not None:
            stmt = stmt.where(Notification.type == type)
        if status is not None:
            stmt = stmt.where(Notification.status == status)
        if search:
            stmt = stmt.where(
                or_(
                    Notification.title.icontains(search, autoescape=True),
                    Notification.message.icontains(search, autoescape=True),
                )
            )
        return stmt

    async def list_for_recipient(
        self,
        recipient_id: UUID,
        page: int = 1,
        page_size: int = 20,
        type: NotificationType | None = None,
        status: NotificationStatus | None = None,
        search: str | None = None,
    ) -> tuple[list[Notification], int]:
        """List a recipient's notifications with pagination.

        Args:
            recipient_id: The recipient's UUID
            page: Page number (1-indexed)
            page_size: Number of items per page
            type: Only this notification type
            status: Only read or only unread
            search: Case-insensitive substring of title or message

        Returns:
            Tuple of (notifications list, total count), newest first
        """
        count_stmt = self._filtered(
            select(func.count()).select_from(Notification),
            recipient_id,
            type,
            status,
            search,
        )
        total = (await self.session.execute(count_stmt)).scalar_one()

        offset = (page - 1) * page_size
        stmt = (
            self._filtered(select(Notification), recipient_id, type, status, search)
            .order_by(Notification.created_at.desc(), Notification.id)
            .offset(offset)
            .limit(page_size)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all()), total

    async def unread_count(self, recipient_id: UUID) -> int:
        """Count a recipient's unread notifications."""
        stmt = (
            select(func.count())
            .select_from(Notification)
            .where(
                Notification.recipient_id == recipient_id,
                Notification.status == NotificationStatus.UNREAD,
            )
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def update(self, notification: Notification) -> Notification:
        """Flush pending changes on a notification and reload it."""
        await self.session.flush()
        await self.session.refresh(notification)
        return notification

    async def mark_all_read(self, recipient_id: UUID, read_at: datetime) -> int:
        """Mark every unread notification of a recipient as read.

        Returns:
            Number of notifications changed
        """
        stmt = (
            update(Notification)
            .where(
                Notification.recipient_id == recipient_id,
                Notification.status == NotificationStatus.UNREAD,
            )
            .values(status=NotificationStatus.READ, read_at=read_at)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def delete(self, notification: Notification) -> None:
        """Delete a single notification."""
        await self.session.delete(notification)
        await self.session.flush()

    async def delete_all(self, recipient_id: UUID) -> int:
        """Delete every notification of a recipient.

        Returns:
            Number of notifications deleted
        """
        stmt = (
            delete(Notification)
            .where(Notification.recipient_id == recipient_id)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        return result.rowcount


# Type alias for dependency injection
NotificationRepo = Annotated[NotificationRepository, Depends(NotificationRepository)]
