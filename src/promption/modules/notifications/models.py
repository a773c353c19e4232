"""Notification database model."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, Index, String, Text
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from promption.core.constants import (
    MAX_NOTIFICATION_TYPE_LENGTH,
    MAX_STATUS_LENGTH,
    MAX_TITLE_LENGTH,
    MAX_URL_LENGTH,
)
from promption.core.database.base import Base, TimestampMixin, UUIDMixin
from promption.core.database.types import UTCDateTime


if TYPE_CHECKING:
    from promption.modules.users.models import User
    from promption.modules.workspaces.models import Workspace


class NotificationType(str, Enum):
    """Events a user can be notified about."""

    WORKSPACE_INVITE = "workspace_invite"
    MEMBER_JOINED = "member_joined"
    ROLE_CHANGED = "role_changed"
    MEMBER_REMOVED = "member_removed"
    MEMBER_LEFT = "member_left"
    OWNERSHIP_TRANSFERRED = "ownership_transferred"
    SYSTEM = "system"


class NotificationStatus(str, Enum):
    """Read state of a notification."""

    UNREAD = "unread"
    READ = "read"


class Notification(Base, UUIDMixin, TimestampMixin):
    """A user-visible record of something that happened.

    Attributes:
        recipient_id: The user who sees the notification
        type: What kind of event it records
        title: Short headline
        message: Body text
        status: Whether the recipient has read it
        read_at: When it was marked read
        actor_id: The user whose action caused it, if any
        workspace_id: The workspace it concerns, if any
        prompt_id: The prompt it concerns, if any
        action_url: Where a client should navigate on click
        data: Free-form event payload
    """

    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_recipient_status", "recipient_id", "status"),
    )

    recipient_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[NotificationType] = mapped_column(
        SAEnum(
            NotificationType,
            native_enum=False,
            length=MAX_NOTIFICATION_TYPE_LENGTH,
            values_callable=lambda kinds: [kind.value for kind in kinds],
        ),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(MAX_TITLE_LENGTH),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    status: Mapped[NotificationStatus] = mapped_column(
        SAEnum(
            NotificationStatus,
            native_enum=False,
            length=MAX_STATUS_LENGTH,
            values_callable=lambda states: [state.value for state in states],
        ),
        nullable=False,
        default=NotificationStatus.UNREAD,
    )
    read_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime,
        nullable=True,
    )
    actor_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    workspace_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    prompt_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("prompts.id", ondelete="CASCADE"),
        nullable=True,
    )
    action_url: Mapped[str | None] = mapped_column(
        String(MAX_URL_LENGTH),
        nullable=True,
    )
    data: Mapped[dict[str, Any] | None] = mapped_column(
        JSON,
        nullable=True,
    )

    actor: Mapped["User | None"] = relationship(
        "User",
        foreign_keys=[actor_id],
        lazy="selectin",
    )
    workspace: Mapped["Workspace | None"] = relationship(
        "Workspace",
        lazy="selectin",
    )

    @property
    def is_read(self) -> bool:
        return self.status == NotificationStatus.READ

    def __repr__(self) -> str:
        return (
            f"<Notification(id={self.id}, recipient_id={self.recipient_id}, "
            f"type={self.type})>"
        )
