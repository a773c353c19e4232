"""Invitation database model."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Enum as SAEnum
from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from promption.core.constants import (
    MAX_EMAIL_LENGTH,
    MAX_STATUS_LENGTH,
    SHA256_HEX_LENGTH,
)
from promption.core.database.base import (
    Base,
    TimestampMixin,
    UUIDMixin,
    WorkspaceScopedMixin,
)
from promption.core.database.types import UTCDateTime
from promption.core.permissions import WorkspaceRole
from promption.modules.workspaces.models import role_column_type


if TYPE_CHECKING:
    from promption.modules.users.models import User
    from promption.modules.workspaces.models import Workspace


class InvitationStatus(str, Enum):
    """Lifecycle state of an invitation. Only PENDING is mutable."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    REVOKED = "revoked"
    DECLINED = "declined"


class Invitation(Base, UUIDMixin, TimestampMixin, WorkspaceScopedMixin):
    """A pending offer of workspace membership sent to an email address.

    At most one pending invitation may exist per (workspace, email); the
    partial unique index enforces this in the database.

    Attributes:
        email: Lower-cased invitee address
        role: Role granted on acceptance
        invited_by_id: The inviting member
        status: Lifecycle state
        token_hash: SHA-256 of the secret link token
        message: Optional note from the inviter
        expires_at: End of the acceptance window
        resolved_at: When the invitation left the pending state
    """

    __tablename__ = "invitations"
    __table_args__ = (
        Index(
            "uq_invitation_pending_email",
            "workspace_id",
            "email",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
        Index("ix_invitations_status_expires", "status", "expires_at"),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'expired', 'revoked', 'declined')",
            name="ck_invitations_status",
        ),
    )

    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        index=True,
    )
    role: Mapped[WorkspaceRole] = mapped_column(
        role_column_type(),
        nullable=False,
    )
    invited_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    status: Mapped[InvitationStatus] = mapped_column(
        SAEnum(
            InvitationStatus,
            native_enum=False,
            length=MAX_STATUS_LENGTH,
            values_callable=lambda states: [state.value for state in states],
        ),
        nullable=False,
        default=InvitationStatus.PENDING,
    )
    token_hash: Mapped[str] = mapped_column(
        String(SHA256_HEX_LENGTH),
        nullable=False,
        unique=True,
    )
    message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    expires_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        nullable=False,
    )
    resolved_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime,
        nullable=True,
    )

    workspace: Mapped["Workspace"] = relationship("Workspace", lazy="selectin")
    invited_by: Mapped["User | None"] = relationship("User", lazy="selectin")

    def is_expired(self, now: datetime) -> bool:
        """Whether the invitation can no longer be accepted at ``now``."""
        return self.status == InvitationStatus.EXPIRED or (
            self.status == InvitationStatus.PENDING and self.expires_at <= now
        )

    def __repr__(self) -> str:
        return (
            f"<Invitation(id={self.id}, workspace_id={self.workspace_id}, "
            f"email={self.email}, status={self.status})>"
        )
