"""Workspace and membership database models."""

from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import (
    Boolean,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from promption.core.constants import (
    MAX_NAME_LENGTH,
    MAX_ROLE_LENGTH,
    MAX_SLUG_LENGTH,
)
from promption.core.database.base import Base, TimestampMixin, UUIDMixin
from promption.core.permissions import WorkspaceRole


if TYPE_CHECKING:
    from promption.modules.users.models import User


def role_column_type() -> Enum:
    """Portable enum column storing role values such as ``"owner"``."""
    return Enum(
        WorkspaceRole,
        native_enum=False,
        length=MAX_ROLE_LENGTH,
        values_callable=lambda roles: [role.value for role in roles],
    )


class Workspace(Base, UUIDMixin, TimestampMixin):
    """A tenant container grouping prompts, categories and members.

    Attributes:
        name: Display name
        slug: Unique URL-safe identifier
        description: Optional free text
        owner_id: The single member holding the Owner role
        is_active: Whether the workspace is usable
    """

    __tablename__ = "workspaces"

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    memberships: Mapped[list["Membership"]] = relationship(
        "Membership",
        back_populates="workspace",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Workspace(id={self.id}, slug={self.slug})>"


class Membership(Base, UUIDMixin, TimestampMixin):
    """The (user, workspace, role) relation granting access.

    ``version`` increases on every role change and is used as the
    compare-and-set guard for concurrent updates.

    Attributes:
        workspace_id: The workspace
        user_id: The member
        role: The member's role
        version: Optimistic concurrency counter
    """

    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint(
            "workspace_id", "user_id", name="uq_membership_workspace_user"
        ),
    )

    workspace_id: Mapped[UUID] = mapped_column(
        ForeignKey("workspaces.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    role: Mapped[WorkspaceRole] = mapped_column(
        role_column_type(),
        nullable=False,
        default=WorkspaceRole.VIEWER,
    )
    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
    )

    workspace: Mapped["Workspace"] = relationship(
        "Workspace",
        back_populates="memberships",
        lazy="selectin",
    )
    user: Mapped["User"] = relationship(
        "User",
        back_populates="memberships",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return (
            f"<Membership(id={self.id}, workspace_id={self.workspace_id}, "
            f"user_id={self.user_id}, role={self.role})>"
        )
