"""Prompt database model."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Boolean, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from promption.core.constants import MAX_SLUG_LENGTH, MAX_TITLE_LENGTH
from promption.core.database.base import (
    Base,
    TimestampMixin,
    UUIDMixin,
    WorkspaceScopedMixin,
)
from promption.core.database.types import UTCDateTime


if TYPE_CHECKING:
    from promption.modules.categories.models import Category
    from promption.modules.workspaces.models import Workspace


class Prompt(Base, UUIDMixin, TimestampMixin, WorkspaceScopedMixin):
    """A stored prompt text.

    Prompts flagged ``is_template`` are offered as starting points across
    every workspace the viewer belongs to. Deleting a prompt only stamps
    ``deleted_at``; soft-deleted rows are hidden everywhere.

    Attributes:
        category_id: Optional folder within the workspace
        title: Display title
        slug: URL-safe identifier, unique within the workspace
        description: Optional summary
        content: The prompt text
        is_template: Whether the prompt is a template
        created_by_id: Author, kept as null if the user is removed
        deleted_at: Soft-delete timestamp
    """

    __tablename__ = "prompts"
    __table_args__ = (
        UniqueConstraint("workspace_id", "slug", name="uq_prompt_workspace_slug"),
    )

    category_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("categories.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    title: Mapped[str] = mapped_column(
        String(MAX_TITLE_LENGTH),
        nullable=False,
    )
    slug: Mapped[str] = mapped_column(
        String(MAX_SLUG_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    is_template: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    created_by_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        UTCDateTime,
        nullable=True,
    )

    workspace: Mapped["Workspace"] = relationship("Workspace", lazy="selectin")
    category: Mapped["Category | None"] = relationship("Category", lazy="selectin")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"<Prompt(id={self.id}, slug={self.slug})>"
