"""Category database model."""

from typing import TYPE_CHECKING

from sqlalchemy import String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from promption.core.constants import MAX_COLOR_LENGTH, MAX_ICON_LENGTH, MAX_NAME_LENGTH
from promption.core.database.base import (
    Base,
    TimestampMixin,
    UUIDMixin,
    WorkspaceScopedMixin,
)


if TYPE_CHECKING:
    from promption.modules.workspaces.models import Workspace


class Category(Base, UUIDMixin, TimestampMixin, WorkspaceScopedMixin):
    """A named folder for prompts inside one workspace.

    Attributes:
        name: Display name, unique within the workspace
        description: Optional free text
        color: Client display color
        icon: Client icon name
    """

    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("workspace_id", "name", name="uq_category_workspace_name"),
    )

    name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    color: Mapped[str | None] = mapped_column(
        String(MAX_COLOR_LENGTH),
        nullable=True,
    )
    icon: Mapped[str | None] = mapped_column(
        String(MAX_ICON_LENGTH),
        nullable=True,
    )

    workspace: Mapped["Workspace"] = relationship("Workspace", lazy="selectin")

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"
