"""User database models."""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from promption.core.constants import (
    MAX_AUTH_SUBJECT_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_URL_LENGTH,
)
from promption.core.database.base import Base, TimestampMixin, UUIDMixin


if TYPE_CHECKING:
    from promption.modules.workspaces.models import Membership


class User(Base, UUIDMixin, TimestampMixin):
    """User model mirroring an identity held by the auth provider.

    Rows are created the first time a subject presents a valid session
    token. The subject id never changes; profile fields may.

    Attributes:
        auth_subject: Opaque user id issued by the auth provider
        email: Lower-cased email address
        full_name: Display name
        avatar_url: Profile picture URL
        is_active: Whether the user may use the API
    """

    __tablename__ = "users"

    auth_subject: Mapped[str] = mapped_column(
        String(MAX_AUTH_SUBJECT_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    full_name: Mapped[str | None] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=True,
    )
    avatar_url: Mapped[str | None] = mapped_column(
        String(MAX_URL_LENGTH),
        nullable=True,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    memberships: Mapped[list["Membership"]] = relationship(
        "Membership",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def display_name(self) -> str:
        """Name to show to other members, falling back to the email."""
        return self.full_name or self.email

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
