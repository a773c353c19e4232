"""Pydantic schemas for user operations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from promption.core.constants import MAX_NAME_LENGTH


class UserUpdate(BaseModel):
    """Profile fields a user may change themselves."""

    full_name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    avatar_url: HttpUrl | None = None


class UserSummary(BaseModel):
    """Minimal public view of a user, embedded in other responses."""

    id: UUID
    email: str
    full_name: str | None = None
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserSummary):
    """Schema for the authenticated user's own profile."""

    is_active: bool
    created_at: datetime
    updated_at: datetime
