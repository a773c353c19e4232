"""Pydantic schemas for categories."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from promption.core.constants import (
    MAX_COLOR_LENGTH,
    MAX_DESCRIPTION_LENGTH,
    MAX_ICON_LENGTH,
    MAX_NAME_LENGTH,
)


class CategoryCreate(BaseModel):
    """Schema for creating a category."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    color: str | None = Field(None, max_length=MAX_COLOR_LENGTH)
    icon: str | None = Field(None, max_length=MAX_ICON_LENGTH)


class CategoryUpdate(BaseModel):
    """Schema for updating a category. Omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    color: str | None = Field(None, max_length=MAX_COLOR_LENGTH)
    icon: str | None = Field(None, max_length=MAX_ICON_LENGTH)


class CategoryResponse(BaseModel):
    """Schema for category response data."""

    id: UUID
    workspace_id: UUID
    name: str
    description: str | None = None
    color: str | None = None
    icon: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
