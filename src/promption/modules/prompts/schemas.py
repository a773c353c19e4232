"""Pydantic schemas for prompts and templates."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from promption.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_SLUG_LENGTH,
    MAX_TITLE_LENGTH,
)
from promption.modules.workspaces.schemas import SLUG_PATTERN


if TYPE_CHECKING:
    from promption.modules.prompts.models import Prompt


class PromptCreate(BaseModel):
    """Schema for creating a prompt."""

    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    slug: str | None = Field(
        None, min_length=1, max_length=MAX_SLUG_LENGTH, pattern=SLUG_PATTERN
    )
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    content: str = ""
    category_id: UUID | None = None
    is_template: bool = False


class PromptUpdate(BaseModel):
    """Schema for updating a prompt. Omitted fields are left unchanged."""

    title: str | None = Field(None, min_length=1, max_length=MAX_TITLE_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)
    content: str | None = None
    category_id: UUID | None = None
    is_template: bool | None = None


class PromptResponse(BaseModel):
    """Schema for prompt response data."""

    id: UUID
    workspace_id: UUID
    category_id: UUID | None = None
    title: str
    slug: str
    description: str | None = None
    content: str
    is_template: bool
    created_by_id: UUID | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TemplateResponse(PromptResponse):
    """A template together with the workspace it lives in."""

    workspace_slug: str
    workspace_name: str

    @classmethod
    def from_prompt(cls, prompt: "Prompt") -> "TemplateResponse":
        base = PromptResponse.model_validate(prompt).model_dump()
        return cls(
            **base,
            workspace_slug=prompt.workspace.slug,
            workspace_name=prompt.workspace.name,
        )


class TemplateUse(BaseModel):
    """Schema for starting a prompt from a template."""

    workspace_slug: str = Field(
        ..., min_length=1, max_length=MAX_SLUG_LENGTH, pattern=SLUG_PATTERN
    )
