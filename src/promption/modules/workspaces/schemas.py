"""Pydantic schemas for workspaces and memberships."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from promption.core.constants import (
    MAX_DESCRIPTION_LENGTH,
    MAX_NAME_LENGTH,
    MAX_SLUG_LENGTH,
)
from promption.core.permissions import WorkspaceRole
from promption.modules.users.schemas import UserSummary


if TYPE_CHECKING:
    from promption.modules.workspaces.models import Membership, Workspace


SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


# ============================================================
# Workspace Schemas
# ============================================================


class WorkspaceCreate(BaseModel):
    """Schema for creating a workspace."""

    name: str = Field(..., min_length=1, max_length=MAX_NAME_LENGTH)
    slug: str | None = Field(
        None, min_length=1, max_length=MAX_SLUG_LENGTH, pattern=SLUG_PATTERN
    )
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class WorkspaceUpdate(BaseModel):
    """Schema for updating workspace settings."""

    name: str | None = Field(None, min_length=1, max_length=MAX_NAME_LENGTH)
    description: str | None = Field(None, max_length=MAX_DESCRIPTION_LENGTH)


class WorkspaceSummary(BaseModel):
    """Minimal view of a workspace, embedded in other responses."""

    id: UUID
    name: str
    slug: str

    model_config = ConfigDict(from_attributes=True)


class WorkspaceResponse(BaseModel):
    """Schema for workspace response data."""

    id: UUID
    name: str
    slug: str
    description: str | None = None
    owner_id: UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MyWorkspaceResponse(WorkspaceResponse):
    """A workspace as seen by one of its members."""

    role: WorkspaceRole

    @classmethod
    def for_member(
        cls, workspace: "Workspace", membership: "Membership"
    ) -> "MyWorkspaceResponse":
        """Build the response from a workspace and the caller's membership."""
        base = WorkspaceResponse.model_validate(workspace).model_dump()
        return cls(**base, role=membership.role)


# ============================================================
# Membership Schemas
# ============================================================


class MembershipResponse(BaseModel):
    """Schema for a workspace member."""

    id: UUID
    workspace_id: UUID
    role: WorkspaceRole
    version: int
    user: UserSummary
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
