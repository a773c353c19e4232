"""Pydantic schemas for membership management."""

from uuid import UUID

from pydantic import BaseModel, Field

from promption.core.constants import MAX_ROLE_LENGTH
from promption.core.permissions import WorkspaceAction, WorkspaceRole


class RoleUpdate(BaseModel):
    """Change a member's role.

    Kept as free text so unknown roles surface as ``invalid_role``.
    """

    role: str = Field(..., max_length=MAX_ROLE_LENGTH)


class OwnershipTransfer(BaseModel):
    """Hand the Owner role to another member."""

    membership_id: UUID


class MyPermissionsResponse(BaseModel):
    """The caller's role in a workspace and what it allows."""

    role: WorkspaceRole
    rank: int
    permissions: dict[WorkspaceAction, bool]
