"""Pydantic schemas for invitations."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from promption.core.constants import MAX_INVITATION_MESSAGE_LENGTH, MAX_ROLE_LENGTH
from promption.core.permissions import WorkspaceRole
from promption.modules.invitations.models import InvitationStatus
from promption.modules.users.schemas import UserSummary
from promption.modules.workspaces.schemas import WorkspaceSummary


class InvitationCreate(BaseModel):
    """Schema for inviting someone to a workspace.

    ``role`` is kept as free text so unknown roles surface as the
    ``invalid_role`` error rather than a generic validation failure.
    """

    email: EmailStr
    role: str = Field(WorkspaceRole.VIEWER.value, max_length=MAX_ROLE_LENGTH)
    message: str | None = Field(None, max_length=MAX_INVITATION_MESSAGE_LENGTH)


class InvitationResponse(BaseModel):
    """Schema for invitation response data. Never exposes the link token."""

    id: UUID
    workspace_id: UUID
    email: str
    role: WorkspaceRole
    status: InvitationStatus
    message: str | None = None
    expires_at: datetime
    resolved_at: datetime | None = None
    created_at: datetime
    invited_by: UserSummary | None = None
    workspace: WorkspaceSummary

    model_config = ConfigDict(from_attributes=True)


class InvitationCreatedResponse(InvitationResponse):
    """Invitation as returned once, on creation, with its link token."""

    token: str
