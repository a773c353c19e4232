"""Invitation API routes."""

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Request, status

from promption.config import settings
from promption.core.auth import CurrentUser
from promption.core.rate_limit import rate_limit
from promption.modules.invitations.schemas import (
    InvitationCreate,
    InvitationCreatedResponse,
    InvitationResponse,
)
from promption.modules.invitations.services import (
    InvitationSvc,
    invitation_email_data,
    queue_invitation_email,
)
from promption.modules.workspaces.schemas import MembershipResponse
from promption.modules.workspaces.services import WorkspaceSvc


router = APIRouter(tags=["invitations"])


# ============================================================
# Workspace invitations
# ============================================================


@router.post(
    "/workspaces/{slug}/invitations",
    response_model=InvitationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a member",
    description=(
        "Invite an email address to the workspace. The link token is "
        "returned only in this response."
    ),
)
@rate_limit(
    requests=settings.invite_rate_limit_requests,
    window=settings.invite_rate_limit_window,
)
async def create_invitation(
    request: Request,
    slug: str,
    data: InvitationCreate,
    background_tasks: BackgroundTasks,
    workspaces: WorkspaceSvc,
    service: InvitationSvc,
    current_user: CurrentUser,
) -> InvitationCreatedResponse:
    """Create an invitation and queue its email."""
    access = await workspaces.get_access(slug, current_user)
    invitation, token = await service.invite(access, current_user, data)

    background_tasks.add_task(
        queue_invitation_email,
        invitation.email,
        invitation_email_data(invitation, token, current_user),
    )

    base = InvitationResponse.model_validate(invitation).model_dump()
    return InvitationCreatedResponse(**base, token=token)


@router.get(
    "/workspaces/{slug}/invitations",
    response_model=list[InvitationResponse],
    summary="List pending invitations",
)
async def list_invitations(
    slug: str,
    workspaces: WorkspaceSvc,
    service: InvitationSvc,
    current_user: CurrentUser,
) -> list[InvitationResponse]:
    access = await workspaces.get_access(slug, current_user)
    invitations = await service.list_invitations(access)
    return [InvitationResponse.model_validate(i) for i in invitations]


# ============================================================
# Invitee actions
# ============================================================


@router.get(
    "/invitations/mine",
    response_model=list[InvitationResponse],
    summary="List my invitations",
    description="List open invitations addressed to the caller's email.",
)
async def list_my_invitations(
    service: InvitationSvc,
    current_user: CurrentUser,
) -> list[InvitationResponse]:
    invitations = await service.list_my_invitations(current_user)
    return [InvitationResponse.model_validate(i) for i in invitations]


@router.post(
    "/invitations/{invitation_id}/accept",
    response_model=MembershipResponse,
    summary="Accept invitation",
)
@rate_limit(
    requests=settings.invite_rate_limit_requests,
    window=settings.invite_rate_limit_window,
)
async def accept_invitation(
    request: Request,
    invitation_id: UUID,
    service: InvitationSvc,
    current_user: CurrentUser,
) -> MembershipResponse:
    """Join the workspace an invitation was issued for."""
    membership = await service.accept(invitation_id, current_user)
    return MembershipResponse.model_validate(membership)


@router.post(
    "/invitations/token/{token}/accept",
    response_model=MembershipResponse,
    summary="Accept invitation by link token",
)
@rate_limit(
    requests=settings.invite_rate_limit_requests,
    window=settings.invite_rate_limit_window,
)
async def accept_invitation_by_token(
    request: Request,
    token: str,
    service: InvitationSvc,
    current_user: CurrentUser,
) -> MembershipResponse:
    membership = await service.accept_by_token(token, current_user)
    return MembershipResponse.model_validate(membership)


@router.post(
    "/invitations/{invitation_id}/decline",
    response_model=InvitationResponse,
    summary="Decline invitation",
)
@rate_limit(
    requests=settings.invite_rate_limit_requests,
    window=settings.invite_rate_limit_window,
)
async def decline_invitation(
    request: Request,
    invitation_id: UUID,
    service: InvitationSvc,
    current_user: CurrentUser,
) -> InvitationResponse:
    """Turn down an invitation addressed to the caller."""
    invitation = await service.decline(invitation_id, current_user)
    return InvitationResponse.model_validate(invitation)


@router.post(
    "/invitations/token/{token}/decline",
    response_model=InvitationResponse,
    summary="Decline invitation by link token",
)
@rate_limit(
    requests=settings.invite_rate_limit_requests,
    window=settings.invite_rate_limit_window,
)
async def decline_invitation_by_token(
    request: Request,
    token: str,
    service: InvitationSvc,
    current_user: CurrentUser,
) -> InvitationResponse:
    invitation = await service.decline_by_token(token, current_user)
    return InvitationResponse.model_validate(invitation)


@router.delete(
    "/invitations/{invitation_id}",
    response_model=InvitationResponse,
    summary="Revoke invitation",
)
async def revoke_invitation(
    invitation_id: UUID,
    service: InvitationSvc,
    current_user: CurrentUser,
) -> InvitationResponse:
    invitation = await service.revoke(invitation_id, current_user)
    return InvitationResponse.model_validate(invitation)
