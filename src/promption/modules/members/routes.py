"""Membership API routes."""

from uuid import UUID

from fastapi import APIRouter, status

from promption.core.auth import CurrentUser
from promption.core.permissions import permission_map, role_rank
from promption.modules.members.schemas import (
    MyPermissionsResponse,
    OwnershipTransfer,
    RoleUpdate,
)
from promption.modules.members.services import MembershipSvc
from promption.modules.workspaces.schemas import MembershipResponse, MyWorkspaceResponse
from promption.modules.workspaces.services import WorkspaceSvc


router = APIRouter(tags=["members"])


@router.get(
    "/workspaces/{slug}/members",
    response_model=list[MembershipResponse],
    summary="List members",
    description="List the workspace's members, Owner first.",
)
async def list_members(
    slug: str,
    workspaces: WorkspaceSvc,
    current_user: CurrentUser,
) -> list[MembershipResponse]:
    access = await workspaces.get_access(slug, current_user)
    members = await workspaces.list_members(access)
    return [MembershipResponse.model_validate(m) for m in members]


@router.get(
    "/workspaces/{slug}/members/me/permissions",
    response_model=MyPermissionsResponse,
    summary="My permissions",
    description="The caller's role in the workspace and every action it grants.",
)
async def my_permissions(
    slug: str,
    workspaces: WorkspaceSvc,
    current_user: CurrentUser,
) -> MyPermissionsResponse:
    access = await workspaces.get_access(slug, current_user)
    return MyPermissionsResponse(
        role=access.role,
        rank=role_rank(access.role),
        permissions=permission_map(access.role),
    )


@router.patch(
    "/memberships/{membership_id}",
    response_model=MembershipResponse,
    summary="Change a member's role",
)
async def update_member_role(
    membership_id: UUID,
    data: RoleUpdate,
    service: MembershipSvc,
    current_user: CurrentUser,
) -> MembershipResponse:
    """Change the role of another member."""
    membership = await service.update_role(membership_id, current_user, data.role)
    return MembershipResponse.model_validate(membership)


@router.delete(
    "/memberships/{membership_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove a member",
    description="Remove a member. Targeting your own membership leaves the workspace.",
)
async def remove_member(
    membership_id: UUID,
    service: MembershipSvc,
    current_user: CurrentUser,
) -> None:
    await service.remove(membership_id, current_user)


@router.post(
    "/workspaces/{slug}/transfer-ownership",
    response_model=MyWorkspaceResponse,
    summary="Transfer ownership",
    description="Make another member the Owner. The current Owner becomes Admin.",
)
async def transfer_ownership(
    slug: str,
    data: OwnershipTransfer,
    workspaces: WorkspaceSvc,
    service: MembershipSvc,
    current_user: CurrentUser,
) -> MyWorkspaceResponse:
    """Hand the workspace to another member."""
    access = await workspaces.get_access(slug, current_user)
    workspace = await service.transfer_ownership(access, current_user, data.membership_id)
    return MyWorkspaceResponse.for_member(workspace, access.membership)
