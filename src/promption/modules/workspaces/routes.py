"""Workspace API routes."""

from fastapi import APIRouter, status

from promption.core.auth import CurrentUser
from promption.modules.workspaces.schemas import (
    MyWorkspaceResponse,
    WorkspaceCreate,
    WorkspaceUpdate,
)
from promption.modules.workspaces.services import WorkspaceSvc


router = APIRouter(prefix="/workspaces", tags=["workspaces"])


@router.post(
    "",
    response_model=MyWorkspaceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create workspace",
    description="Create a workspace. The caller becomes its Owner.",
)
async def create_workspace(
    data: WorkspaceCreate,
    service: WorkspaceSvc,
    current_user: CurrentUser,
) -> MyWorkspaceResponse:
    """Create a workspace owned by the caller."""
    workspace = await service.create_workspace(current_user, data)
    access = await service.get_access(workspace.slug, current_user)
    return MyWorkspaceResponse.for_member(access.workspace, access.membership)


@router.get(
    "",
    response_model=list[MyWorkspaceResponse],
    summary="List my workspaces",
)
async def list_workspaces(
    service: WorkspaceSvc,
    current_user: CurrentUser,
) -> list[MyWorkspaceResponse]:
    """List the workspaces the caller belongs to."""
    rows = await service.list_for_user(current_user)
    return [
        MyWorkspaceResponse.for_member(workspace, membership)
        for workspace, membership in rows
    ]


@router.get(
    "/{slug}",
    response_model=MyWorkspaceResponse,
    summary="Get workspace",
)
async def get_workspace(
    slug: str,
    service: WorkspaceSvc,
    current_user: CurrentUser,
) -> MyWorkspaceResponse:
    """Get a workspace the caller belongs to."""
    access = await service.get_access(slug, current_user)
    return MyWorkspaceResponse.for_member(access.workspace, access.membership)


@router.patch(
    "/{slug}",
    response_model=MyWorkspaceResponse,
    summary="Update workspace settings",
)
async def update_workspace(
    slug: str,
    data: WorkspaceUpdate,
    service: WorkspaceSvc,
    current_user: CurrentUser,
) -> MyWorkspaceResponse:
    """Update a workspace's name or description."""
    access = await service.get_access(slug, current_user)
    workspace = await service.update_workspace(access, data)
    return MyWorkspaceResponse.for_member(workspace, access.membership)


@router.delete(
    "/{slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete workspace",
    description="Delete a workspace and everything in it. Owner only.",
)
async def delete_workspace(
    slug: str,
    service: WorkspaceSvc,
    current_user: CurrentUser,
) -> None:
    """Delete a workspace."""
    access = await service.get_access(slug, current_user)
    await service.delete_workspace(access)
