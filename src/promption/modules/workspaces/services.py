"""Workspace service for business logic."""

from dataclasses import dataclass
from typing import Annotated

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from promption.core.errors import ConflictError, NotFoundError
from promption.core.permissions import (
    WorkspaceAction,
    WorkspaceRole,
    require_permission,
)
from promption.core.utils.text import generate_slug, with_suffix
from promption.modules.users.models import User
from promption.modules.workspaces.models import Membership, Workspace
from promption.modules.workspaces.repos import MembershipRepo, WorkspaceRepo
from promption.modules.workspaces.schemas import WorkspaceCreate, WorkspaceUpdate


logger = structlog.get_logger()

# Attempts at a numeric suffix before giving up on a generated slug
MAX_SLUG_ATTEMPTS = 50


@dataclass
class WorkspaceAccess:
    """A workspace together with the acting user's membership in it."""

    workspace: Workspace
    membership: Membership

    @property
    def role(self) -> WorkspaceRole:
        return self.membership.role

    def require(self, action: WorkspaceAction) -> None:
        """Raise ForbiddenError unless the member's role grants ``action``."""
        require_permission(self.role, action)


class WorkspaceService:
    """Service for workspace lifecycle and access resolution."""

    def __init__(self, repo: WorkspaceRepo, members: MembershipRepo) -> None:
        self.repo = repo
        self.members = members

    async def _unique_slug(self, base: str) -> str:
        slug = base or "workspace"
        if not await self.repo.slug_exists(slug):
            return slug
        for suffix in range(2, MAX_SLUG_ATTEMPTS + 2):
            candidate = with_suffix(slug, suffix)
            if not await self.repo.slug_exists(candidate):
                return candidate
        raise ConflictError(
            "Could not allocate a unique slug for this workspace",
            error_code="slug_exists",
        )

    async def create_workspace(self, user: User, data: WorkspaceCreate) -> Workspace:
        """Create a workspace with the caller as its Owner.

        Args:
            user: The creating user
            data: Workspace details

        Returns:
            The created workspace

        Raises:
            ConflictError: If an explicit slug is already taken
        """
        if data.slug:
            if await self.repo.slug_exists(data.slug):
                raise ConflictError(
                    "Workspace slug already in use",
                    error_code="slug_exists",
                    details={"slug": data.slug},
                )
            slug = data.slug
        else:
            slug = await self._unique_slug(generate_slug(data.name))

        try:
            workspace = await self.repo.create(
                Workspace(
                    name=data.name,
                    slug=slug,
                    description=data.description,
                    owner_id=user.id,
                )
            )
        except IntegrityError:
            raise ConflictError(
                "Workspace slug already in use",
                error_code="slug_exists",
                details={"slug": slug},
            ) from None
        await self.members.create(
            Membership(
                workspace_id=workspace.id,
                user_id=user.id,
                role=WorkspaceRole.OWNER,
            )
        )

        logger.info(
            "workspace_created",
            workspace_id=str(workspace.id),
            owner_id=str(user.id),
        )
        return workspace

    async def get_access(self, slug: str, user: User) -> WorkspaceAccess:
        """Resolve a workspace slug for a member.

        Non-members get the same NotFoundError as a missing workspace so
        workspace existence does not leak.

        Args:
            slug: The workspace slug
            user: The acting user

        Returns:
            The workspace and the user's current membership

        Raises:
            NotFoundError: If missing or the user is not a member
        """
        workspace = await self.repo.get_by_slug(slug)
        membership = (
            await self.members.get_for_user(workspace.id, user.id) if workspace else None
        )
        if workspace is None or membership is None:
            raise NotFoundError("Workspace not found", resource="workspace")
        return WorkspaceAccess(workspace=workspace, membership=membership)

    async def list_for_user(self, user: User) -> list[tuple[Workspace, Membership]]:
        """List the workspaces the user belongs to."""
        return await self.repo.list_for_user(user.id)

    async def update_workspace(
        self, access: WorkspaceAccess, data: WorkspaceUpdate
    ) -> Workspace:
        """Update workspace settings.

        Raises:
            ForbiddenError: If the role lacks edit_workspace_settings
        """
        access.require(WorkspaceAction.EDIT_WORKSPACE_SETTINGS)

        workspace = access.workspace
        if data.name is not None:
            workspace.name = data.name
        if data.description is not None:
            workspace.description = data.description
        return await self.repo.update(workspace)

    async def delete_workspace(self, access: WorkspaceAccess) -> None:
        """Delete a workspace with all its content.

        Raises:
            ForbiddenError: If the role lacks delete_workspace
        """
        access.require(WorkspaceAction.DELETE_WORKSPACE)
        await self.repo.delete(access.workspace)
        logger.info("workspace_deleted", workspace_id=str(access.workspace.id))

    async def list_members(self, access: WorkspaceAccess) -> list[Membership]:
        """List members; any member may see who else belongs."""
        access.require(WorkspaceAction.VIEW_WORKSPACE)
        return await self.members.list_for_workspace(access.workspace.id)


# Type alias for dependency injection
WorkspaceSvc = Annotated[WorkspaceService, Depends(WorkspaceService)]
