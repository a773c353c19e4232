"""Membership management service.

Role changes, removals and ownership transfer. Every method re-reads the
acting member's role from the store, checks permissions before writing,
and applies its change through a conditional statement so that the
single-Owner and at-least-one-member rules hold under concurrency.
"""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends

from promption.core.errors import (
    ConflictError,
    ForbiddenError,
    InvariantViolationError,
    NotFoundError,
)
from promption.core.permissions import (
    WorkspaceAction,
    WorkspaceRole,
    can_perform_action,
    parse_role,
)
from promption.modules.notifications.models import NotificationType
from promption.modules.notifications.services import NotificationSvc
from promption.modules.users.models import User
from promption.modules.workspaces.models import Membership, Workspace
from promption.modules.workspaces.repos import MembershipRepo, WorkspaceRepo
from promption.modules.workspaces.services import WorkspaceAccess


logger = structlog.get_logger()


def _permission_denied(action: WorkspaceAction) -> ForbiddenError:
    return ForbiddenError(
        "You do not have permission to perform this action",
        error_code="permission_denied",
        details={"required_permission": action.value},
    )


class MembershipService:
    """Service for changing and removing workspace members."""

    def __init__(
        self,
        members: MembershipRepo,
        workspaces: WorkspaceRepo,
        notifications: NotificationSvc,
    ) -> None:
        self.members = members
        self.workspaces = workspaces
        self.notifications = notifications

    async def _load(
        self, membership_id: UUID, user: User
    ) -> tuple[Membership, Membership]:
        """Load a target membership and the actor's membership in its workspace.

        Raises:
            NotFoundError: If the target is missing or the actor is not a
                member of its workspace
        """
        target = await self.members.get_by_id(membership_id)
        actor = (
            await self.members.get_for_user(target.workspace_id, user.id)
            if target
            else None
        )
        if target is None or actor is None:
            raise NotFoundError(
                "Membership not found",
                resource="membership",
                resource_id=str(membership_id),
            )
        return target, actor

    # ============================================================
    # Role changes
    # ============================================================

    async def update_role(
        self, membership_id: UUID, user: User, new_role_value: str
    ) -> Membership:
        """Change a member's role.

        Args:
            membership_id: The membership to change
            user: The acting user
            new_role_value: Requested role name

        Returns:
            The updated membership

        Raises:
            ValidationError: For an unknown role
            InvariantViolationError: If the target is the Owner, or the
                Owner tries to hand out Owner (use transfer)
            ForbiddenError: If the actor may not make this change
            ConflictError: If the membership changed concurrently
        """
        new_role = parse_role(new_role_value)
        target, actor = await self._load(membership_id, user)

        if target.role == WorkspaceRole.OWNER:
            raise InvariantViolationError(
                "The Owner's role can only change through ownership transfer",
                error_code="cannot_modify_owner",
            )
        if new_role == WorkspaceRole.OWNER:
            if actor.role != WorkspaceRole.OWNER:
                raise _permission_denied(WorkspaceAction.CHANGE_ROLES)
            raise InvariantViolationError(
                "Use ownership transfer to make someone Owner",
                error_code="cannot_modify_owner",
            )
        if not can_perform_action(
            actor.role, target.role, WorkspaceAction.CHANGE_ROLES, new_role=new_role
        ):
            raise _permission_denied(WorkspaceAction.CHANGE_ROLES)

        if target.role == new_role:
            return target

        previous_role = target.role
        if not await self.members.set_role_if_current(target, new_role):
            raise ConflictError(
                "Membership was modified by a concurrent request",
                error_code="concurrent_modification",
            )

        await self.notifications.notify(
            target.user_id,
            NotificationType.ROLE_CHANGED,
            title=f"Your role in {target.workspace.name} changed",
            message=(
                f"{user.display_name} changed your role from "
                f"{previous_role.value} to {new_role.value}."
            ),
            actor_id=user.id,
            workspace_id=target.workspace_id,
            action_url=f"/{target.workspace.slug}",
            data={"previous_role": previous_role.value, "role": new_role.value},
        )
        logger.info(
            "member_role_changed",
            membership_id=str(target.id),
            workspace_id=str(target.workspace_id),
            previous_role=previous_role.value,
            role=new_role.value,
        )
        return target

    # ============================================================
    # Removal
    # ============================================================

    async def remove(self, membership_id: UUID, user: User) -> None:
        """Remove a member, or leave the workspace when targeting oneself.

        Raises:
            ForbiddenError: If the actor may not remove the target
            InvariantViolationError: If the target is the Owner or the
                last member
            NotFoundError: If the membership vanished concurrently
        """
        target, actor = await self._load(membership_id, user)
        leaving = target.id == actor.id

        if target.role == WorkspaceRole.OWNER:
            raise InvariantViolationError(
                "The Owner cannot be removed; transfer ownership first",
                error_code="cannot_remove_owner",
            )
        if not leaving and not can_perform_action(
            actor.role, target.role, WorkspaceAction.REMOVE_MEMBERS
        ):
            raise _permission_denied(WorkspaceAction.REMOVE_MEMBERS)

        workspace_id = target.workspace_id
        workspace_name = target.workspace.name
        removed_user_id = target.user_id

        workspace = await self.workspaces.lock(workspace_id)
        if not await self.members.delete_if_allowed(target):
            await self._raise_removal_failure(membership_id, workspace_id)

        if leaving:
            if workspace is not None:
                await self.notifications.notify(
                    workspace.owner_id,
                    NotificationType.MEMBER_LEFT,
                    title=f"{user.display_name} left {workspace_name}",
                    message=f"{user.display_name} left {workspace_name}.",
                    actor_id=user.id,
                    workspace_id=workspace_id,
                    action_url=f"/{workspace.slug}",
                )
        else:
            await self.notifications.notify(
                removed_user_id,
                NotificationType.MEMBER_REMOVED,
                title=f"Removed from {workspace_name}",
                message=f"{user.display_name} removed you from {workspace_name}.",
                actor_id=user.id,
                workspace_id=None,
                data={"workspace_id": str(workspace_id)},
            )
        logger.info(
            "member_left" if leaving else "member_removed",
            membership_id=str(membership_id),
            workspace_id=str(workspace_id),
        )

    async def _raise_removal_failure(
        self, membership_id: UUID, workspace_id: UUID
    ) -> None:
        current = await self.members.get_by_id(membership_id)
        if current is None:
            raise NotFoundError(
                "Membership not found",
                resource="membership",
                resource_id=str(membership_id),
            )
        if current.role == WorkspaceRole.OWNER:
            raise InvariantViolationError(
                "The Owner cannot be removed; transfer ownership first",
                error_code="cannot_remove_owner",
            )
        raise InvariantViolationError(
            "A workspace must keep at least one member",
            error_code="last_member",
            details={"workspace_id": str(workspace_id)},
        )

    # ============================================================
    # Ownership transfer
    # ============================================================

    async def transfer_ownership(
        self, access: WorkspaceAccess, user: User, membership_id: UUID
    ) -> Workspace:
        """Make another member the Owner; the current Owner becomes Admin.

        Raises:
            ForbiddenError: If the actor is not the Owner
            NotFoundError: If the target is not a member of this workspace
            ConflictError: If the target is the actor, or either membership
                changed concurrently
        """
        if access.role != WorkspaceRole.OWNER:
            raise _permission_denied(WorkspaceAction.MANAGE_WORKSPACE)

        workspace = await self.workspaces.lock(access.workspace.id)
        owner = await self.members.get_for_user(access.workspace.id, user.id)
        target = await self.members.get_by_id(membership_id)

        if workspace is None or target is None or target.workspace_id != workspace.id:
            raise NotFoundError(
                "Membership not found",
                resource="membership",
                resource_id=str(membership_id),
            )
        if owner is None or owner.role != WorkspaceRole.OWNER:
            raise _permission_denied(WorkspaceAction.MANAGE_WORKSPACE)
        if target.id == owner.id:
            raise ConflictError(
                "You already own this workspace",
                error_code="already_owner",
            )

        demoted = await self.members.set_role_if_current(
            owner, WorkspaceRole.ADMIN, allow_owner_target=True
        )
        promoted = demoted and await self.members.set_role_if_current(
            target, WorkspaceRole.OWNER
        )
        if not promoted:
            raise ConflictError(
                "Membership was modified by a concurrent request",
                error_code="concurrent_modification",
            )

        workspace.owner_id = target.user_id
        workspace = await self.workspaces.update(workspace)

        await self.notifications.notify(
            target.user_id,
            NotificationType.OWNERSHIP_TRANSFERRED,
            title=f"You now own {workspace.name}",
            message=f"{user.display_name} transferred ownership of {workspace.name} to you.",
            actor_id=user.id,
            workspace_id=workspace.id,
            action_url=f"/{workspace.slug}",
        )
        logger.info(
            "ownership_transferred",
            workspace_id=str(workspace.id),
            previous_owner_id=str(user.id),
            owner_id=str(target.user_id),
        )
        return workspace


# Type alias for dependency injection
MembershipSvc = Annotated[MembershipService, Depends(MembershipService)]
