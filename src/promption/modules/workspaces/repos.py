"""Workspace and membership repositories.

Membership writes that could break an invariant are issued as single
conditional statements. Callers lock the parent workspace row first so
concurrent mutations of the same workspace serialize, then inspect the
affected row count to learn whether the guarded write applied.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.orm import aliased

from promption.api.dependencies import DBSession
from promption.core.permissions import WorkspaceRole
from promption.modules.users.models import User
from promption.modules.workspaces.models import Membership, Workspace


def accessible_workspace_ids(user_id: UUID) -> Select[tuple[UUID]]:
    """Subquery of ids of every workspace the user is a member of."""
    return select(Membership.workspace_id).where(Membership.user_id == user_id)


class WorkspaceRepository:
    """Repository for Workspace database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, workspace: Workspace) -> Workspace:
        """Create a new workspace inside a savepoint.

        Args:
            workspace: Workspace instance to create

        Returns:
            The created workspace with ID populated

        Raises:
            IntegrityError: If the slug is already taken
        """
        async with self.session.begin_nested():
            self.session.add(workspace)
            await self.session.flush()
        await self.session.refresh(workspace)
        return workspace

    async def get_by_id(self, workspace_id: UUID) -> Workspace | None:
        """Get a workspace by ID."""
        return await self.session.get(Workspace, workspace_id)

    async def get_by_slug(self, slug: str) -> Workspace | None:
        """Get a workspace by its slug."""
        stmt = select(Workspace).where(Workspace.slug == slug)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def lock(self, workspace_id: UUID) -> Workspace | None:
        """Lock a workspace row for the rest of the transaction.

        Membership mutations take this lock before their conditional
        write so member-count checks cannot interleave.

        Args:
            workspace_id: The workspace to lock

        Returns:
            The freshly loaded workspace, or None if it no longer exists
        """
        stmt = (
            select(Workspace)
            .where(Workspace.id == workspace_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def slug_exists(self, slug: str) -> bool:
        """Check whether a slug is taken."""
        stmt = select(func.count()).select_from(Workspace).where(Workspace.slug == slug)
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def list_for_user(self, user_id: UUID) -> list[tuple[Workspace, Membership]]:
        """List the user's workspaces together with their membership.

        Args:
            user_id: The member's UUID

        Returns:
            (workspace, membership) pairs ordered by workspace name
        """
        stmt = (
            select(Workspace, Membership)
            .join(Membership, Membership.workspace_id == Workspace.id)
            .where(Membership.user_id == user_id)
            .order_by(Workspace.name, Workspace.id)
        )
        result = await self.session.execute(stmt)
        return [(workspace, membership) for workspace, membership in result.all()]

    async def update(self, workspace: Workspace) -> Workspace:
        """Flush pending changes on a workspace and reload it."""
        await self.session.flush()
        await self.session.refresh(workspace)
        return workspace

    async def delete(self, workspace: Workspace) -> None:
        """Delete a workspace and, through cascades, everything in it."""
        await self.session.delete(workspace)
        await self.session.flush()


class MembershipRepository:
    """Repository for Membership database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, membership: Membership) -> Membership:
        """Create a new membership inside a savepoint.

        Raises:
            IntegrityError: If the user is already a member
        """
        async with self.session.begin_nested():
            self.session.add(membership)
            await self.session.flush()
        await self.session.refresh(membership)
        return membership

    async def get_by_id(self, membership_id: UUID) -> Membership | None:
        """Get a membership by ID, always re-reading the stored row."""
        stmt = (
            select(Membership)
            .where(Membership.id == membership_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_for_user(
        self, workspace_id: UUID, user_id: UUID
    ) -> Membership | None:
        """Get a user's membership in a workspace.

        The row is re-read from the store so role checks always see the
        current role rather than one cached earlier in the session.
        """
        stmt = (
            select(Membership)
            .where(
                Membership.workspace_id == workspace_id,
                Membership.user_id == user_id,
            )
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, workspace_id: UUID, email: str) -> Membership | None:
        """Get the membership of whichever user owns a normalized email."""
        stmt = (
            select(Membership)
            .join(User, User.id == Membership.user_id)
            .where(Membership.workspace_id == workspace_id, User.email == email)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_workspace(self, workspace_id: UUID) -> list[Membership]:
        """List members of a workspace, most privileged first."""
        stmt = (
            select(Membership)
            .where(Membership.workspace_id == workspace_id)
            .order_by(Membership.created_at, Membership.id)
        )
        result = await self.session.execute(stmt)
        return sorted(
            result.scalars().all(),
            key=lambda m: list(WorkspaceRole).index(m.role),
        )

    async def count(self, workspace_id: UUID) -> int:
        """Count members of a workspace."""
        stmt = (
            select(func.count())
            .select_from(Membership)
            .where(Membership.workspace_id == workspace_id)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def set_role_if_current(
        self,
        membership: Membership,
        new_role: WorkspaceRole,
        allow_owner_target: bool = False,
    ) -> bool:
        """Change a role only if the row is unchanged since it was read.

        Args:
            membership: The membership as previously read
            new_role: Role to assign
            allow_owner_target: Permit changing a row that currently holds
                Owner (ownership transfer only)

        Returns:
            True if the row was updated, False if it changed meanwhile
        """
        stmt = (
            update(Membership)
            .where(
                Membership.id == membership.id,
                Membership.version == membership.version,
            )
            .values(role=new_role, version=Membership.version + 1)
            .execution_options(synchronize_session=False)
        )
        if not allow_owner_target:
            stmt = stmt.where(Membership.role != WorkspaceRole.OWNER)

        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False

        await self.session.refresh(membership)
        return True

    async def delete_if_allowed(self, membership: Membership) -> bool:
        """Delete a non-Owner membership unless it is the last one.

        The member-count guard is evaluated by the same statement that
        deletes, so the workspace can never be left empty.

        Args:
            membership: The membership to delete

        Returns:
            True if the row was deleted
        """
        peer = aliased(Membership)
        remaining_peers = (
            select(func.count())
            .select_from(peer)
            .where(
                peer.workspace_id == membership.workspace_id,
                peer.id != membership.id,
            )
            .scalar_subquery()
        )
        stmt = (
            delete(Membership)
            .where(
                Membership.id == membership.id,
                Membership.role != WorkspaceRole.OWNER,
                remaining_peers >= 1,
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False

        self.session.expunge(membership)
        return True


# Type aliases for dependency injection
WorkspaceRepo = Annotated[WorkspaceRepository, Depends(WorkspaceRepository)]
MembershipRepo = Annotated[MembershipRepository, Depends(MembershipRepository)]
