"""Invitation repository for database operations.

Status transitions are conditional updates on ``status = 'pending'``;
the returned row count tells the caller whether it won the transition.
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import Update, select, update

from promption.api.dependencies import DBSession
from promption.modules.invitations.models import Invitation, InvitationStatus


class InvitationRepository:
    """Repository for Invitation database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, invitation: Invitation) -> Invitation:
        """Create a pending invitation inside a savepoint.

        A unique-index violation rolls back only the savepoint, leaving
        the surrounding transaction usable.

        Raises:
            IntegrityError: If a pending invitation already exists
        """
        async with self.session.begin_nested():
            self.session.add(invitation)
            await self.session.flush()
        await self.session.refresh(invitation)
        return invitation

    async def get_by_id(self, invitation_id: UUID) -> Invitation | None:
        """Get an invitation by ID, re-reading the stored row."""
        stmt = (
            select(Invitation)
            .where(Invitation.id == invitation_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_token_hash(self, token_hash: str) -> Invitation | None:
        stmt = select(Invitation).where(Invitation.token_hash == token_hash)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_pending(self, workspace_id: UUID, email: str) -> Invitation | None:
        """Get the pending invitation for an email in a workspace."""
        stmt = select(Invitation).where(
            Invitation.workspace_id == workspace_id,
            Invitation.email == email,
            Invitation.status == InvitationStatus.PENDING,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_pending_for_workspace(
        self, workspace_id: UUID, now: datetime
    ) -> list[Invitation]:
        """List unexpired pending invitations of a workspace, newest first."""
        stmt = (
            select(Invitation)
            .where(
                Invitation.workspace_id == workspace_id,
                Invitation.status == InvitationStatus.PENDING,
                Invitation.expires_at > now,
            )
            .order_by(Invitation.created_at.desc(), Invitation.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_pending_for_email(self, email: str, now: datetime) -> list[Invitation]:
        """List unexpired pending invitations addressed to an email."""
        stmt = (
            select(Invitation)
            .where(
                Invitation.email == email,
                Invitation.status == InvitationStatus.PENDING,
                Invitation.expires_at > now,
            )
            .order_by(Invitation.created_at.desc(), Invitation.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def mark_accepted(self, invitation: Invitation, now: datetime) -> bool:
        """Move a pending, unexpired invitation to accepted.

        Returns:
            True if this call performed the transition
        """
        stmt = (
            update(Invitation)
            .where(
                Invitation.id == invitation.id,
                Invitation.status == InvitationStatus.PENDING,
                Invitation.expires_at > now,
            )
            .values(status=InvitationStatus.ACCEPTED, resolved_at=now)
            .execution_options(synchronize_session=False)
        )
        return await self._transition(stmt, invitation)

    async def mark_revoked(self, invitation: Invitation, now: datetime) -> bool:
        """Move a pending invitation to revoked.

        Returns:
            True if this call performed the transition
        """
        stmt = (
            update(Invitation)
            .where(
                Invitation.id == invitation.id,
                Invitation.status == InvitationStatus.PENDING,
            )
            .values(status=InvitationStatus.REVOKED, resolved_at=now)
            .execution_options(synchronize_session=False)
        )
        return await self._transition(stmt, invitation)

    async def mark_declined(self, invitation: Invitation, now: datetime) -> bool:
        """Move a pending, unexpired invitation to declined.

        Returns:
            True if this call performed the transition
        """
        stmt = (
            update(Invitation)
            .where(
                Invitation.id == invitation.id,
                Invitation.status == InvitationStatus.PENDING,
                Invitation.expires_at > now,
            )
            .values(status=InvitationStatus.DECLINED, resolved_at=now)
            .execution_options(synchronize_session=False)
        )
        return await self._transition(stmt, invitation)

    async def _transition(self, stmt: Update, invitation: Invitation) -> bool:
        result = await self.session.execute(stmt)
        if result.rowcount != 1:
            return False
        await self.session.refresh(invitation)
        return True

    async def expire_stale(
        self,
        now: datetime,
        workspace_id: UUID | None = None,
        email: str | None = None,
    ) -> int:
        """Expire every pending invitation whose window has closed.

        Idempotent: a second run over the same rows changes nothing.

        Args:
            now: Reference time
            workspace_id: Restrict to one workspace
            email: Restrict to one invitee

        Returns:
            Number of invitations expired
        """
        stmt = update(Invitation).where(
            Invitation.status == InvitationStatus.PENDING,
            Invitation.expires_at <= now,
        )
        if workspace_id is not None:
            stmt = stmt.where(Invitation.workspace_id == workspace_id)
        if email is not None:
            stmt = stmt.where(Invitation.email == email)

        stmt = stmt.values(
            status=InvitationStatus.EXPIRED, resolved_at=now
        ).execution_options(synchronize_session=False)
        result = await self.session.execute(stmt)
        return result.rowcount


# Type alias for dependency injection
InvitationRepo = Annotated[InvitationRepository, Depends(InvitationRepository)]
