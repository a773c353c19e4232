"""Invitation lifecycle service.

An invitation moves from pending to exactly one of accepted, declined,
revoked or expired, and is never touched again. Each transition is a conditional
update on ``status = 'pending'``; losing that race surfaces as a
conflict instead of a double transition.
"""

from datetime import UTC, datetime, timedelta
from typing import Annotated, Any
from uuid import UUID

import structlog
from fastapi import Depends
from redis.exceptions import RedisError
from sqlalchemy.exc import IntegrityError

from promption.config import settings
from promption.core.auth import generate_token, hash_token
from promption.core.email import EmailTemplate
from promption.core.errors import (
    ConflictError,
    ExpiredError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from promption.core.jobs.registry import enqueue
from promption.core.permissions import (
    WorkspaceAction,
    WorkspaceRole,
    can_perform_action,
    parse_role,
    require_permission,
)
from promption.core.utils.text import normalize_email
from promption.modules.invitations.models import Invitation, InvitationStatus
from promption.modules.invitations.repos import InvitationRepo
from promption.modules.invitations.schemas import InvitationCreate
from promption.modules.notifications.models import NotificationType
from promption.modules.notifications.services import NotificationSvc
from promption.modules.users.models import User
from promption.modules.users.repos import UserRepo
from promption.modules.workspaces.models import Membership
from promption.modules.workspaces.repos import MembershipRepo, WorkspaceRepo
from promption.modules.workspaces.services import WorkspaceAccess


logger = structlog.get_logger()

# Terminal states reached through an explicit action
RESOLVED_STATUSES = frozenset(
    {InvitationStatus.ACCEPTED, InvitationStatus.DECLINED, InvitationStatus.REVOKED}
)


def invitation_url(token: str) -> str:
    """Client link at which an invitee accepts by token."""
    return f"{settings.app_url}/invitations/{token}"


def invitation_email_data(
    invitation: Invitation, token: str, inviter: User
) -> dict[str, Any]:
    """Build the template data for an invitation email.

    Evaluated while the request session is still open, so the queued
    job only carries plain values.
    """
    return {
        "workspace_name": invitation.workspace.name,
        "inviter_name": inviter.display_name,
        "inviter_email": inviter.email,
        "role": invitation.role.value.title(),
        "invitation_url": invitation_url(token),
        "expires_in_days": settings.invitation_expire_days,
        "message": invitation.message,
    }


async def queue_invitation_email(to: str, template_data: dict[str, Any]) -> None:
    """Hand an invitation email to the job queue.

    Runs after the response is sent. Failure is logged and dropped; the
    invitation itself is already committed.
    """
    try:
        await enqueue(
            "send_email",
            to=to,
            template_id=EmailTemplate.WORKSPACE_INVITATION.value,
            template_data=template_data,
        )
    except (RedisError, OSError) as e:
        logger.warning("invitation_email_enqueue_failed", to=to, error=str(e))


class InvitationService:
    """Service for inviting users and resolving invitations."""

    def __init__(
        self,
        repo: InvitationRepo,
        members: MembershipRepo,
        workspaces: WorkspaceRepo,
        users: UserRepo,
        notifications: NotificationSvc,
    ) -> None:
        self.repo = repo
        self.members = members
        self.workspaces = workspaces
        self.users = users
        self.notifications = notifications

    # ============================================================
    # Invite
    # ============================================================

    async def invite(
        self,
        access: WorkspaceAccess,
        inviter: User,
        data: InvitationCreate,
    ) -> tuple[Invitation, str]:
        """Invite an email address to a workspace.

        Args:
            access: The workspace and the inviter's membership
            inviter: The inviting user
            data: Email, role and optional message

        Returns:
            The pending invitation and its one-time link token

        Raises:
            ForbiddenError: Without invite_members, or for a role not
                strictly below the inviter's
            ValidationError: For an unknown role or Owner
            ConflictError: If the email is a member or already invited
        """
        access.require(WorkspaceAction.INVITE_MEMBERS)

        role = parse_role(data.role)
        if role == WorkspaceRole.OWNER:
            raise ValidationError(
                "Owner cannot be granted by invitation; transfer ownership instead",
                error_code="invalid_role",
                errors=[{"field": "role", "message": "Owner is not invitable"}],
            )
        if not can_perform_action(
            access.role, role, WorkspaceAction.INVITE_MEMBERS, new_role=role
        ):
            raise ForbiddenError(
                "You can only invite members below your own role",
                error_code="permission_denied",
                details={"required_permission": WorkspaceAction.INVITE_MEMBERS.value},
            )

        workspace = access.workspace
        email = normalize_email(data.email)

        if await self.members.get_by_email(workspace.id, email):
            raise ConflictError(
                "This user is already a member of the workspace",
                error_code="already_member",
            )

        now = datetime.now(UTC)
        await self.repo.expire_stale(now, workspace_id=workspace.id, email=email)
        if await self.repo.get_pending(workspace.id, email):
            raise ConflictError(
                "A pending invitation already exists for this email",
                error_code="duplicate_invitation",
            )

        token = generate_token()
        try:
            invitation = await self.repo.create(
                Invitation(
                    workspace_id=workspace.id,
                    email=email,
                    role=role,
                    invited_by_id=inviter.id,
                    token_hash=hash_token(token),
                    message=data.message,
                    expires_at=now + timedelta(days=settings.invitation_expire_days),
                )
            )
        except IntegrityError:
            raise ConflictError(
                "A pending invitation already exists for this email",
                error_code="duplicate_invitation",
            ) from None

        invitee = await self.users.get_by_email(email)
        if invitee is not None:
            await self.notifications.notify(
                invitee.id,
                NotificationType.WORKSPACE_INVITE,
                title=f"Invitation to {workspace.name}",
                message=(
                    f"{inviter.display_name} invited you to join "
                    f"{workspace.name} as {role.value}."
                ),
                actor_id=inviter.id,
                workspace_id=workspace.id,
                action_url=f"/invitations/{invitation.id}",
                data={"invitation_id": str(invitation.id), "role": role.value},
            )

        logger.info(
            "invitation_created",
            invitation_id=str(invitation.id),
            workspace_id=str(workspace.id),
            role=role.value,
        )
        return invitation, token

    # ============================================================
    # Accept
    # ============================================================

    async def accept(self, invitation_id: UUID, user: User) -> Membership:
        """Accept an invitation by id.

        Raises:
            NotFoundError: If the invitation does not exist
            ExpiredError: If it expired
            ConflictError: If already resolved, already a member, or a
                concurrent request resolved it first
            ForbiddenError: If it was addressed to another email
        """
        invitation = await self.repo.get_by_id(invitation_id)
        if invitation is None:
            raise NotFoundError(
                "Invitation not found",
                resource="invitation",
                resource_id=str(invitation_id),
            )
        return await self._accept(invitation, user)

    async def accept_by_token(self, token: str, user: User) -> Membership:
        """Accept an invitation through its link token."""
        invitation = await self.repo.get_by_token_hash(hash_token(token))
        if invitation is None:
            raise NotFoundError("Invitation not found", resource="invitation")
        return await self._accept(invitation, user)

    async def _accept(self, invitation: Invitation, user: User) -> Membership:
        now = datetime.now(UTC)

        if invitation.status in RESOLVED_STATUSES:
            raise ConflictError(
                f"Invitation was already {invitation.status.value}",
                error_code="already_resolved",
            )
        if invitation.is_expired(now):
            raise ExpiredError("Invitation has expired", error_code="invitation_expired")
        if normalize_email(user.email) != invitation.email:
            raise ForbiddenError(
                "This invitation was sent to a different email address",
                error_code="permission_denied",
            )
        if await self.members.get_for_user(invitation.workspace_id, user.id):
            raise ConflictError(
                "You are already a member of this workspace",
                error_code="already_member",
            )

        await self.workspaces.lock(invitation.workspace_id)
        if not await self.repo.mark_accepted(invitation, now):
            raise ConflictError(
                "Invitation was resolved by a concurrent request",
                error_code="concurrent_modification",
            )

        try:
            membership = await self.members.create(
                Membership(
                    workspace_id=invitation.workspace_id,
                    user_id=user.id,
                    role=invitation.role,
                )
            )
        except IntegrityError:
            raise ConflictError(
                "You are already a member of this workspace",
                error_code="already_member",
            ) from None

        if invitation.invited_by_id is not None:
            await self.notifications.notify(
                invitation.invited_by_id,
                NotificationType.MEMBER_JOINED,
                title=f"{user.display_name} joined {invitation.workspace.name}",
                message=(
                    f"{user.display_name} accepted your invitation and joined "
                    f"as {invitation.role.value}."
                ),
                actor_id=user.id,
                workspace_id=invitation.workspace_id,
                action_url=f"/{invitation.workspace.slug}",
            )

        logger.info(
            "invitation_accepted",
            invitation_id=str(invitation.id),
            workspace_id=str(invitation.workspace_id),
            user_id=str(user.id),
        )
        return membership

    # ============================================================
    # Decline
    # ============================================================

    async def decline(self, invitation_id: UUID, user: User) -> Invitation:
        """Decline an invitation addressed to the user.

        Raises:
            NotFoundError: If the invitation does not exist
            ForbiddenError: If it was addressed to another email
            ExpiredError: If it expired
            ConflictError: If already resolved or resolved concurrently
        """
        invitation = await self.repo.get_by_id(invitation_id)
        if invitation is None:
            raise NotFoundError(
                "Invitation not found",
                resource="invitation",
                resource_id=str(invitation_id),
            )
        return await self._decline(invitation, user)

    async def decline_by_token(self, token: str, user: User) -> Invitation:
        """Decline an invitation through its link token."""
        invitation = await self.repo.get_by_token_hash(hash_token(token))
        if invitation is None:
            raise NotFoundError("Invitation not found", resource="invitation")
        return await self._decline(invitation, user)

    async def _decline(self, invitation: Invitation, user: User) -> Invitation:
        now = datetime.now(UTC)

        if normalize_email(user.email) != invitation.email:
            raise ForbiddenError(
                "This invitation was sent to a different email address",
                error_code="permission_denied",
            )
        if invitation.status in RESOLVED_STATUSES:
            raise ConflictError(
                f"Invitation was already {invitation.status.value}",
                error_code="already_resolved",
            )
        if invitation.is_expired(now):
            raise ExpiredError("Invitation has expired", error_code="invitation_expired")

        if not await self.repo.mark_declined(invitation, now):
            raise ConflictError(
                "Invitation was resolved by a concurrent request",
                error_code="concurrent_modification",
            )

        logger.info(
            "invitation_declined",
            invitation_id=str(invitation.id),
            workspace_id=str(invitation.workspace_id),
        )
        return invitation

    # ============================================================
    # Revoke / list / expire
    # ============================================================

    async def revoke(self, invitation_id: UUID, user: User) -> Invitation:
        """Revoke a pending invitation.

        Non-members get NotFoundError so invitations of other workspaces
        stay invisible.

        Raises:
            NotFoundError: If missing or the caller is not a member
            ForbiddenError: Without invite_members
            ConflictError: If it already left the pending state
        """
        invitation = await self.repo.get_by_id(invitation_id)
        membership = (
            await self.members.get_for_user(invitation.workspace_id, user.id)
            if invitation
            else None
        )
        if invitation is None or membership is None:
            raise NotFoundError(
                "Invitation not found",
                resource="invitation",
                resource_id=str(invitation_id),
            )
        require_permission(membership.role, WorkspaceAction.INVITE_MEMBERS)

        if not await self.repo.mark_revoked(invitation, datetime.now(UTC)):
            raise ConflictError(
                f"Invitation was already {invitation.status.value}",
                error_code="already_resolved",
            )

        logger.info("invitation_revoked", invitation_id=str(invitation.id))
        return invitation

    async def list_invitations(self, access: WorkspaceAccess) -> list[Invitation]:
        """List a workspace's open invitations."""
        access.require(WorkspaceAction.INVITE_MEMBERS)
        return await self.repo.list_pending_for_workspace(
            access.workspace.id, datetime.now(UTC)
        )

    async def list_my_invitations(self, user: User) -> list[Invitation]:
        """List open invitations addressed to the user's email."""
        return await self.repo.list_pending_for_email(
            normalize_email(user.email), datetime.now(UTC)
        )

    async def expire_stale(self, now: datetime | None = None) -> int:
        """Expire every pending invitation past its window.

        Returns:
            Number of invitations expired
        """
        count = await self.repo.expire_stale(now or datetime.now(UTC))
        logger.info("invitations_expired", count=count)
        return count


# Type alias for dependency injection
InvitationSvc = Annotated[InvitationService, Depends(InvitationService)]
