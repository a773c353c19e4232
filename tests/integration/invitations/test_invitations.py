"""Integration tests for the invitation lifecycle."""

from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from promption.core.auth import issue_token
from promption.core.permissions import WorkspaceRole
from promption.modules.invitations.models import InvitationStatus
from promption.modules.invitations.repos import InvitationRepository
from promption.modules.notifications.models import Notification, NotificationType
from promption.modules.users.models import User
from promption.modules.workspaces.models import Workspace


pytestmark = pytest.mark.integration

Headers = Callable[[User], dict[str, str]]


def invite_url(workspace: Workspace) -> str:
    return f"/api/v1/workspaces/{workspace.slug}/invitations"


async def expire(db: AsyncSession, invitation_id: str) -> None:
    """Move an invitation's expiry into the past."""
    invitation = await InvitationRepository(db).get_by_id(UUID(invitation_id))
    assert invitation is not None
    invitation.expires_at = datetime.now(UTC) - timedelta(minutes=1)
    await db.flush()


@pytest.fixture
async def invitee(make_user: Callable[..., Awaitable[User]]) -> User:
    return await make_user(email="frank@example.com", full_name="Frank")


@pytest.fixture
async def invitation(
    client: AsyncClient,
    workspace: Workspace,
    owner_headers: dict[str, str],
    invitee: User,
) -> dict:
    """A pending viewer invitation for ``invitee``, as returned on creation."""
    response = await client.post(
        invite_url(workspace),
        json={"email": invitee.email, "role": "viewer"},
        headers=owner_headers,
    )
    assert response.status_code == 201
    return response.json()


class TestInvitationScenario:
    """The full invite, sign-up, accept and escalation-attempt story."""

    async def test_invite_accept_and_blocked_escalation(
        self,
        client: AsyncClient,
        db: AsyncSession,
        workspace: Workspace,
        owner: User,
        owner_headers: dict[str, str],
        make_user: Callable[..., Awaitable[User]],
        add_member: Callable[..., Awaitable[object]],
        headers_for: Headers,
    ):
        response = await client.post(
            invite_url(workspace),
            json={"email": "Bob@X.com", "role": "editor"},
            headers=owner_headers,
        )
        assert response.status_code == 201
        invitation = response.json()
        assert invitation["status"] == "pending"
        assert invitation["email"] == "bob@x.com"
        assert invitation["role"] == "editor"
        assert invitation["token"]

        # Bob is not registered yet, so nobody is notified
        count = await db.execute(select(func.count()).select_from(Notification))
        assert count.scalar_one() == 0

        # Bob signs up with the hosted provider; his first request creates him
        bob_headers = {
            "Authorization": "Bearer "
            + issue_token(subject="bob-subject", email="bob@x.com", full_name="Bob")
        }
        mine = await client.get("/api/v1/invitations/mine", headers=bob_headers)
        assert mine.status_code == 200
        assert [i["id"] for i in mine.json()] == [invitation["id"]]

        accepted = await client.post(
            f"/api/v1/invitations/{invitation['id']}/accept", headers=bob_headers
        )
        assert accepted.status_code == 200
        bob_membership = accepted.json()
        assert bob_membership["role"] == "editor"
        assert bob_membership["user"]["email"] == "bob@x.com"
        assert bob_membership["workspace_id"] == str(workspace.id)

        stored = await InvitationRepository(db).get_by_id(UUID(invitation["id"]))
        assert stored is not None
        assert stored.status == InvitationStatus.ACCEPTED
        assert stored.resolved_at is not None

        notifications = await client.get("/api/v1/notifications", headers=owner_headers)
        items = notifications.json()["items"]
        assert len(items) == 1
        assert items[0]["type"] == NotificationType.MEMBER_JOINED.value
        assert "Bob" in items[0]["title"]
        assert items[0]["actor"]["email"] == "bob@x.com"

        # Carol, an Editor, tries to make Bob the Owner
        carol = await make_user(email="carol@x.com", full_name="Carol")
        await add_member(workspace, carol, WorkspaceRole.EDITOR)
        escalation = await client.patch(
            f"/api/v1/memberships/{bob_membership['id']}",
            json={"role": "owner"},
            headers=headers_for(carol),
        )
        assert escalation.status_code == 403
        assert escalation.json()["error_code"] == "permission_denied"


class TestCreateInvitation:
    """Tests for POST /workspaces/{slug}/invitations."""

    async def test_queues_invitation_email(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner_headers: dict[str, str],
        enqueue_mock: AsyncMock,
    ):
        response = await client.post(
            invite_url(workspace),
            json={"email": "dana@example.com", "role": "viewer", "message": "Welcome!"},
            headers=owner_headers,
        )
        assert response.status_code == 201

        enqueue_mock.assert_awaited_once()
        args, kwargs = enqueue_mock.call_args
        assert args == ("send_email",)
        assert kwargs["to"] == "dana@example.com"
        assert kwargs["template_id"] == "workspace_invitation"
        data = kwargs["template_data"]
        assert data["workspace_name"] == workspace.name
        assert data["role"] == "Viewer"
        assert data["message"] == "Welcome!"
        assert data["invitation_url"].endswith(response.json()["token"])

    async def test_duplicate_pending_invitation_conflicts_for_any_role(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner_headers: dict[str, str],
    ):
        first = await client.post(
            invite_url(workspace),
            json={"email": "dup@example.com", "role": "viewer"},
            headers=owner_headers,
        )
        assert first.status_code == 201

        for role in ("viewer", "editor", "admin"):
            again = await client.post(
                invite_url(workspace),
                json={"email": "DUP@example.com", "role": role},
                headers=owner_headers,
            )
            assert again.status_code == 409
            assert again.json()["error_code"] == "duplicate_invitation"

    async def test_expired_invitation_can_be_reissued(
        self,
        client: AsyncClient,
        db: AsyncSession,
        workspace: Workspace,
        owner_headers: dict[str, str],
    ):
        first = await client.post(
            invite_url(workspace),
            json={"email": "late@example.com"},
            headers=owner_headers,
        )
        await expire(db, first.json()["id"])

        second = await client.post(
            invite_url(workspace),
            json={"email": "late@example.com"},
            headers=owner_headers,
        )
        assert second.status_code == 201

        old = await InvitationRepository(db).get_by_id(UUID(first.json()["id"]))
        assert old is not None
        assert old.status == InvitationStatus.EXPIRED

    async def test_existing_member_cannot_be_invited(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner: User,
        owner_headers: dict[str, str],
    ):
        response = await client.post(
            invite_url(workspace),
            json={"email": owner.email.upper()},
            headers=owner_headers,
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "already_member"

    @pytest.mark.parametrize("role", ["owner", "superuser"])
    async def test_rejects_owner_and_unknown_roles(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner_headers: dict[str, str],
        role: str,
    ):
        response = await client.post(
            invite_url(workspace),
            json={"email": "role@example.com", "role": role},
            headers=owner_headers,
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "invalid_role"

    async def test_viewer_cannot_invite(
        self,
        client: AsyncClient,
        workspace: Workspace,
        make_user: Callable[..., Awaitable[User]],
        add_member: Callable[..., Awaitable[object]],
        headers_for: Headers,
    ):
        viewer = await make_user()
        await add_member(workspace, viewer, WorkspaceRole.VIEWER)

        response = await client.post(
            invite_url(workspace),
            json={"email": "someone@example.com"},
            headers=headers_for(viewer),
        )
        assert response.status_code == 403
        assert response.json()["error_code"] == "permission_denied"

    async def test_admin_can_only_invite_below_admin(
        self,
        client: AsyncClient,
        workspace: Workspace,
        make_user: Callable[..., Awaitable[User]],
        add_member: Callable[..., Awaitable[object]],
        headers_for: Headers,
    ):
        admin = await make_user()
        await add_member(workspace, admin, WorkspaceRole.ADMIN)

        peer = await client.post(
            invite_url(workspace),
            json={"email": "peer@example.com", "role": "admin"},
            headers=headers_for(admin),
        )
        assert peer.status_code == 403

        editor = await client.post(
            invite_url(workspace),
            json={"email": "editor@example.com", "role": "editor"},
            headers=headers_for(admin),
        )
        assert editor.status_code == 201

    async def test_registered_invitee_is_notified(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner_headers: dict[str, str],
        make_user: Callable[..., Awaitable[User]],
        headers_for: Headers,
    ):
        erin = await make_user(email="erin@example.com")

        response = await client.post(
            invite_url(workspace),
            json={"email": "erin@example.com", "role": "editor"},
            headers=owner_headers,
        )
        assert response.status_code == 201

        notifications = await client.get(
            "/api/v1/notifications", headers=headers_for(erin)
        )
        body = notifications.json()
        assert body["unread_count"] == 1
        notification = body["items"][0]
        assert notification["type"] == "workspace_invite"
        assert notification["workspace"]["slug"] == workspace.slug
        assert notification["data"]["invitation_id"] == response.json()["id"]

    async def test_non_member_gets_not_found(
        self,
        client: AsyncClient,
        workspace: Workspace,
        make_user: Callable[..., Awaitable[User]],
        headers_for: Headers,
    ):
        stranger = await make_user()
        response = await client.post(
            invite_url(workspace),
            json={"email": "x@example.com"},
            headers=headers_for(stranger),
        )
        assert response.status_code == 404


class TestAcceptInvitation:
    """Tests for accepting invitations."""

    async def test_accepts_exactly_once(
        self,
        client: AsyncClient,
        invitation: dict,
        invitee: User,
        headers_for: Headers,
    ):
        url = f"/api/v1/invitations/{invitation['id']}/accept"

        first = await client.post(url, headers=headers_for(invitee))
        assert first.status_code == 200
        assert first.json()["role"] == "viewer"

        second = await client.post(url, headers=headers_for(invitee))
        assert second.status_code == 409
        assert second.json()["error_code"] == "already_resolved"

    async def test_accepts_by_link_token(
        self,
        client: AsyncClient,
        invitation: dict,
        invitee: User,
        headers_for: Headers,
    ):
        response = await client.post(
            f"/api/v1/invitations/token/{invitation['token']}/accept",
            headers=headers_for(invitee),
        )
        assert response.status_code == 200
        assert response.json()["user"]["id"] == str(invitee.id)

    async def test_unknown_token_is_not_found(
        self,
        client: AsyncClient,
        invitee: User,
        headers_for: Headers,
    ):
        response = await client.post(
            "/api/v1/invitations/token/not-a-real-token/accept",
            headers=headers_for(invitee),
        )
        assert response.status_code == 404

    async def test_expired_invitation_fails(
        self,
        client: AsyncClient,
        db: AsyncSession,
        invitation: dict,
        invitee: User,
        headers_for: Headers,
    ):
        await expire(db, invitation["id"])

        response = await client.post(
            f"/api/v1/invitations/{invitation['id']}/accept",
            headers=headers_for(invitee),
        )
        assert response.status_code == 410
        assert response.json()["error_code"] == "invitation_expired"

    async def test_revoked_invitation_fails(
        self,
        client: AsyncClient,
        invitation: dict,
        invitee: User,
        owner_headers: dict[str, str],
        headers_for: Headers,
    ):
        revoked = await client.delete(
            f"/api/v1/invitations/{invitation['id']}", headers=owner_headers
        )
        assert revoked.status_code == 200
        assert revoked.json()["status"] == "revoked"

        response = await client.post(
            f"/api/v1/invitations/{invitation['id']}/accept",
            headers=headers_for(invitee),
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "already_resolved"

    async def test_other_email_cannot_accept(
        self,
        client: AsyncClient,
        invitation: dict,
        make_user: Callable[..., Awaitable[User]],
        headers_for: Headers,
    ):
        other = await make_user()
        response = await client.post(
            f"/api/v1/invitations/{invitation['id']}/accept",
            headers=headers_for(other),
        )
        assert response.status_code == 403

    async def test_losing_a_concurrent_accept_reports_conflict(
        self,
        db: AsyncSession,
        invitation: dict,
    ):
        repo = InvitationRepository(db)
        stored = await repo.get_by_id(UUID(invitation["id"]))
        assert stored is not None
        now = datetime.now(UTC)

        assert await repo.mark_accepted(stored, now) is True
        assert await repo.mark_accepted(stored, now) is False


class TestDeclineInvitation:
    """Tests for an invitee turning an invitation down."""

    async def test_invitee_declines(
        self,
        client: AsyncClient,
        workspace: Workspace,
        invitation: dict,
        invitee: User,
        owner_headers: dict[str, str],
        headers_for: Headers,
    ):
        response = await client.post(
            f"/api/v1/invitations/{invitation['id']}/decline",
            headers=headers_for(invitee),
        )
        assert response.status_code == 200
        assert response.json()["status"] == "declined"
        assert response.json()["resolved_at"] is not None

        accept = await client.post(
            f"/api/v1/invitations/{invitation['id']}/accept",
            headers=headers_for(invitee),
        )
        assert accept.status_code == 409
        assert accept.json()["error_code"] == "already_resolved"

        mine = await client.get("/api/v1/invitations/mine", headers=headers_for(invitee))
        assert mine.json() == []

        # A declined invitation does not block a fresh one
        reinvite = await client.post(
            invite_url(workspace),
            json={"email": invitee.email, "role": "editor"},
            headers=owner_headers,
        )
        assert reinvite.status_code == 201

    async def test_declines_by_link_token(
        self,
        client: AsyncClient,
        invitation: dict,
        invitee: User,
        headers_for: Headers,
    ):
        response = await client.post(
            f"/api/v1/invitations/token/{invitation['token']}/decline",
            headers=headers_for(invitee),
        )
        assert response.status_code == 200
        assert response.json()["id"] == invitation["id"]
        assert response.json()["status"] == "declined"

    async def test_other_email_cannot_decline(
        self,
        client: AsyncClient,
        invitation: dict,
        invitee: User,
        make_user: Callable[..., Awaitable[User]],
        headers_for: Headers,
    ):
        other = await make_user()
        response = await client.post(
            f"/api/v1/invitations/{invitation['id']}/decline",
            headers=headers_for(other),
        )
        assert response.status_code == 403
        assert response.json()["error_code"] == "permission_denied"

        mine = await client.get("/api/v1/invitations/mine", headers=headers_for(invitee))
        assert [i["id"] for i in mine.json()] == [invitation["id"]]

    async def test_accepted_invitation_cannot_be_declined(
        self,
        client: AsyncClient,
        invitation: dict,
        invitee: User,
        headers_for: Headers,
    ):
        accepted = await client.post(
            f"/api/v1/invitations/{invitation['id']}/accept",
            headers=headers_for(invitee),
        )
        assert accepted.status_code == 200

        response = await client.post(
            f"/api/v1/invitations/{invitation['id']}/decline",
            headers=headers_for(invitee),
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "already_resolved"

    async def test_expired_invitation_cannot_be_declined(
        self,
        client: AsyncClient,
        db: AsyncSession,
        invitation: dict,
        invitee: User,
        headers_for: Headers,
    ):
        await expire(db, invitation["id"])

        response = await client.post(
            f"/api/v1/invitations/{invitation['id']}/decline",
            headers=headers_for(invitee),
        )
        assert response.status_code == 410

    async def test_decline_transition_applies_once(
        self,
        db: AsyncSession,
        invitation: dict,
    ):
        repo = InvitationRepository(db)
        stored = await repo.get_by_id(UUID(invitation["id"]))
        assert stored is not None
        now = datetime.now(UTC)

        assert await repo.mark_declined(stored, now) is True
        assert stored.status == InvitationStatus.DECLINED
        assert await repo.mark_declined(stored, now) is False
        assert await repo.mark_accepted(stored, now) is False


class TestListAndRevoke:
    """Tests for listing and revoking invitations."""

    async def test_lists_only_open_invitations(
        self,
        client: AsyncClient,
        db: AsyncSession,
        workspace: Workspace,
        owner_headers: dict[str, str],
    ):
        open_one = await client.post(
            invite_url(workspace), json={"email": "open@example.com"}, headers=owner_headers
        )
        stale = await client.post(
            invite_url(workspace), json={"email": "stale@example.com"}, headers=owner_headers
        )
        await expire(db, stale.json()["id"])

        response = await client.get(invite_url(workspace), headers=owner_headers)
        assert response.status_code == 200
        assert [i["id"] for i in response.json()] == [open_one.json()["id"]]
        assert "token" not in response.json()[0]

    async def test_non_member_cannot_revoke(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner_headers: dict[str, str],
        make_user: Callable[..., Awaitable[User]],
        headers_for: Headers,
    ):
        created = await client.post(
            invite_url(workspace), json={"email": "keep@example.com"}, headers=owner_headers
        )
        stranger = await make_user()

        response = await client.delete(
            f"/api/v1/invitations/{created.json()['id']}",
            headers=headers_for(stranger),
        )
        assert response.status_code == 404

    async def test_sweep_expires_stale_invitations_once(
        self,
        client: AsyncClient,
        db: AsyncSession,
        workspace: Workspace,
        owner_headers: dict[str, str],
    ):
        created = await client.post(
            invite_url(workspace), json={"email": "sweep@example.com"}, headers=owner_headers
        )
        await expire(db, created.json()["id"])

        repo = InvitationRepository(db)
        now = datetime.now(UTC)
        assert await repo.expire_stale(now) == 1
        assert await repo.expire_stale(now) == 0
