"""Integration tests for workspaces and the session user."""

from collections.abc import Awaitable, Callable
from unittest.mock import AsyncMock, patch

import pytest
from httpx import AsyncClient

from promption.core.auth import issue_token
from promption.core.permissions import WorkspaceRole
from promption.modules.users.models import User
from promption.modules.users.repos import UserRepository
from promption.modules.workspaces.models import Membership, Workspace
from promption.modules.workspaces.repos import WorkspaceRepository


pytestmark = pytest.mark.integration

Headers = Callable[[User], dict[str, str]]
MakeUser = Callable[..., Awaitable[User]]
AddMember = Callable[..., Awaitable[Membership]]


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class TestSession:
    """The first authenticated request creates the user."""

    async def test_first_request_creates_user(self, client: AsyncClient):
        headers = bearer(
            issue_token(subject="new-subject", email="  Dana@Example.COM ", full_name="Dana")
        )

        first = await client.get("/api/v1/me", headers=headers)
        assert first.status_code == 200
        assert first.json()["email"] == "dana@example.com"
        assert first.json()["full_name"] == "Dana"

        second = await client.get("/api/v1/me", headers=headers)
        assert second.json()["id"] == first.json()["id"]

    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/v1/me")
        assert response.status_code == 401
        assert response.json()["error_code"] == "missing_token"

    async def test_invalid_token(self, client: AsyncClient):
        response = await client.get("/api/v1/me", headers=bearer("not-a-jwt"))
        assert response.status_code == 401
        assert response.json()["error_code"] == "invalid_token"

    async def test_email_claimed_by_another_subject(
        self,
        client: AsyncClient,
        owner: User,
    ):
        headers = bearer(issue_token(subject="impostor", email=owner.email))

        response = await client.get("/api/v1/me", headers=headers)
        assert response.status_code == 409
        assert response.json()["error_code"] == "email_exists"

    async def test_concurrent_first_request_reuses_winner(
        self,
        client: AsyncClient,
        owner: User,
    ):
        headers = bearer(issue_token(subject=owner.auth_subject, email=owner.email))

        with (
            patch.object(
                UserRepository, "get_by_subject", AsyncMock(side_effect=[None, owner])
            ),
            patch.object(UserRepository, "get_by_email", AsyncMock(return_value=None)),
        ):
            response = await client.get("/api/v1/me", headers=headers)

        assert response.status_code == 200
        assert response.json()["id"] == str(owner.id)

    async def test_lost_email_race_conflicts(
        self,
        client: AsyncClient,
        owner: User,
        owner_headers: dict[str, str],
    ):
        headers = bearer(issue_token(subject="late-subject", email=owner.email))

        with patch.object(UserRepository, "get_by_email", AsyncMock(return_value=None)):
            response = await client.get("/api/v1/me", headers=headers)

        assert response.status_code == 409
        assert response.json()["error_code"] == "email_exists"

        still_usable = await client.get("/api/v1/me", headers=owner_headers)
        assert still_usable.status_code == 200

    async def test_inactive_user_is_rejected(
        self,
        client: AsyncClient,
        make_user: MakeUser,
        headers_for: Headers,
    ):
        retired = await make_user(is_active=False)

        response = await client.get("/api/v1/me", headers=headers_for(retired))
        assert response.status_code == 403

    async def test_update_profile(
        self,
        client: AsyncClient,
        owner_headers: dict[str, str],
    ):
        response = await client.patch(
            "/api/v1/me",
            json={"full_name": "Alice A.", "avatar_url": "https://cdn.example.com/a.png"},
            headers=owner_headers,
        )
        assert response.status_code == 200
        assert response.json()["full_name"] == "Alice A."
        assert response.json()["avatar_url"] == "https://cdn.example.com/a.png"


class TestWorkspaces:
    """Tests for the workspace endpoints."""

    async def test_creator_becomes_owner(
        self,
        client: AsyncClient,
        owner: User,
        owner_headers: dict[str, str],
    ):
        response = await client.post(
            "/api/v1/workspaces",
            json={"name": "Research Lab", "description": "Experiments"},
            headers=owner_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["slug"] == "research-lab"
        assert body["role"] == "owner"
        assert body["owner_id"] == str(owner.id)

        members = await client.get(
            f"/api/v1/workspaces/{body['slug']}/members", headers=owner_headers
        )
        assert [m["role"] for m in members.json()] == ["owner"]

    async def test_generated_slug_gets_suffix(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner_headers: dict[str, str],
    ):
        response = await client.post(
            "/api/v1/workspaces", json={"name": workspace.name}, headers=owner_headers
        )
        assert response.json()["slug"] == f"{workspace.slug}-2"

    async def test_explicit_slug_taken(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner_headers: dict[str, str],
    ):
        response = await client.post(
            "/api/v1/workspaces",
            json={"name": "Copy", "slug": workspace.slug},
            headers=owner_headers,
        )
        assert response.status_code == 409
        assert response.json()["error_code"] == "slug_exists"

    async def test_slug_taken_between_check_and_insert(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner_headers: dict[str, str],
    ):
        with patch.object(
            WorkspaceRepository, "slug_exists", AsyncMock(return_value=False)
        ):
            response = await client.post(
                "/api/v1/workspaces",
                json={"name": "Copy", "slug": workspace.slug},
                headers=owner_headers,
            )

        assert response.status_code == 409
        assert response.json()["error_code"] == "slug_exists"

        listed = await client.get("/api/v1/workspaces", headers=owner_headers)
        assert [w["slug"] for w in listed.json()] == [workspace.slug]

    async def test_lists_only_my_workspaces(
        self,
        client: AsyncClient,
        workspace: Workspace,
        make_user: MakeUser,
        add_member: AddMember,
        headers_for: Headers,
    ):
        editor = await make_user()
        await add_member(workspace, editor, WorkspaceRole.EDITOR)
        await client.post(
            "/api/v1/workspaces", json={"name": "Private"}, headers=headers_for(await make_user())
        )

        response = await client.get("/api/v1/workspaces", headers=headers_for(editor))
        assert [(w["slug"], w["role"]) for w in response.json()] == [
            (workspace.slug, "editor")
        ]

    async def test_non_member_gets_not_found(
        self,
        client: AsyncClient,
        workspace: Workspace,
        make_user: MakeUser,
        headers_for: Headers,
    ):
        response = await client.get(
            f"/api/v1/workspaces/{workspace.slug}", headers=headers_for(await make_user())
        )
        assert response.status_code == 404

    async def test_settings_need_admin(
        self,
        client: AsyncClient,
        workspace: Workspace,
        make_user: MakeUser,
        add_member: AddMember,
        headers_for: Headers,
    ):
        editor = await make_user()
        admin = await make_user()
        await add_member(workspace, editor, WorkspaceRole.EDITOR)
        await add_member(workspace, admin, WorkspaceRole.ADMIN)
        url = f"/api/v1/workspaces/{workspace.slug}"

        denied = await client.patch(url, json={"name": "Renamed"}, headers=headers_for(editor))
        assert denied.status_code == 403

        allowed = await client.patch(url, json={"name": "Renamed"}, headers=headers_for(admin))
        assert allowed.status_code == 200
        assert allowed.json()["name"] == "Renamed"
        assert allowed.json()["slug"] == workspace.slug

    async def test_only_owner_deletes(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner_headers: dict[str, str],
        make_user: MakeUser,
        add_member: AddMember,
        headers_for: Headers,
    ):
        admin = await make_user()
        await add_member(workspace, admin, WorkspaceRole.ADMIN)
        url = f"/api/v1/workspaces/{workspace.slug}"

        denied = await client.delete(url, headers=headers_for(admin))
        assert denied.status_code == 403

        deleted = await client.delete(url, headers=owner_headers)
        assert deleted.status_code == 204

        gone = await client.get(url, headers=owner_headers)
        assert gone.status_code == 404
