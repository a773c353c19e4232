"""Integration tests for the search aggregator."""

from collections.abc import Awaitable, Callable
from unittest.mock import patch

import pytest
from httpx import AsyncClient

from promption.core.permissions import WorkspaceRole
from promption.modules.users.models import User
from promption.modules.workspaces.models import Membership, Workspace


pytestmark = pytest.mark.integration

Headers = Callable[[User], dict[str, str]]

EMPTY = {"prompts": [], "workspaces": [], "categories": [], "templates": []}


async def search(client: AsyncClient, headers: dict[str, str], q: str) -> dict:
    response = await client.get("/api/v1/search", params={"q": q}, headers=headers)
    assert response.status_code == 200
    return response.json()


@pytest.fixture
async def seeded(
    client: AsyncClient,
    workspace: Workspace,
    owner_headers: dict[str, str],
) -> dict[str, str]:
    """A category, a prompt in it, a template and a deleted prompt."""
    base = f"/api/v1/workspaces/{workspace.slug}"
    category = await client.post(
        f"{base}/categories", json={"name": "Onboarding"}, headers=owner_headers
    )
    prompt = await client.post(
        f"{base}/prompts",
        json={"title": "Onboarding checklist", "category_id": category.json()["id"]},
        headers=owner_headers,
    )
    template = await client.post(
        f"{base}/prompts",
        json={
            "title": "Release notes",
            "description": "Template for onboarding new users",
            "is_template": True,
        },
        headers=owner_headers,
    )
    await client.post(
        f"{base}/prompts", json={"title": "Onboarding draft"}, headers=owner_headers
    )
    await client.delete(f"{base}/prompts/onboarding-draft", headers=owner_headers)
    return {
        "category": category.json()["id"],
        "prompt": prompt.json()["id"],
        "template": template.json()["id"],
    }


class TestSearch:
    """Tests for GET /search."""

    @pytest.mark.parametrize("q", ["", " ", "o", " o "])
    async def test_short_query_returns_empty_groups(
        self,
        client: AsyncClient,
        seeded: dict[str, str],
        owner_headers: dict[str, str],
        q: str,
    ):
        assert await search(client, owner_headers, q) == EMPTY

    async def test_no_matches(
        self,
        client: AsyncClient,
        seeded: dict[str, str],
        owner_headers: dict[str, str],
    ):
        assert await search(client, owner_headers, "zzzz-nothing") == EMPTY

    async def test_groups_results_by_type(
        self,
        client: AsyncClient,
        seeded: dict[str, str],
        workspace: Workspace,
        owner_headers: dict[str, str],
    ):
        results = await search(client, owner_headers, "ONBOARD")

        assert [r["id"] for r in results["prompts"]] == [seeded["prompt"]]
        assert [r["id"] for r in results["categories"]] == [seeded["category"]]
        assert [r["id"] for r in results["templates"]] == [seeded["template"]]
        assert results["workspaces"] == []

        prompt = results["prompts"][0]
        assert prompt["type"] == "prompt"
        assert prompt["url"] == f"/{workspace.slug}/onboarding-checklist"
        assert prompt["breadcrumbs"] == [
            workspace.name,
            "Onboarding",
            "Onboarding checklist",
        ]

        category = results["categories"][0]
        assert category["url"] == f"/{workspace.slug}/categories/{seeded['category']}"
        assert category["breadcrumbs"] == [workspace.name, "Onboarding"]

        template = results["templates"][0]
        assert template["type"] == "template"
        assert template["breadcrumbs"] == [workspace.name, "Release notes"]

    async def test_matches_workspace_names(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner_headers: dict[str, str],
    ):
        results = await search(client, owner_headers, "acme")

        assert [r["title"] for r in results["workspaces"]] == [workspace.name]
        assert results["workspaces"][0]["url"] == f"/{workspace.slug}"

    async def test_never_returns_other_workspaces(
        self,
        client: AsyncClient,
        seeded: dict[str, str],
        make_user: Callable[..., Awaitable[User]],
        headers_for: Headers,
    ):
        outsider = await make_user()
        await client.post(
            "/api/v1/workspaces",
            json={"name": "Onboarding Lab"},
            headers=headers_for(outsider),
        )

        results = await search(client, headers_for(outsider), "onboard")

        assert results["prompts"] == []
        assert results["categories"] == []
        assert results["templates"] == []
        assert [r["title"] for r in results["workspaces"]] == ["Onboarding Lab"]

    async def test_members_of_any_role_see_results(
        self,
        client: AsyncClient,
        seeded: dict[str, str],
        workspace: Workspace,
        make_user: Callable[..., Awaitable[User]],
        add_member: Callable[..., Awaitable[Membership]],
        headers_for: Headers,
    ):
        viewer = await make_user()
        await add_member(workspace, viewer, WorkspaceRole.VIEWER)

        results = await search(client, headers_for(viewer), "checklist")
        assert [r["id"] for r in results["prompts"]] == [seeded["prompt"]]

    async def test_like_wildcards_are_literal(
        self,
        client: AsyncClient,
        seeded: dict[str, str],
        owner_headers: dict[str, str],
    ):
        assert await search(client, owner_headers, "%%") == EMPTY
        assert await search(client, owner_headers, "__") == EMPTY

    async def test_caps_each_group(
        self,
        client: AsyncClient,
        workspace: Workspace,
        owner_headers: dict[str, str],
    ):
        for n in range(4):
            await client.post(
                f"/api/v1/workspaces/{workspace.slug}/prompts",
                json={"title": f"Summary {n}"},
                headers=owner_headers,
            )

        with patch("promption.modules.search.services.settings") as mock_settings:
            mock_settings.search_min_query_length = 2
            mock_settings.search_max_results_per_type = 3
            results = await search(client, owner_headers, "summary")

        assert len(results["prompts"]) == 3

    async def test_requires_authentication(self, client: AsyncClient):
        response = await client.get("/api/v1/search", params={"q": "anything"})
        assert response.status_code == 401
