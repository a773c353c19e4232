"""Search aggregator across prompts, workspaces, categories and templates."""

from typing import Annotated

import structlog
from fastapi import Depends

from promption.config import settings
from promption.modules.categories.models import Category
from promption.modules.prompts.models import Prompt
from promption.modules.search.repos import SearchRepo
from promption.modules.search.schemas import (
    SearchResult,
    SearchResults,
    SearchResultType,
)
from promption.modules.users.models import User
from promption.modules.workspaces.models import Workspace


logger = structlog.get_logger()


def workspace_result(workspace: Workspace) -> SearchResult:
    return SearchResult(
        id=workspace.id,
        title=workspace.name,
        url=f"/{workspace.slug}",
        breadcrumbs=[workspace.name],
        type=SearchResultType.WORKSPACE,
    )


def category_result(category: Category) -> SearchResult:
    workspace = category.workspace
    return SearchResult(
        id=category.id,
        title=category.name,
        url=f"/{workspace.slug}/categories/{category.id}",
        breadcrumbs=[workspace.name, category.name],
        type=SearchResultType.CATEGORY,
    )


def prompt_result(prompt: Prompt) -> SearchResult:
    """Map a prompt or template to a result with its breadcrumb trail."""
    breadcrumbs = [prompt.workspace.name]
    if prompt.category is not None:
        breadcrumbs.append(prompt.category.name)
    breadcrumbs.append(prompt.title)

    return SearchResult(
        id=prompt.id,
        title=prompt.title,
        url=f"/{prompt.workspace.slug}/{prompt.slug}",
        breadcrumbs=breadcrumbs,
        type=SearchResultType.TEMPLATE if prompt.is_template else SearchResultType.PROMPT,
    )


class SearchService:
    """Service for keyword search scoped to the caller's workspaces."""

    def __init__(self, repo: SearchRepo) -> None:
        self.repo = repo

    async def search(self, user: User, query: str | None) -> SearchResults:
        """Search every entity type the user can see.

        Queries shorter than the configured minimum after trimming return
        empty groups without touching the database.

        Args:
            user: The searching user
            query: Raw query text

        Returns:
            Matches grouped by type, each group most recently updated
            first and capped at the configured size
        """
        term = (query or "").strip()
        if len(term) < settings.search_min_query_length:
            return SearchResults()

        limit = settings.search_max_results_per_type
        workspaces = await self.repo.search_workspaces(user.id, term, limit)
        categories = await self.repo.search_categories(user.id, term, limit)
        prompts = await self.repo.search_prompts(user.id, term, limit)
        templates = await self.repo.search_prompts(user.id, term, limit, templates=True)

        results = SearchResults(
            prompts=[prompt_result(p) for p in prompts],
            workspaces=[workspace_result(w) for w in workspaces],
            categories=[category_result(c) for c in categories],
            templates=[prompt_result(t) for t in templates],
        )
        logger.debug(
            "search_completed",
            user_id=str(user.id),
            prompts=len(results.prompts),
            workspaces=len(results.workspaces),
            categories=len(results.categories),
            templates=len(results.templates),
        )
        return results


# Type alias for dependency injection
SearchSvc = Annotated[SearchService, Depends(SearchService)]
