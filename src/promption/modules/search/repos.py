"""Search queries over workspace content.

Every query is restricted to the caller's workspaces through the
membership subquery; matching is a case-insensitive substring test with
LIKE wildcards in the term escaped.
"""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import or_, select

from promption.api.dependencies import DBSession
from promption.modules.categories.models import Category
from promption.modules.prompts.models import Prompt
from promption.modules.workspaces.models import Workspace
from promption.modules.workspaces.repos import accessible_workspace_ids


class SearchRepository:
    """Repository for scoped keyword search."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def search_workspaces(self, user_id: UUID, term: str, limit: int) -> list[Workspace]:
        stmt = (
            select(Workspace)
            .where(
                Workspace.id.in_(accessible_workspace_ids(user_id)),
                or_(
                    Workspace.name.icontains(term, autoescape=True),
                    Workspace.description.icontains(term, autoescape=True),
                ),
            )
            .order_by(Workspace.updated_at.desc(), Workspace.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def search_categories(self, user_id: UUID, term: str, limit: int) -> list[Category]:
        stmt = (
            select(Category)
            .where(
                Category.workspace_id.in_(accessible_workspace_ids(user_id)),
                or_(
                    Category.name.icontains(term, autoescape=True),
                    Category.description.icontains(term, autoescape=True),
                ),
            )
            .order_by(Category.updated_at.desc(), Category.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def search_prompts(
        self,
        user_id: UUID,
        term: str,
        limit: int,
        templates: bool = False,
    ) -> list[Prompt]:
        """Search live prompts, or only templates when ``templates`` is set.

        Args:
            user_id: The searching user
            term: Search term
            limit: Maximum results
            templates: Search templates instead of ordinary prompts

        Returns:
            Matches, most recently updated first
        """
        stmt = (
            select(Prompt)
            .where(
                Prompt.workspace_id.in_(accessible_workspace_ids(user_id)),
                Prompt.deleted_at.is_(None),
                Prompt.is_template.is_(templates),
                or_(
                    Prompt.title.icontains(term, autoescape=True),
                    Prompt.description.icontains(term, autoescape=True),
                ),
            )
            .order_by(Prompt.updated_at.desc(), Prompt.id)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())


# Type alias for dependency injection
SearchRepo = Annotated[SearchRepository, Depends(SearchRepository)]
