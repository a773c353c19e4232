"""Prompt repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from promption.api.dependencies import DBSession
from promption.modules.prompts.models import Prompt
from promption.modules.workspaces.repos import accessible_workspace_ids


class PromptRepository:
    """Repository for Prompt database operations.

    Read queries skip soft-deleted prompts. ``slug_exists`` does not, as
    a deleted prompt still holds its slug.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, prompt: Prompt) -> Prompt:
        """Create a new prompt.

        Raises:
            IntegrityError: If the slug is taken in the workspace
        """
        async with self.session.begin_nested():
            self.session.add(prompt)
            await self.session.flush()
        await self.session.refresh(prompt)
        return prompt

    async def get_by_slug(self, workspace_id: UUID, slug: str) -> Prompt | None:
        """Get a live prompt by its slug within a workspace."""
        stmt = select(Prompt).where(
            Prompt.workspace_id == workspace_id,
            Prompt.slug == slug,
            Prompt.deleted_at.is_(None),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def slug_exists(self, workspace_id: UUID, slug: str) -> bool:
        stmt = (
            select(func.count())
            .select_from(Prompt)
            .where(Prompt.workspace_id == workspace_id, Prompt.slug == slug)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def list_for_workspace(
        self,
        workspace_id: UUID,
        category_id: UUID | None = None,
    ) -> list[Prompt]:
        """List live prompts of a workspace, most recently updated first.

        Args:
            workspace_id: The workspace
            category_id: Only prompts in this category

        Returns:
            Matching prompts
        """
        stmt = select(Prompt).where(
            Prompt.workspace_id == workspace_id,
            Prompt.deleted_at.is_(None),
        )
        if category_id is not None:
            stmt = stmt.where(Prompt.category_id == category_id)
        stmt = stmt.order_by(Prompt.updated_at.desc(), Prompt.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def list_templates(self, user_id: UUID) -> list[Prompt]:
        """List live templates in every workspace the user belongs to."""
        stmt = (
            select(Prompt)
            .where(
                Prompt.is_template.is_(True),
                Prompt.deleted_at.is_(None),
                Prompt.workspace_id.in_(accessible_workspace_ids(user_id)),
            )
            .order_by(Prompt.updated_at.desc(), Prompt.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_template_for_user(self, template_id: UUID, user_id: UUID) -> Prompt | None:
        """Get a live template from one of the user's workspaces."""
        stmt = select(Prompt).where(
            Prompt.id == template_id,
            Prompt.is_template.is_(True),
            Prompt.deleted_at.is_(None),
            Prompt.workspace_id.in_(accessible_workspace_ids(user_id)),
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, prompt: Prompt) -> Prompt:
        """Flush pending changes on a prompt and reload it."""
        await self.session.flush()
        await self.session.refresh(prompt)
        return prompt


# Type alias for dependency injection
PromptRepo = Annotated[PromptRepository, Depends(PromptRepository)]
