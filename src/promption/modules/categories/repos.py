"""Category repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, select

from promption.api.dependencies import DBSession
from promption.modules.categories.models import Category


class CategoryRepository:
    """Repository for Category database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, category: Category) -> Category:
        """Create a new category.

        Raises:
            IntegrityError: If the name is taken in the workspace
        """
        async with self.session.begin_nested():
            self.session.add(category)
            await self.session.flush()
        await self.session.refresh(category)
        return category

    async def get_in_workspace(
        self, workspace_id: UUID, category_id: UUID
    ) -> Category | None:
        """Get a category only if it belongs to the workspace."""
        stmt = select(Category).where(
            Category.id == category_id,
            Category.workspace_id == workspace_id,
        )
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def name_exists(
        self,
        workspace_id: UUID,
        name: str,
        exclude_id: UUID | None = None,
    ) -> bool:
        """Check whether a category name is taken in the workspace."""
        stmt = (
            select(func.count())
            .select_from(Category)
            .where(Category.workspace_id == workspace_id, Category.name == name)
        )
        if exclude_id is not None:
            stmt = stmt.where(Category.id != exclude_id)
        result = await self.session.execute(stmt)
        return result.scalar_one() > 0

    async def list_for_workspace(self, workspace_id: UUID) -> list[Category]:
        """List a workspace's categories by name."""
        stmt = (
            select(Category)
            .where(Category.workspace_id == workspace_id)
            .order_by(Category.name, Category.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def update(self, category: Category) -> Category:
        """Flush pending changes on a category and reload it.

        Raises:
            IntegrityError: If a rename collides with another category
        """
        async with self.session.begin_nested():
            await self.session.flush()
        await self.session.refresh(category)
        return category

    async def delete(self, category: Category) -> None:
        """Delete a category; its prompts become uncategorized."""
        await self.session.delete(category)
        await self.session.flush()


# Type alias for dependency injection
CategoryRepo = Annotated[CategoryRepository, Depends(CategoryRepository)]
