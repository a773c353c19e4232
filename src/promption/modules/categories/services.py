"""Category service for business logic."""

from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from promption.core.errors import ConflictError, NotFoundError
from promption.core.permissions import WorkspaceAction
from promption.modules.categories.models import Category
from promption.modules.categories.repos import CategoryRepo
from promption.modules.categories.schemas import CategoryCreate, CategoryUpdate
from promption.modules.workspaces.services import WorkspaceAccess


logger = structlog.get_logger()


def _category_exists(name: str) -> ConflictError:
    return ConflictError(
        "A category with this name already exists",
        error_code="category_exists",
        details={"name": name},
    )


class CategoryService:
    """Service for workspace categories."""

    def __init__(self, repo: CategoryRepo) -> None:
        self.repo = repo

    async def _ensure_name_free(
        self, workspace_id: UUID, name: str, exclude_id: UUID | None = None
    ) -> None:
        if await self.repo.name_exists(workspace_id, name, exclude_id):
            raise _category_exists(name)

    async def list_categories(self, access: WorkspaceAccess) -> list[Category]:
        access.require(WorkspaceAction.VIEW_WORKSPACE)
        return await self.repo.list_for_workspace(access.workspace.id)

    async def get_category(self, access: WorkspaceAccess, category_id: UUID) -> Category:
        """Get a category in the workspace.

        Raises:
            NotFoundError: If it does not exist in this workspace
        """
        category = await self.repo.get_in_workspace(access.workspace.id, category_id)
        if category is None:
            raise NotFoundError(
                "Category not found",
                resource="category",
                resource_id=str(category_id),
            )
        return category

    async def create_category(
        self, access: WorkspaceAccess, data: CategoryCreate
    ) -> Category:
        """Create a category.

        Raises:
            ForbiddenError: If the role lacks create_categories
            ConflictError: If the name is already used in the workspace
        """
        access.require(WorkspaceAction.CREATE_CATEGORIES)
        await self._ensure_name_free(access.workspace.id, data.name)

        try:
            category = await self.repo.create(
                Category(workspace_id=access.workspace.id, **data.model_dump())
            )
        except IntegrityError:
            raise _category_exists(data.name) from None
        logger.info(
            "category_created",
            category_id=str(category.id),
            workspace_id=str(access.workspace.id),
        )
        return category

    async def update_category(
        self, access: WorkspaceAccess, category_id: UUID, data: CategoryUpdate
    ) -> Category:
        """Update a category.

        Raises:
            ForbiddenError: If the role lacks manage_categories
            NotFoundError: If the category is not in the workspace
            ConflictError: If renaming onto an existing name
        """
        access.require(WorkspaceAction.MANAGE_CATEGORIES)
        category = await self.get_category(access, category_id)

        changes = data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in changes and changes["name"] != category.name:
            await self._ensure_name_free(access.workspace.id, changes["name"], category.id)

        for field, value in changes.items():
            setattr(category, field, value)
        try:
            return await self.repo.update(category)
        except IntegrityError:
            raise _category_exists(changes["name"]) from None

    async def delete_category(self, access: WorkspaceAccess, category_id: UUID) -> None:
        """Delete a category.

        Raises:
            ForbiddenError: If the role lacks manage_categories
            NotFoundError: If the category is not in the workspace
        """
        access.require(WorkspaceAction.MANAGE_CATEGORIES)
        category = await self.get_category(access, category_id)
        await self.repo.delete(category)
        logger.info("category_deleted", category_id=str(category_id))


# Type alias for dependency injection
CategorySvc = Annotated[CategoryService, Depends(CategoryService)]
