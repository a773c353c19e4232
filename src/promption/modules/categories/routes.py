"""Category API routes."""

from uuid import UUID

from fastapi import APIRouter, status

from promption.core.auth import CurrentUser
from promption.modules.categories.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
)
from promption.modules.categories.services import CategorySvc
from promption.modules.workspaces.services import WorkspaceSvc


router = APIRouter(prefix="/workspaces/{slug}/categories", tags=["categories"])


@router.get(
    "",
    response_model=list[CategoryResponse],
    summary="List categories",
)
async def list_categories(
    slug: str,
    workspaces: WorkspaceSvc,
    service: CategorySvc,
    current_user: CurrentUser,
) -> list[CategoryResponse]:
    """List the workspace's categories."""
    access = await workspaces.get_access(slug, current_user)
    categories = await service.list_categories(access)
    return [CategoryResponse.model_validate(c) for c in categories]


@router.post(
    "",
    response_model=CategoryResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create category",
)
async def create_category(
    slug: str,
    data: CategoryCreate,
    workspaces: WorkspaceSvc,
    service: CategorySvc,
    current_user: CurrentUser,
) -> CategoryResponse:
    """Create a category in the workspace."""
    access = await workspaces.get_access(slug, current_user)
    category = await service.create_category(access, data)
    return CategoryResponse.model_validate(category)


@router.patch(
    "/{category_id}",
    response_model=CategoryResponse,
    summary="Update category",
)
async def update_category(
    slug: str,
    category_id: UUID,
    data: CategoryUpdate,
    workspaces: WorkspaceSvc,
    service: CategorySvc,
    current_user: CurrentUser,
) -> CategoryResponse:
    access = await workspaces.get_access(slug, current_user)
    category = await service.update_category(access, category_id, data)
    return CategoryResponse.model_validate(category)


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete category",
    description="Delete a category. Its prompts are kept without a category.",
)
async def delete_category(
    slug: str,
    category_id: UUID,
    workspaces: WorkspaceSvc,
    service: CategorySvc,
    current_user: CurrentUser,
) -> None:
    access = await workspaces.get_access(slug, current_user)
    await service.delete_category(access, category_id)
