"""Prompt and template API routes."""

from uuid import UUID

from fastapi import APIRouter, Query, status

from promption.core.auth import CurrentUser
from promption.modules.prompts.schemas import (
    PromptCreate,
    PromptResponse,
    PromptUpdate,
    TemplateResponse,
    TemplateUse,
)
from promption.modules.prompts.services import PromptSvc
from promption.modules.workspaces.services import WorkspaceSvc


prompts_router = APIRouter(prefix="/workspaces/{slug}/prompts", tags=["prompts"])
templates_router = APIRouter(prefix="/templates", tags=["templates"])


# ============================================================
# Prompts
# ============================================================


@prompts_router.get(
    "",
    response_model=list[PromptResponse],
    summary="List prompts",
)
async def list_prompts(
    slug: str,
    workspaces: WorkspaceSvc,
    service: PromptSvc,
    current_user: CurrentUser,
    category_id: UUID | None = Query(None),
) -> list[PromptResponse]:
    """List the workspace's prompts, optionally within one category."""
    access = await workspaces.get_access(slug, current_user)
    prompts = await service.list_prompts(access, category_id)
    return [PromptResponse.model_validate(p) for p in prompts]


@prompts_router.post(
    "",
    response_model=PromptResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create prompt",
)
async def create_prompt(
    slug: str,
    data: PromptCreate,
    workspaces: WorkspaceSvc,
    service: PromptSvc,
    current_user: CurrentUser,
) -> PromptResponse:
    access = await workspaces.get_access(slug, current_user)
    prompt = await service.create_prompt(access, current_user, data)
    return PromptResponse.model_validate(prompt)


@prompts_router.get(
    "/{prompt_slug}",
    response_model=PromptResponse,
    summary="Get prompt",
)
async def get_prompt(
    slug: str,
    prompt_slug: str,
    workspaces: WorkspaceSvc,
    service: PromptSvc,
    current_user: CurrentUser,
) -> PromptResponse:
    access = await workspaces.get_access(slug, current_user)
    prompt = await service.get_prompt(access, prompt_slug)
    return PromptResponse.model_validate(prompt)


@prompts_router.patch(
    "/{prompt_slug}",
    response_model=PromptResponse,
    summary="Update prompt",
)
async def update_prompt(
    slug: str,
    prompt_slug: str,
    data: PromptUpdate,
    workspaces: WorkspaceSvc,
    service: PromptSvc,
    current_user: CurrentUser,
) -> PromptResponse:
    access = await workspaces.get_access(slug, current_user)
    prompt = await service.update_prompt(access, current_user, prompt_slug, data)
    return PromptResponse.model_validate(prompt)


@prompts_router.delete(
    "/{prompt_slug}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete prompt",
)
async def delete_prompt(
    slug: str,
    prompt_slug: str,
    workspaces: WorkspaceSvc,
    service: PromptSvc,
    current_user: CurrentUser,
) -> None:
    """Soft-delete a prompt."""
    access = await workspaces.get_access(slug, current_user)
    await service.delete_prompt(access, current_user, prompt_slug)


@prompts_router.post(
    "/{prompt_slug}/duplicate",
    response_model=PromptResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Duplicate prompt",
    description='Copy a prompt, with "(Copy)" appended to its title.',
)
async def duplicate_prompt(
    slug: str,
    prompt_slug: str,
    workspaces: WorkspaceSvc,
    service: PromptSvc,
    current_user: CurrentUser,
) -> PromptResponse:
    access = await workspaces.get_access(slug, current_user)
    prompt = await service.duplicate_prompt(access, current_user, prompt_slug)
    return PromptResponse.model_validate(prompt)


# ============================================================
# Templates
# ============================================================


@templates_router.get(
    "",
    response_model=list[TemplateResponse],
    summary="List templates",
    description="List templates from every workspace the caller belongs to.",
)
async def list_templates(
    service: PromptSvc,
    current_user: CurrentUser,
) -> list[TemplateResponse]:
    templates = await service.list_templates(current_user)
    return [TemplateResponse.from_prompt(t) for t in templates]


@templates_router.post(
    "/{template_id}/use",
    response_model=PromptResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Use template",
    description="Create a prompt in the given workspace from a template.",
)
async def use_template(
    template_id: UUID,
    data: TemplateUse,
    workspaces: WorkspaceSvc,
    service: PromptSvc,
    current_user: CurrentUser,
) -> PromptResponse:
    access = await workspaces.get_access(data.workspace_slug, current_user)
    prompt = await service.use_template(access, current_user, template_id)
    return PromptResponse.model_validate(prompt)


router = APIRouter()
router.include_router(prompts_router)
router.include_router(templates_router)
