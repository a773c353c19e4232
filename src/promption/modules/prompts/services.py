"""Prompt service for business logic."""

from datetime import UTC, datetime
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from promption.core.constants import MAX_TITLE_LENGTH
from promption.core.errors import ConflictError, ForbiddenError, NotFoundError
from promption.core.permissions import WorkspaceAction, has_permission
from promption.core.utils.text import generate_slug, with_suffix
from promption.modules.categories.repos import CategoryRepo
from promption.modules.prompts.models import Prompt
from promption.modules.prompts.repos import PromptRepo
from promption.modules.prompts.schemas import PromptCreate, PromptUpdate
from promption.modules.users.models import User
from promption.modules.workspaces.services import MAX_SLUG_ATTEMPTS, WorkspaceAccess


logger = structlog.get_logger()


class PromptService:
    """Service for prompts and templates."""

    def __init__(self, repo: PromptRepo, categories: CategoryRepo) -> None:
        self.repo = repo
        self.categories = categories

    async def _unique_slug(self, workspace_id: UUID, base: str) -> str:
        slug = base or "prompt"
        if not await self.repo.slug_exists(workspace_id, slug):
            return slug
        for suffix in range(2, MAX_SLUG_ATTEMPTS + 2):
            candidate = with_suffix(slug, suffix)
            if not await self.repo.slug_exists(workspace_id, candidate):
                return candidate
        raise ConflictError(
            "Could not allocate a unique slug for this prompt",
            error_code="slug_exists",
        )

    async def _insert(self, prompt: Prompt) -> Prompt:
        slug = prompt.slug
        try:
            return await self.repo.create(prompt)
        except IntegrityError:
            raise ConflictError(
                "Prompt slug already in use",
                error_code="slug_exists",
                details={"slug": slug},
            ) from None

    async def _check_category(self, access: WorkspaceAccess, category_id: UUID) -> None:
        if await self.categories.get_in_workspace(access.workspace.id, category_id) is None:
            raise NotFoundError(
                "Category not found",
                resource="category",
                resource_id=str(category_id),
            )

    def _require_author_or(
        self,
        access: WorkspaceAccess,
        prompt: Prompt,
        user: User,
        action: WorkspaceAction,
    ) -> None:
        if prompt.created_by_id == user.id or has_permission(access.role, action):
            return
        raise ForbiddenError(
            "You do not have permission to perform this action",
            error_code="permission_denied",
            details={"required_permission": action.value},
        )

    async def list_prompts(
        self, access: WorkspaceAccess, category_id: UUID | None = None
    ) -> list[Prompt]:
        access.require(WorkspaceAction.VIEW_WORKSPACE)
        return await self.repo.list_for_workspace(access.workspace.id, category_id)

    async def get_prompt(self, access: WorkspaceAccess, slug: str) -> Prompt:
        """Get a live prompt by slug.

        Raises:
            NotFoundError: If missing or soft-deleted
        """
        prompt = await self.repo.get_by_slug(access.workspace.id, slug)
        if prompt is None:
            raise NotFoundError("Prompt not found", resource="prompt", resource_id=slug)
        return prompt

    async def create_prompt(
        self, access: WorkspaceAccess, user: User, data: PromptCreate
    ) -> Prompt:
        """Create a prompt authored by ``user``.

        Raises:
            ForbiddenError: If the role lacks create_prompts
            NotFoundError: If the category is not in the workspace
            ConflictError: If an explicit slug is taken
        """
        access.require(WorkspaceAction.CREATE_PROMPTS)
        workspace_id = access.workspace.id

        if data.category_id is not None:
            await self._check_category(access, data.category_id)

        if data.slug:
            if await self.repo.slug_exists(workspace_id, data.slug):
                raise ConflictError(
                    "Prompt slug already in use",
                    error_code="slug_exists",
                    details={"slug": data.slug},
                )
            slug = data.slug
        else:
            slug = await self._unique_slug(workspace_id, generate_slug(data.title))

        prompt = await self._insert(
            Prompt(
                workspace_id=workspace_id,
                category_id=data.category_id,
                title=data.title,
                slug=slug,
                description=data.description,
                content=data.content,
                is_template=data.is_template,
                created_by_id=user.id,
            )
        )
        logger.info(
            "prompt_created",
            prompt_id=str(prompt.id),
            workspace_id=str(workspace_id),
        )
        return prompt

    async def update_prompt(
        self, access: WorkspaceAccess, user: User, slug: str, data: PromptUpdate
    ) -> Prompt:
        """Update a prompt. Authors may always edit their own prompts.

        Raises:
            ForbiddenError: If neither author nor holder of edit_all_prompts
            NotFoundError: If the prompt or new category is missing
        """
        prompt = await self.get_prompt(access, slug)
        self._require_author_or(access, prompt, user, WorkspaceAction.EDIT_ALL_PROMPTS)

        changes = data.model_dump(exclude_unset=True)
        if changes.get("category_id") is not None:
            await self._check_category(access, changes["category_id"])

        # Explicit null clears category and description only
        for field, value in changes.items():
            if value is None and field not in ("category_id", "description"):
                continue
            setattr(prompt, field, value)
        return await self.repo.update(prompt)

    async def delete_prompt(self, access: WorkspaceAccess, user: User, slug: str) -> None:
        """Soft-delete a prompt.

        Raises:
            ForbiddenError: If neither author nor holder of delete_all_prompts
            NotFoundError: If the prompt is missing
        """
        prompt = await self.get_prompt(access, slug)
        self._require_author_or(access, prompt, user, WorkspaceAction.DELETE_ALL_PROMPTS)

        prompt.deleted_at = datetime.now(UTC)
        await self.repo.update(prompt)
        logger.info("prompt_deleted", prompt_id=str(prompt.id))

    async def duplicate_prompt(
        self, access: WorkspaceAccess, user: User, slug: str
    ) -> Prompt:
        """Copy a prompt within its workspace as a new, non-template prompt.

        Raises:
            ForbiddenError: If the role lacks create_prompts
            NotFoundError: If the prompt is missing
        """
        access.require(WorkspaceAction.CREATE_PROMPTS)
        source = await self.get_prompt(access, slug)

        prompt = await self._insert(
            Prompt(
                workspace_id=source.workspace_id,
                category_id=source.category_id,
                title=f"{source.title} (Copy)"[:MAX_TITLE_LENGTH],
                slug=await self._unique_slug(
                    source.workspace_id, generate_slug(f"{source.slug}-copy")
                ),
                description=source.description,
                content=source.content,
                is_template=False,
                created_by_id=user.id,
            )
        )
        logger.info(
            "prompt_duplicated",
            prompt_id=str(prompt.id),
            source_id=str(source.id),
        )
        return prompt

    async def list_templates(self, user: User) -> list[Prompt]:
        """List templates across the user's workspaces."""
        return await self.repo.list_templates(user.id)

    async def use_template(
        self, access: WorkspaceAccess, user: User, template_id: UUID
    ) -> Prompt:
        """Start a new prompt in ``access.workspace`` from a template.

        The template may live in any workspace the user belongs to. Its
        category is kept only when it lives in the target workspace.

        Raises:
            ForbiddenError: If the role lacks create_prompts in the target
            NotFoundError: If no such template is visible to the user
        """
        access.require(WorkspaceAction.CREATE_PROMPTS)
        template = await self.repo.get_template_for_user(template_id, user.id)
        if template is None:
            raise NotFoundError(
                "Template not found",
                resource="template",
                resource_id=str(template_id),
            )

        workspace_id = access.workspace.id
        same_workspace = template.workspace_id == workspace_id
        prompt = await self._insert(
            Prompt(
                workspace_id=workspace_id,
                category_id=template.category_id if same_workspace else None,
                title=template.title,
                slug=await self._unique_slug(workspace_id, template.slug),
                description=template.description,
                content=template.content,
                is_template=False,
                created_by_id=user.id,
            )
        )
        logger.info(
            "template_used",
            prompt_id=str(prompt.id),
            template_id=str(template.id),
            workspace_id=str(workspace_id),
        )
        return prompt


# Type alias for dependency injection
PromptSvc = Annotated[PromptService, Depends(PromptService)]
