"""User profile routes."""

from fastapi import APIRouter

from promption.core.auth import CurrentUser
from promption.modules.users.schemas import UserResponse, UserUpdate
from promption.modules.users.services import UserSvc


router = APIRouter(prefix="/me", tags=["users"])


@router.get(
    "",
    response_model=UserResponse,
    summary="Get my profile",
    description="Return the user behind the current session.",
)
async def get_me(current_user: CurrentUser) -> UserResponse:
    """Return the authenticated user's profile."""
    return UserResponse.model_validate(current_user)


@router.patch(
    "",
    response_model=UserResponse,
    summary="Update my profile",
)
async def update_me(
    data: UserUpdate,
    service: UserSvc,
    current_user: CurrentUser,
) -> UserResponse:
    """Update the authenticated user's name or avatar."""
    user = await service.update_profile(current_user, data)
    return UserResponse.model_validate(user)
