"""FastAPI dependencies for authentication.

This module provides FastAPI dependency injection functions for:
- Extracting and verifying the auth provider's bearer token
- Resolving the token's subject to the current user
"""

from typing import TYPE_CHECKING, Annotated, Any

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from promption.api.dependencies import DBSession
from promption.core.auth.backend import decode_token
from promption.core.auth.schemas import TokenClaims
from promption.core.errors import UnauthorizedError


if TYPE_CHECKING:
    from promption.modules.users.models import User


# HTTP Bearer token security scheme
bearer_scheme = HTTPBearer(auto_error=False)


async def get_token_claims(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> TokenClaims:
    """Extract and verify claims from the Authorization header.

    Args:
        credentials: Bearer token credentials from the request

    Returns:
        Verified token claims

    Raises:
        UnauthorizedError: If the token is missing or invalid
    """
    if not credentials:
        raise UnauthorizedError(
            "Missing authentication token",
            error_code="missing_token",
        )

    claims = decode_token(credentials.credentials)
    if not claims:
        raise UnauthorizedError(
            "Invalid or expired token",
            error_code="invalid_token",
        )

    return claims


async def get_current_user(
    request: Request,
    claims: Annotated[TokenClaims, Depends(get_token_claims)],
    db: DBSession,
) -> "User":
    """Resolve the session to the current user.

    Args:
        request: The incoming request, annotated with the user id
        claims: Verified token claims
        db: Database session

    Returns:
        The authenticated, active user
    """
    from promption.modules.users.repos import UserRepository  # noqa: PLC0415
    from promption.modules.users.services import UserService  # noqa: PLC0415

    user = await UserService(UserRepository(db)).resolve_session(claims)
    request.state.user_id = user.id
    return user


# Use Any for the User type to avoid circular imports at runtime
CurrentUser = Annotated[Any, Depends(get_current_user)]
