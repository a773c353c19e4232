"""User service: session resolution and profile management."""

from typing import Annotated

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from promption.core.auth.schemas import TokenClaims
from promption.core.errors import ConflictError, ForbiddenError, UnauthorizedError
from promption.core.utils.text import normalize_email
from promption.modules.users.models import User
from promption.modules.users.repos import UserRepo
from promption.modules.users.schemas import UserUpdate


logger = structlog.get_logger()


class UserService:
    """Service for mapping auth provider identities to users.

    The auth provider owns credentials; this service only ever sees
    verified token claims and keeps a local user row in step with them.
    """

    def __init__(self, repo: UserRepo) -> None:
        self.repo = repo

    async def resolve_session(self, claims: TokenClaims) -> User:
        """Return the user for a verified session, creating it on first sight.

        Args:
            claims: Claims from a verified session token

        Returns:
            The active user behind the session

        Raises:
            UnauthorizedError: If a new subject arrives without an email claim
            ConflictError: If the email already belongs to another subject
            ForbiddenError: If the user has been deactivated
        """
        user = await self.repo.get_by_subject(claims.subject)

        if user is None:
            user = await self._create_from_claims(claims)

        if not user.is_active:
            raise ForbiddenError(
                "User account is deactivated",
                error_code="user_inactive",
            )

        return user

    async def _create_from_claims(self, claims: TokenClaims) -> User:
        if not claims.email:
            raise UnauthorizedError(
                "Session token is missing an email claim",
                error_code="invalid_token",
            )

        email = normalize_email(claims.email)
        if await self.repo.get_by_email(email):
            raise ConflictError(
                "Email already linked to another account",
                error_code="email_exists",
            )

        try:
            user = await self.repo.create(
                User(
                    auth_subject=claims.subject,
                    email=email,
                    full_name=claims.user_metadata.full_name,
                    avatar_url=claims.user_metadata.avatar_url,
                )
            )
        except IntegrityError:
            # A concurrent first request for the same subject won the insert
            existing = await self.repo.get_by_subject(claims.subject)
            if existing is not None:
                return existing
            raise ConflictError(
                "Email already linked to another account",
                error_code="email_exists",
            ) from None
        logger.info("user_created", user_id=str(user.id))
        return user

    async def update_profile(self, user: User, data: UserUpdate) -> User:
        """Update the caller's mutable profile fields.

        Args:
            user: The authenticated user
            data: Fields to change

        Returns:
            The updated user
        """
        if data.full_name is not None:
            user.full_name = data.full_name
        if data.avatar_url is not None:
            user.avatar_url = str(data.avatar_url)
        return await self.repo.update(user)


# Type alias for dependency injection
UserSvc = Annotated[UserService, Depends(UserService)]
