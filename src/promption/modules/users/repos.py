"""User repository for database operations."""

from typing import Annotated
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select

from promption.api.dependencies import DBSession
from promption.modules.users.models import User


class UserRepository:
    """Repository for User database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def create(self, user: User) -> User:
        """Create a new user inside a savepoint.

        Args:
            user: User instance to create

        Returns:
            The created user with ID populated

        Raises:
            IntegrityError: If the subject or email is already taken
        """
        async with self.session.begin_nested():
            self.session.add(user)
            await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: UUID) -> User | None:
        """Get a user by ID."""
        return await self.session.get(User, user_id)

    async def get_by_subject(self, auth_subject: str) -> User | None:
        """Get a user by their auth provider subject id.

        Args:
            auth_subject: The ``sub`` claim from the session token

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(User.auth_subject == auth_subject)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get a user by email address.

        Emails are stored lower-cased, so callers pass a normalized value.

        Args:
            email: Normalized email address

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(User.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def update(self, user: User) -> User:
        """Flush pending changes on a user and reload it."""
        await self.session.flush()
        await self.session.refresh(user)
        return user


# Type alias for dependency injection
UserRepo = Annotated[UserRepository, Depends(UserRepository)]
