"""Authentication schemas for token handling."""

from datetime import datetime

from pydantic import BaseModel, Field


class UserMetadata(BaseModel):
    """Profile fields the auth provider embeds in its tokens."""

    full_name: str | None = None
    avatar_url: str | None = None


class TokenClaims(BaseModel):
    """Claims extracted from an auth provider session token.

    Attributes:
        subject: Opaque user id assigned by the auth provider (``sub``)
        email: Verified email address, if present
        exp: Token expiration time
        user_metadata: Optional profile information
    """

    subject: str = Field(..., min_length=1)
    email: str | None = None
    exp: datetime
    user_metadata: UserMetadata = Field(default_factory=UserMetadata)
