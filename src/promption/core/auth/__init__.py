"""Authentication against the hosted auth provider."""

from promption.core.auth.backend import (
    decode_token,
    generate_token,
    hash_token,
    issue_token,
)
from promption.core.auth.dependencies import (
    CurrentUser,
    get_current_user,
    get_token_claims,
)
from promption.core.auth.middleware import RequestIdMiddleware, SessionContextMiddleware
from promption.core.auth.schemas import TokenClaims, UserMetadata


__all__ = [
    # Dependencies
    "CurrentUser",
    # Middleware
    "RequestIdMiddleware",
    "SessionContextMiddleware",
    # Schemas
    "TokenClaims",
    "UserMetadata",
    # Token utilities
    "decode_token",
    "generate_token",
    "get_current_user",
    "get_token_claims",
    "hash_token",
    "issue_token",
]
