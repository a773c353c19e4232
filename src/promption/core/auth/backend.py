"""Token utilities for the hosted auth provider.

Session tokens are HS256 JWTs signed by the auth provider with a shared
secret. This module verifies them, mints compatible tokens for local
development, and generates and hashes the one-time secrets used in
invitation links.
"""

import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from pydantic import ValidationError as PydanticValidationError

from promption.config import settings
from promption.core.auth.schemas import TokenClaims
from promption.core.constants import INVITATION_TOKEN_BYTES


# ============================================================
# Session Tokens
# ============================================================


def issue_token(
    subject: str,
    email: str,
    full_name: str | None = None,
    avatar_url: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Mint a session token shaped like the auth provider's.

    Args:
        subject: Auth subject id to embed as ``sub``
        email: Email address claim
        full_name: Optional display name for ``user_metadata``
        avatar_url: Optional avatar URL for ``user_metadata``
        expires_delta: Optional custom lifetime

    Returns:
        Encoded JWT
    """
    now = datetime.now(UTC)
    expire = now + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )

    to_encode: dict[str, Any] = {
        "sub": subject,
        "email": email,
        "iat": now,
        "exp": expire,
        "user_metadata": {"full_name": full_name, "avatar_url": avatar_url},
    }
    if settings.auth_jwt_audience:
        to_encode["aud"] = settings.auth_jwt_audience

    return jwt.encode(
        to_encode,
        settings.auth_jwt_secret,
        algorithm=settings.auth_jwt_algorithm,
    )


def decode_token(token: str) -> TokenClaims | None:
    """Verify a session token and extract its claims.

    Args:
        token: The bearer token from the request

    Returns:
        TokenClaims if the signature, audience and expiry are valid,
        None otherwise
    """
    options = {"verify_aud": settings.auth_jwt_audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.auth_jwt_secret,
            algorithms=[settings.auth_jwt_algorithm],
            audience=settings.auth_jwt_audience,
            options=options,
        )
    except JWTError:
        return None

    subject = payload.get("sub")
    exp = payload.get("exp")
    if not subject or exp is None:
        return None

    try:
        return TokenClaims(
            subject=subject,
            email=payload.get("email"),
            exp=datetime.fromtimestamp(exp, tz=UTC),
            user_metadata=payload.get("user_metadata") or {},
        )
    except (PydanticValidationError, TypeError, ValueError):
        return None


# ============================================================
# Link Tokens
# ============================================================


def generate_token() -> str:
    """Generate a random URL-safe secret for invitation links."""
    return secrets.token_urlsafe(INVITATION_TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Hash a link token for storage.

    Only the SHA-256 digest is persisted so a leaked database does not
    expose usable invitation links.

    Args:
        token: The token to hash

    Returns:
        Hex-encoded SHA-256 digest
    """
    return hashlib.sha256(token.encode()).hexdigest()
