"""Text processing utilities."""

import re
import unicodedata

from promption.core.constants import MAX_SLUG_LENGTH


def generate_slug(name: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Generate a URL-safe slug from a name.

    Converts the input string to a URL-friendly slug by:
    - Folding accented letters to ASCII and lowercasing
    - Removing every other non-ASCII or special character
    - Replacing spaces, underscores and hyphens with single hyphens
    - Truncating to max_length

    Args:
        name: The input string to slugify
        max_length: Maximum length of output slug (default 63)

    Returns:
        URL-safe lowercase slug

    Examples:
        >>> generate_slug("Marketing Prompts")
        'marketing-prompts'
        >>> generate_slug("Hello! World@2024")
        'hello-world2024'
        >>> generate_slug("Café Übersicht")
        'cafe-ubersicht'
    """
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode()
    slug = folded.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"[-\s_]+", "-", slug)
    return slug[:max_length].strip("-")


def with_suffix(slug: str, suffix: int, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Append a numeric suffix to a slug while respecting ``max_length``.

    >>> with_suffix("marketing", 2)
    'marketing-2'
    """
    tail = f"-{suffix}"
    return f"{slug[: max_length - len(tail)].rstrip('-')}{tail}"


def normalize_email(email: str) -> str:
    """Normalize an email for storage and comparison.

    Addresses are matched case-insensitively and without surrounding
    whitespace. Provider-specific aliasing is left untouched.

    >>> normalize_email("  Bob@Example.COM ")
    'bob@example.com'
    """
    return email.strip().lower()
