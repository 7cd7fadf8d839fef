"""Hash generation for article deduplication."""

import hashlib
import re

from sentiment_api.domain.exceptions import InvalidArgumentError

_HASH_PATTERN = re.compile(r"^[0-9a-f]{16}$")


def generate_article_hash(url: str) -> str:
    """Compute the stable identity of an article from its URL.

    The URL is trimmed and lower-cased before hashing, so cosmetic variants
    map to the same article.

    Args:
        url: Article URL

    Returns:
        16-character hex hash (SHA-256 prefix)

    Raises:
        InvalidArgumentError: If the URL is empty or whitespace
    """
    if not isinstance(url, str):
        raise InvalidArgumentError("URL must be a non-empty string", field="url", value=url)

    normalized = url.strip().lower()
    if not normalized:
        raise InvalidArgumentError("URL cannot be empty or whitespace", field="url", value=url)

    return hashlib.sha256(normalized.encode()).hexdigest()[:16]


def is_valid_hash(value: str) -> bool:
    """Check that a string looks like an article hash (16 lowercase hex chars)."""
    return isinstance(value, str) and bool(_HASH_PATTERN.match(value))
