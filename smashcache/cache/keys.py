"""SmashCache Keys - Logical Key to Backend Key Codec.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import hashlib
from typing import Optional

MAX_KEY_LENGTH = 225
TAG_PREFIX = "/sc-tag:"


def shorten_key(key: Optional[str]) -> str:
    """Replace overlong keys with their SHA-1 hex digest.

    Keys shorter than MAX_KEY_LENGTH are returned unchanged. The digest is
    40 characters long, so shortening is idempotent.

    Args:
        key: Logical cache key

    Returns:
        Backend-safe key
    """
    key = key or ""
    if len(key) >= MAX_KEY_LENGTH:
        return hashlib.sha1(key.encode("utf-8")).hexdigest()
    return key


def full_path(namespace: str, key: Optional[str]) -> str:
    """Build the fully qualified backend key.

    Query strings become path segments so paginated variants of one
    route stay addressable by prefix: "/v1/dogs?page=2" in namespace
    "api" becomes "/api/v1/dogs/page=2".

    Args:
        namespace: Cache namespace
        key: Logical (already shortened) key

    Returns:
        Namespaced key
    """
    return f"/{namespace}{(key or '').replace('?', '/')}"


def tag_path(key: Optional[str]) -> str:
    """Build the tag key for a logical key or tag name.

    Everything from the first "?" on is dropped, so every query-string
    variant of a route shares one tag.

    Args:
        key: Logical key or tag name

    Returns:
        Tag key
    """
    return TAG_PREFIX + (key or "").split("?", 1)[0]


def pattern_path(namespace: str, key: Optional[str]) -> str:
    """Build the prefix used for pattern sweeps.

    Unlike full_path, the query string is kept as-is.

    Args:
        namespace: Cache namespace
        key: Key prefix

    Returns:
        Namespaced prefix
    """
    return f"/{namespace}{key or ''}"


__all__ = [
    "MAX_KEY_LENGTH",
    "TAG_PREFIX",
    "shorten_key",
    "full_path",
    "tag_path",
    "pattern_path",
]
