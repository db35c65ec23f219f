"""Cache module - Key codec, tag index and the SmashCache facade."""

from smashcache.cache.keys import (
    full_path,
    pattern_path,
    shorten_key,
    tag_path,
)
from smashcache.cache.tags import (
    TagIndex,
    TagMembers,
)
from smashcache.cache.smash import SmashCache

__all__ = [
    "full_path",
    "pattern_path",
    "shorten_key",
    "tag_path",
    "TagIndex",
    "TagMembers",
    "SmashCache",
]
