"""SmashCache Tags - Tag Membership Index and Sweeps.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A tag is a backend entry "/sc-tag:<tag>" whose value lists, comma
separated and in write order, the full keys written under that tag.
Membership updates are read-append-write without compare-and-swap:
two writers tagging the same tag at the same moment can drop one
append. Members deleted individually stay listed until the tag is swept.
"""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, List, Optional, Union

from smashcache.cache.keys import shorten_key, tag_path
from smashcache.errors import MalformedPersistedState, UnsupportedCapability
from smashcache.store.backend import StorageBackend

logger = logging.getLogger(__name__)

SEPARATOR = ","


class TagMembers:
    """Ordered member keys of one tag.

    Duplicates are kept; sweeping deletes them twice, harmlessly.
    """

    def __init__(self, keys: Optional[Iterable[str]] = None):
        self._keys: List[str] = list(keys or [])

    @classmethod
    def decode(
        cls, raw: Optional[Union[bytes, str]], tag_key: Optional[str] = None
    ) -> "TagMembers":
        """Parse a stored membership value.

        Args:
            raw: Comma-joined keys as stored, or None
            tag_key: Tag key the value was read from, for errors

        Returns:
            TagMembers instance

        Raises:
            MalformedPersistedState: If raw is not UTF-8
        """
        if not raw:
            return cls()
        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = bytes(raw).decode("utf-8")
            except UnicodeDecodeError as e:
                raise MalformedPersistedState(
                    f"Tag membership is not UTF-8: {e}", key=tag_key
                ) from e
        return cls(k for k in raw.split(SEPARATOR) if k)

    def encode(self) -> bytes:
        """Serialize for storage."""
        return SEPARATOR.join(self._keys).encode("utf-8")

    def append(self, key: str) -> None:
        self._keys.append(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __eq__(self, other: object) -> bool:
        if isinstance(other, TagMembers):
            return self._keys == other._keys
        return NotImplemented

    def __repr__(self) -> str:
        return f"TagMembers({self._keys!r})"


class TagIndex:
    """Maintains tag membership on top of a storage backend.

    Example:
        index = TagIndex(store, default_ttl=3600)
        index.add_tags(["/v1/dogs"], "/api/v1/dogs/page=2", ttl=300)
        index.sweep(tag_path("/v1/dogs"))
    """

    def __init__(self, store: StorageBackend, default_ttl: float = 3600.0):
        """Initialize index.

        Args:
            store: Backend holding both entries and tags
            default_ttl: Extra lifetime added to tag entries
        """
        self.store = store
        self.default_ttl = default_ttl

    def _require_tags(self, tag_key: str) -> None:
        if not self.store.supports_tags:
            raise UnsupportedCapability(
                f"{type(self.store).__name__} cannot use tags yet; use smash_by_pattern",
                key=tag_key,
            )

    def members(self, tag_key: str) -> TagMembers:
        """Read the members of a tag.

        Args:
            tag_key: Tag key (see tag_path)

        Returns:
            TagMembers, empty when the tag is absent
        """
        self._require_tags(tag_key)
        return TagMembers.decode(self.store.read(tag_key), tag_key)

    def add_tags(
        self,
        tags: Iterable[str],
        member_key: str,
        ttl: Optional[float] = None,
    ) -> None:
        """Append member_key to every tag.

        The tag entry outlives its newest member by default_ttl; without a
        member TTL the tag entry does not expire.

        Args:
            tags: Tag names
            member_key: Fully qualified key of the written entry
            ttl: TTL of the written entry
        """
        tag_ttl = ttl + self.default_ttl if ttl else None
        for tag in tags:
            tag_key = tag_path(shorten_key(tag))
            members = self.members(tag_key)
            members.append(member_key)
            self.store.write(tag_key, members.encode(), tag_ttl)
            logger.debug(f"Tagged {member_key!r} with {tag_key!r} ({len(members)} members)")

    def sweep(self, tag_key: str) -> int:
        """Delete every member of a tag, then the tag itself.

        Args:
            tag_key: Tag key (see tag_path)

        Returns:
            Number of member entries actually deleted
        """
        members = self.members(tag_key)
        if not members:
            self.store.delete(tag_key)
            return 0

        removed = sum(1 for key in members if self.store.delete(key))
        self.store.delete(tag_key)
        logger.debug(f"Swept {tag_key!r}: {removed}/{len(members)} members removed")
        return removed


__all__ = ["TagIndex", "TagMembers", "SEPARATOR"]
