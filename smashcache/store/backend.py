"""SmashCache Storage Backend - Abstract Storage Interface.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from smashcache.errors import UnsupportedCapability
from smashcache.metrics.counters import CounterSnapshot

logger = logging.getLogger(__name__)


@dataclass
class StorageStats:
    """Storage backend statistics.

    Attributes:
        reads: Number of read operations
        writes: Number of write operations
        deletes: Number of delete operations
        errors: Number of errors
    """

    reads: int = 0
    writes: int = 0
    deletes: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    last_error_at: Optional[datetime] = None

    @property
    def total_operations(self) -> int:
        """Get total operations."""
        return self.reads + self.writes + self.deletes

    def record_error(self, error: str) -> None:
        """Record an error."""
        self.errors += 1
        self.last_error = error
        self.last_error_at = datetime.now()


class StorageBackend(ABC):
    """Abstract key/value backend consumed by the SmashCache facade.

    Implementations differ in their invalidation capabilities:
    - RedisStore: exact and prefix delete, tags
    - FileStore: exact and prefix (directory) delete, no tags
    - MemoryStore: exact delete and tags only, like memcached

    The facade checks ``supports_prefix_delete`` and ``supports_tags``
    instead of switching on the backend kind. Failures are raised as
    SmashCacheError subclasses, never swallowed here.
    """

    kind = "abstract"
    supports_prefix_delete = False
    supports_tags = True

    def __init__(self):
        """Initialize backend."""
        self._stats = StorageStats()

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Check if a live entry exists.

        Args:
            key: Backend key

        Returns:
            True if exists and not expired
        """

    @abstractmethod
    def read(self, key: str) -> Optional[bytes]:
        """Read an entry.

        Args:
            key: Backend key

        Returns:
            Payload, or None on a miss
        """

    @abstractmethod
    def write(self, key: str, data: bytes, ttl: Optional[float] = None) -> None:
        """Create or overwrite an entry.

        Args:
            key: Backend key
            data: Payload
            ttl: TTL in seconds; falsy means no expiry
        """

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Delete an entry.

        Args:
            key: Backend key

        Returns:
            True if an entry was removed
        """

    @abstractmethod
    def clear_namespace(self, namespace: str) -> int:
        """Remove every entry of one namespace.

        Args:
            namespace: Namespace to clear

        Returns:
            Number of entries removed
        """

    def delete_prefix(self, prefix: str) -> int:
        """Delete every entry whose key starts with prefix.

        Args:
            prefix: Key prefix

        Returns:
            Number of entries removed

        Raises:
            UnsupportedCapability: If the backend cannot delete by prefix
        """
        raise UnsupportedCapability(
            f"{type(self).__name__} cannot delete by prefix", key=prefix
        )

    def persist_counters(self, snapshot: CounterSnapshot) -> None:
        """Persist counters under their configured keys.

        Args:
            snapshot: Counters to persist
        """
        for key, value in snapshot.persisted_values().items():
            self.write(key, str(value).encode("utf-8"))

    def load_object_count(self, namespace: str) -> Optional[int]:
        """Load the persisted object count for a namespace.

        Args:
            namespace: Cache namespace

        Returns:
            Persisted count, or None when nothing was persisted
        """
        return None

    def get_stats(self) -> StorageStats:
        """Get storage statistics.

        Returns:
            StorageStats instance
        """
        return self._stats

    def reset_stats(self) -> None:
        """Reset statistics."""
        self._stats = StorageStats()

    def __contains__(self, key: str) -> bool:
        """Check if key exists."""
        return self.exists(key)


__all__ = ["StorageBackend", "StorageStats"]
