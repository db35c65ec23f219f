"""SmashCache Memory Store - In-Process Memcached-Style Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from smashcache.store.backend import StorageBackend
from smashcache.store.entry import CacheEntry

logger = logging.getLogger(__name__)


class MemoryStore(StorageBackend):
    """In-memory storage backend.

    Behaves like a memcached deployment: exact keys and tags only, no
    prefix deletes. Wide-net flushes against this store therefore fall
    back to tag sweeps.

    Features:
    - O(1) exists/read/write/delete operations
    - Thread-safe with RLock
    - Lazy TTL expiry on access

    Example:
        store = MemoryStore()
        store.write("/default/key", b"data", ttl=60)
        data = store.read("/default/key")
    """

    kind = "memory"
    supports_prefix_delete = False
    supports_tags = True

    def __init__(self):
        """Initialize memory store."""
        super().__init__()
        self._data: Dict[str, CacheEntry] = {}
        self._lock = threading.RLock()

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._data.get(key)
        if entry is not None and entry.is_expired:
            del self._data[key]
            return None
        return entry

    def exists(self, key: str) -> bool:
        """Check if key exists.

        Args:
            key: Backend key

        Returns:
            True if exists and not expired
        """
        with self._lock:
            return self._live_entry(key) is not None

    def read(self, key: str) -> Optional[bytes]:
        """Read entry by key.

        Args:
            key: Backend key

        Returns:
            Payload or None
        """
        with self._lock:
            self._stats.reads += 1
            entry = self._live_entry(key)
            return entry.value if entry is not None else None

    def write(self, key: str, data: bytes, ttl: Optional[float] = None) -> None:
        """Store entry.

        Args:
            key: Backend key
            data: Payload
            ttl: TTL in seconds
        """
        with self._lock:
            self._data[key] = CacheEntry(key=key, value=data, ttl_seconds=ttl or None)
            self._stats.writes += 1

    def delete(self, key: str) -> bool:
        """Delete entry.

        Args:
            key: Backend key

        Returns:
            True if deleted
        """
        with self._lock:
            if self._live_entry(key) is None:
                return False
            del self._data[key]
            self._stats.deletes += 1
            return True

    def clear_namespace(self, namespace: str) -> int:
        """Remove every entry under "/<namespace>/".

        Args:
            namespace: Namespace to clear

        Returns:
            Number cleared
        """
        prefix = f"/{namespace}/"
        with self._lock:
            doomed = [k for k in self._data if k.startswith(prefix)]
            for key in doomed:
                del self._data[key]
            self._stats.deletes += len(doomed)
            return len(doomed)

    def keys(self) -> List[str]:
        """Get all live keys.

        Returns:
            List of keys
        """
        with self._lock:
            return [k for k in list(self._data) if self._live_entry(k) is not None]

    def __len__(self) -> int:
        return len(self.keys())

    def __repr__(self) -> str:
        return f"MemoryStore(entries={len(self._data)})"


__all__ = ["MemoryStore"]
