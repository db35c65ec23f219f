"""SmashCache File Store - Local Filesystem Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import json
import logging
import os
import pickle
import shutil
import threading
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional, Union

from smashcache.errors import (
    BackendUnavailable,
    CapacityExceeded,
    MalformedPersistedState,
)
from smashcache.metrics.counters import CounterSnapshot
from smashcache.store.backend import StorageBackend
from smashcache.store.entry import CacheEntry

logger = logging.getLogger(__name__)


class FileStore(StorageBackend):
    """File-based storage backend.

    Mirrors the key space as a directory tree: "/api/v1/dogs/1" lives at
    "<base>/api/v1/dogs/1.sc", so every entry under a route prefix shares
    a directory and a prefix delete is a directory removal.

    Features:
    - Atomic writes (temp file + rename)
    - Object ceiling; new writes are rejected when full, nothing is evicted
    - Hourly expire logs for external sweepers
    - Per-namespace data log (object count) and daily info log (hit/miss)

    Example:
        store = FileStore("/var/cache/smash", max_num_objects=5000)
        store.write("/api/v1/dogs", b"[...]", ttl=300)
        data = store.read("/api/v1/dogs")
    """

    kind = "file"
    supports_prefix_delete = True
    supports_tags = False

    ENTRY_EXTENSION = ".sc"
    EXPIRE_LOG_EXTENSION = ".ex"
    INFO_LOG_EXTENSION = ".il"
    DATA_LOG_FILE_NAME = "cache_data.dl"
    ROOT_ENTRY_NAME = "__root__"
    MAX_NUM_OBJECTS = 5000

    def __init__(
        self,
        base_path: Union[str, Path],
        max_num_objects: int = MAX_NUM_OBJECTS,
        expire_log_path: Optional[Union[str, Path]] = None,
    ):
        """Initialize file store.

        Directories are created on first write, not here.

        Args:
            base_path: Base directory for cache files
            max_num_objects: Entry ceiling
            expire_log_path: Directory for expire logs
        """
        super().__init__()
        self.base_path = Path(base_path)
        self.expire_log_path = (
            Path(expire_log_path) if expire_log_path else self.base_path / "expire_logs"
        )
        self.max_num_objects = max_num_objects
        self._entry_count: Optional[int] = None
        self._lock = threading.RLock()

    @staticmethod
    def _segments(key: str) -> List[str]:
        """Split a key into path segments that cannot escape the base path."""
        return [s for s in key.split("/") if s not in ("", ".", "..")]

    def _get_path(self, key: str) -> Path:
        """Get entry file path for key."""
        segments = self._segments(key) or [self.ROOT_ENTRY_NAME]
        *dirs, name = segments
        return self.base_path.joinpath(*dirs, name + self.ENTRY_EXTENSION)

    def _get_dir(self, key: str) -> Optional[Path]:
        """Get the directory holding entries below key."""
        segments = self._segments(key)
        if not segments:
            return None
        return self.base_path.joinpath(*segments)

    def _count_entries(self, root: Path) -> int:
        if not root.is_dir():
            return 0
        return sum(1 for p in root.rglob(f"*{self.ENTRY_EXTENSION}") if p.is_file())

    def _current_count(self) -> int:
        if self._entry_count is None:
            self._entry_count = self._count_entries(self.base_path)
        return self._entry_count

    def _forget(self, count: int) -> None:
        if self._entry_count is not None and count:
            self._entry_count = max(0, self._entry_count - count)

    def _load(self, path: Path) -> Optional[CacheEntry]:
        """Load a live entry, unlinking it when expired."""
        if not path.is_file():
            return None
        try:
            with open(path, "rb") as f:
                entry = CacheEntry.from_dict(pickle.load(f))
        except (pickle.UnpicklingError, EOFError, KeyError, TypeError) as e:
            self._stats.record_error(str(e))
            raise MalformedPersistedState(f"Unreadable cache file {path}: {e}") from e
        except OSError as e:
            self._stats.record_error(str(e))
            raise BackendUnavailable(f"Error reading {path}: {e}") from e

        if entry.is_expired:
            path.unlink(missing_ok=True)
            self._forget(1)
            return None
        return entry

    def exists(self, key: str) -> bool:
        """Check if a live entry exists.

        Args:
            key: Backend key

        Returns:
            True if exists and not expired
        """
        with self._lock:
            return self._load(self._get_path(key)) is not None

    def read(self, key: str) -> Optional[bytes]:
        """Read entry by key.

        Args:
            key: Backend key

        Returns:
            Payload or None
        """
        with self._lock:
            self._stats.reads += 1
            entry = self._load(self._get_path(key))
            return entry.value if entry is not None else None

    def write(self, key: str, data: bytes, ttl: Optional[float] = None) -> None:
        """Store entry.

        Args:
            key: Backend key
            data: Payload
            ttl: TTL in seconds

        Raises:
            CapacityExceeded: If a new entry would pass max_num_objects
            BackendUnavailable: If the file cannot be written
        """
        path = self._get_path(key)
        temp_path = path.with_name(path.name + ".tmp")

        with self._lock:
            count = self._current_count()
            existed = path.is_file()
            if not existed and count >= self.max_num_objects:
                raise CapacityExceeded(
                    f"Cache full - cannot add more - {self.base_path} "
                    f"~Object Max Reached: {count}",
                    key=key,
                )

            entry = CacheEntry(key=key, value=data, ttl_seconds=ttl or None)
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with open(temp_path, "wb") as f:
                    pickle.dump(entry.to_dict(), f)
                os.replace(temp_path, path)
            except OSError as e:
                self._stats.record_error(str(e))
                if temp_path.exists():
                    temp_path.unlink()
                raise BackendUnavailable(f"Error writing {path}: {e}", key=key) from e

            self._stats.writes += 1
            if not existed:
                self._entry_count = count + 1

        if ttl:
            self._write_expire_log(key, path, ttl)

    def delete(self, key: str) -> bool:
        """Delete entry.

        Args:
            key: Backend key

        Returns:
            True if deleted
        """
        path = self._get_path(key)
        with self._lock:
            try:
                if not path.is_file():
                    return False
                path.unlink()
            except OSError as e:
                self._stats.record_error(str(e))
                raise BackendUnavailable(f"Error deleting {path}: {e}", key=key) from e
            self._stats.deletes += 1
            self._forget(1)
            return True

    def _remove_tree(self, directory: Optional[Path]) -> int:
        if directory is None or not directory.is_dir():
            return 0
        removed = self._count_entries(directory)
        try:
            shutil.rmtree(directory)
        except OSError as e:
            self._stats.record_error(str(e))
            raise BackendUnavailable(f"Error removing {directory}: {e}") from e
        return removed

    def delete_prefix(self, prefix: str) -> int:
        """Delete the entry at prefix and the directory below it.

        Args:
            prefix: Key prefix

        Returns:
            Number of entries removed
        """
        with self._lock:
            removed = 1 if self.delete(prefix) else 0
            removed_below = self._remove_tree(self._get_dir(prefix))
            self._stats.deletes += removed_below
            self._forget(removed_below)
            return removed + removed_below

    def clear_namespace(self, namespace: str) -> int:
        """Remove the namespace directory, logs included.

        Args:
            namespace: Namespace to clear

        Returns:
            Number of entries removed
        """
        with self._lock:
            removed = self._remove_tree(self._get_dir(namespace))
            self._stats.deletes += removed
            self._forget(removed)
            return removed

    def size(self, namespace: Optional[str] = None) -> int:
        """Count entries on disk.

        Args:
            namespace: Limit the count to one namespace

        Returns:
            Number of entries
        """
        root = self._get_dir(namespace) if namespace else self.base_path
        return self._count_entries(root) if root is not None else 0

    def persist_counters(self, snapshot: CounterSnapshot) -> None:
        """Append counters to the namespace's info and data logs.

        Args:
            snapshot: Counters to persist
        """
        ns_dir = self._get_dir(snapshot.namespace) or self.base_path
        stamp = snapshot.taken_at.strftime("%Y-%m-%d %H:%M:%S")
        keys = snapshot.keys

        counts = {"time": stamp}
        if keys.hit_key:
            counts[keys.hit_key] = snapshot.hits
        if keys.miss_key:
            counts[keys.miss_key] = snapshot.misses
        if len(counts) > 1:
            info_log = ns_dir / f"{snapshot.taken_at:%Y_%m_%d}{self.INFO_LOG_EXTENSION}"
            self._append_line(info_log, json.dumps({"counts": counts}))

        if keys.object_key:
            record = {"object_data": {"count": snapshot.objects, "time": stamp}}
            self._append_line(ns_dir / self.DATA_LOG_FILE_NAME, json.dumps(record))

    def load_object_count(self, namespace: str) -> Optional[int]:
        """Read the object count from the last data log line.

        Args:
            namespace: Cache namespace

        Returns:
            Persisted count, or None without a data log

        Raises:
            MalformedPersistedState: If the last line cannot be parsed
        """
        ns_dir = self._get_dir(namespace) or self.base_path
        data_log = ns_dir / self.DATA_LOG_FILE_NAME
        if not data_log.is_file():
            return None

        last = ""
        try:
            with open(data_log, encoding="utf-8") as f:
                for line in f:
                    if line.strip():
                        last = line
        except (OSError, UnicodeDecodeError) as e:
            raise MalformedPersistedState(f"Unreadable data log {data_log}: {e}") from e

        try:
            return int(json.loads(last)["object_data"]["count"])
        except (ValueError, KeyError, TypeError) as e:
            raise MalformedPersistedState(f"Malformed data log {data_log}: {e}") from e

    def _write_expire_log(self, key: str, path: Path, ttl: float) -> None:
        """Record when an entry expires, bucketed per namespace and hour."""
        expire_time = datetime.now() + timedelta(seconds=ttl)
        segments = self._segments(key)
        log_dir = self.expire_log_path / segments[0] if segments else self.expire_log_path
        log_file = log_dir / f"{expire_time:%Y_%m_%d_%H}{self.EXPIRE_LOG_EXTENSION}"
        try:
            self._append_line(log_file, f"{expire_time:%Y_%m_%d_%H_%M},{path}")
        except BackendUnavailable as e:
            logger.error(f"Expire log not written for {key!r}: {e}")

    def _append_line(self, log_file: Path, line: str) -> None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            with open(log_file, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            self._stats.record_error(str(e))
            raise BackendUnavailable(f"Error appending to {log_file}: {e}") from e

    def __repr__(self) -> str:
        return f"FileStore(path={self.base_path})"


__all__ = ["FileStore"]
