"""SmashCache Config - Facade Configuration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Optional

from smashcache.metrics.counters import CounterKeys

logger = logging.getLogger(__name__)


class BackendKind(str, Enum):
    """Storage backend kinds."""

    REMOTE = "remote"    # Redis
    FILE = "file"        # Local directory tree
    MEMORY = "memory"    # In-process, memcached semantics


BACKEND_FIELDS = ("backend", "max_num_objects", "cache_path", "expire_log_path", "redis_url")
POSITIVE_FIELDS = ("default_ttl", "action_default_count", "max_num_objects")


def to_seconds(value: Any) -> Any:
    """Convert a timedelta to seconds; other values pass through."""
    if isinstance(value, timedelta):
        return value.total_seconds()
    return value


@dataclass
class SmashCacheConfig:
    """SmashCache configuration.

    Attributes:
        enabled: Global switch; when False every operation is a no-op
        namespace: Key scope for this cache instance
        default_ttl: Default TTL in seconds; a timedelta is converted
        wide_net_flush: Default invalidation strategy for smash()
        action_default_count: Lookups between counter flushes
        hit_key: Key the hit count persists under (blank disables)
        miss_key: Key the miss count persists under (blank disables)
        object_count_key: Key the object count persists under (blank disables)
        backend: Storage backend kind
        max_num_objects: File store entry ceiling
        cache_path: File store base directory
        expire_log_path: File store expire log directory
        redis_url: Remote store URL
    """

    enabled: bool = True
    namespace: str = "default"
    default_ttl: float = 3600.0
    wide_net_flush: bool = True
    action_default_count: int = 250
    hit_key: str = "/hits"
    miss_key: str = "/misses"
    object_count_key: str = "/object_count"
    backend: BackendKind = BackendKind.REMOTE
    max_num_objects: int = 5000
    cache_path: str = "smash_cache/"
    expire_log_path: str = "smash_cache/expire_logs/"
    redis_url: str = "redis://localhost:6379/0"

    def __post_init__(self):
        if not self.namespace:
            raise ValueError("namespace must not be empty")
        self.default_ttl = to_seconds(self.default_ttl)
        for name in POSITIVE_FIELDS:
            rejected = self._reject_reason(name, getattr(self, name))
            if rejected:
                raise ValueError(f"{name} {rejected}")
        self.backend = BackendKind(self.backend)

    @property
    def counter_keys(self) -> CounterKeys:
        """Counter persistence keys."""
        return CounterKeys(
            hit_key=self.hit_key,
            miss_key=self.miss_key,
            object_key=self.object_count_key,
        )

    def updated(self, **changes: Any) -> "SmashCacheConfig":
        """Return a copy with the non-empty, valid changes applied.

        None and empty strings mean "keep the current value". Invalid
        values are ignored with a warning rather than raised.

        Args:
            **changes: Field overrides

        Returns:
            New SmashCacheConfig
        """
        field_names = {f.name for f in dataclasses.fields(self)}
        accepted = {}

        for name, value in changes.items():
            if name not in field_names:
                raise TypeError(f"Unknown SmashCache setting: {name}")
            if value is None or value == "":
                continue
            if name == "default_ttl":
                value = to_seconds(value)
            rejected = self._reject_reason(name, value)
            if rejected:
                logger.warning(f"Ignoring {name}={value!r}: {rejected}")
                continue
            accepted[name] = value

        return dataclasses.replace(self, **accepted)

    @staticmethod
    def _reject_reason(name: str, value: Any) -> Optional[str]:
        if name in POSITIVE_FIELDS:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return "must be a number"
            if value <= 0:
                return "must be positive"
        if name == "backend":
            try:
                BackendKind(value)
            except ValueError:
                return "unknown backend kind"
        return None


__all__ = ["SmashCacheConfig", "BackendKind", "BACKEND_FIELDS", "to_seconds"]
