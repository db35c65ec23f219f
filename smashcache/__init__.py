"""SmashCache - Caching Facade with Tag and Pattern Sweeping.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

A caching layer over an opaque key/value store that adds group
invalidation: write under a key, file it under tags, and later sweep a
whole tag (or key prefix) without tracking individual keys.

Architecture:
    ┌─────────────────────────────────────────────────────────────────┐
    │                          SmashCache                             │
    ├─────────────────────────────────────────────────────────────────┤
    │  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐             │
    │  │  KeyCodec   │  │  TagIndex   │  │  Counters   │   CACHE     │
    │  │ shorten/ns  │  │ append/sweep│  │ hit/miss/obj│   LAYER     │
    │  └──────┬──────┘  └──────┬──────┘  └──────┬──────┘             │
    │         │                │                │                     │
    │  ┌──────┴────────────────┴────────────────┴──────┐             │
    │  │              Storage Backends                  │             │
    │  │   ┌────────┐  ┌────────┐  ┌────────┐         │   STORAGE   │
    │  │   │ Redis  │  │  File  │  │ Memory │         │   LAYER     │
    │  │   │ prefix │  │ prefix │  │  tags  │         │             │
    │  │   │ + tags │  │        │  │  only  │         │             │
    │  │   └────────┘  └────────┘  └────────┘         │             │
    │  └──────────────────────────────────────────────┘             │
    └─────────────────────────────────────────────────────────────────┘

Example Usage:
    from smashcache import SmashCache, load_config

    api_cache = SmashCache(load_config(namespace="api_cache", default_ttl=1800))

    # Cache a paginated route under its root as a tag
    api_cache.add("/v1/dogs?page=2", body, ttl=3600, tags=["/v1/dogs"])
    cached = api_cache.find("/v1/dogs?page=2")

    # Sweep every page at once after a write
    api_cache.smash_by_tag("/v1/dogs")
"""

__version__ = "1.0.0"
__author__ = "BlackRoad OS"

from smashcache.errors import (
    SmashCacheError,
    BackendUnavailable,
    CapacityExceeded,
    UnsupportedCapability,
    MalformedPersistedState,
)
from smashcache.config import (
    BackendKind,
    SmashCacheConfig,
)
from smashcache.settings import (
    SmashCacheSettings,
    load_config,
)
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
from smashcache.store.backend import (
    StorageBackend,
    StorageStats,
)
from smashcache.store.entry import CacheEntry
from smashcache.store.memory import MemoryStore
from smashcache.store.file import FileStore
from smashcache.store.redis import RedisStore, RedisConfig
from smashcache.store.factory import create_store
from smashcache.metrics.counters import (
    CounterAggregator,
    CounterKeys,
    CounterSnapshot,
)

__all__ = [
    # Facade
    "SmashCache",
    "SmashCacheConfig",
    "SmashCacheSettings",
    "BackendKind",
    "load_config",
    # Keys and tags
    "full_path",
    "pattern_path",
    "shorten_key",
    "tag_path",
    "TagIndex",
    "TagMembers",
    # Storage
    "StorageBackend",
    "StorageStats",
    "CacheEntry",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "RedisConfig",
    "create_store",
    # Metrics
    "CounterAggregator",
    "CounterKeys",
    "CounterSnapshot",
    # Errors
    "SmashCacheError",
    "BackendUnavailable",
    "CapacityExceeded",
    "UnsupportedCapability",
    "MalformedPersistedState",
]
