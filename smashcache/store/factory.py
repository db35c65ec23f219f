"""SmashCache Store Factory - Backend Construction from Config.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging

from smashcache.config import BackendKind, SmashCacheConfig
from smashcache.store.backend import StorageBackend
from smashcache.store.file import FileStore
from smashcache.store.memory import MemoryStore
from smashcache.store.redis import RedisConfig, RedisStore

logger = logging.getLogger(__name__)


def create_store(config: SmashCacheConfig) -> StorageBackend:
    """Create the backend named by config.backend.

    Args:
        config: SmashCache configuration

    Returns:
        StorageBackend instance
    """
    if config.backend == BackendKind.FILE:
        store: StorageBackend = FileStore(
            config.cache_path,
            max_num_objects=config.max_num_objects,
            expire_log_path=config.expire_log_path,
        )
    elif config.backend == BackendKind.MEMORY:
        store = MemoryStore()
    else:
        store = RedisStore(RedisConfig(url=config.redis_url))

    logger.debug(f"Created {store!r} for namespace {config.namespace!r}")
    return store


__all__ = ["create_store"]
