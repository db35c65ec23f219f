"""Store module - Storage backends for SmashCache."""

from smashcache.store.backend import (
    StorageBackend,
    StorageStats,
)
from smashcache.store.memory import MemoryStore
from smashcache.store.file import FileStore
from smashcache.store.redis import RedisStore, RedisConfig
from smashcache.store.factory import create_store

__all__ = [
    "StorageBackend",
    "StorageStats",
    "MemoryStore",
    "FileStore",
    "RedisStore",
    "RedisConfig",
    "create_store",
]
