"""SmashCache Settings - Environment Configuration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Reads SMASH_CACHE_* variables (or a .env file) once, at configuration
load, and turns them into a SmashCacheConfig. Caching stays disabled
unless SMASH_CACHE_ENABLED is set.
"""

from __future__ import annotations

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from smashcache.config import BackendKind, SmashCacheConfig


class SmashCacheSettings(BaseSettings):
    """Process-wide SmashCache settings."""

    model_config = SettingsConfigDict(
        env_prefix="SMASH_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = False
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

    @field_validator("namespace")
    @classmethod
    def _namespace_not_empty(cls, v: str) -> str:
        if not v:
            raise ValueError("namespace must not be empty")
        return v

    @field_validator("default_ttl", "action_default_count", "max_num_objects")
    @classmethod
    def _positive(cls, v):
        if v <= 0:
            raise ValueError("must be positive")
        return v

    def to_config(self, **overrides) -> SmashCacheConfig:
        """Build a SmashCacheConfig, applying per-instance overrides.

        Args:
            **overrides: Fields that differ for this cache instance

        Returns:
            SmashCacheConfig
        """
        return SmashCacheConfig(**self.model_dump()).updated(**overrides)


def load_config(settings: Optional[SmashCacheSettings] = None, **overrides) -> SmashCacheConfig:
    """Load configuration from the environment.

    Args:
        settings: Pre-loaded settings; read from the environment if omitted
        **overrides: Per-instance overrides (namespace, default_ttl, ...)

    Returns:
        SmashCacheConfig
    """
    return (settings or SmashCacheSettings()).to_config(**overrides)


__all__ = ["SmashCacheSettings", "load_config"]
