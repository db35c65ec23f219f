"""SmashCache Redis Store - Remote Entry Store Backend.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import urlsplit

from smashcache.errors import BackendUnavailable
from smashcache.store.backend import StorageBackend

logger = logging.getLogger(__name__)

_GLOB_SPECIAL = re.compile(r"([*?\[\]\\])")


@dataclass
class RedisConfig:
    """Redis-specific configuration.

    Attributes:
        url: Redis URL; when set, host/port/db/password are ignored
        host: Redis host
        port: Redis port
        db: Redis database number
        password: Redis password
        socket_timeout: Socket timeout
        socket_connect_timeout: Connection timeout
        max_connections: Connection pool size
        prefix: Key prefix
        scan_count: SCAN batch size hint for prefix deletes
    """

    url: Optional[str] = None
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: Optional[str] = None
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    max_connections: int = 10
    prefix: str = ""
    scan_count: int = 500


class RedisStore(StorageBackend):
    """Redis storage backend.

    The remote entry store: native TTLs, exact deletes, and prefix deletes
    through SCAN MATCH. Payloads are stored as raw bytes so other
    processes sharing the instance can read them.

    Example:
        store = RedisStore(RedisConfig(url="redis://redis.local:6379/0"))
        store.write("/api/v1/dogs", b"[...]", ttl=300)
        data = store.read("/api/v1/dogs")
    """

    kind = "remote"
    supports_prefix_delete = True
    supports_tags = True

    def __init__(self, config: Optional[RedisConfig] = None, client: Optional[Any] = None):
        """Initialize Redis store.

        Args:
            config: Redis configuration
            client: Pre-built client; skips pool creation
        """
        super().__init__()
        self.config = config or RedisConfig()
        self._client: Optional[Any] = client
        self._pool: Optional[Any] = None

    def _ensure_connected(self) -> Any:
        """Ensure Redis connection exists.

        Returns:
            Redis client
        """
        if self._client is not None:
            return self._client

        try:
            import redis
        except ImportError:
            raise ImportError("Redis package not installed. Run: pip install redis")

        cfg = self.config
        options = {
            "socket_timeout": cfg.socket_timeout,
            "socket_connect_timeout": cfg.socket_connect_timeout,
            "max_connections": cfg.max_connections,
        }
        try:
            if cfg.url:
                client = redis.Redis.from_url(cfg.url, **options)
            else:
                self._pool = redis.ConnectionPool(
                    host=cfg.host, port=cfg.port, db=cfg.db, password=cfg.password, **options
                )
                client = redis.Redis(connection_pool=self._pool)
        except Exception as e:
            logger.error(f"Cannot build Redis client for {self!r}: {e}")
            raise BackendUnavailable(f"Redis connection failed: {e}") from e

        logger.info(f"Redis client ready for {self!r}")
        self._client = client
        return client

    def _make_key(self, key: str) -> str:
        """Make prefixed Redis key."""
        return f"{self.config.prefix}{key}"

    def _call(self, op: str, key: str, func: Callable[[Any], Any]) -> Any:
        """Run one client call, translating failures to BackendUnavailable.

        Args:
            op: Operation name for the error message
            key: Backend key involved
            func: Callable receiving the client

        Returns:
            Whatever func returns
        """
        client = self._ensure_connected()
        try:
            return func(client)
        except Exception as e:
            logger.error(f"Redis {op} error for {key!r}: {e}")
            self._stats.record_error(str(e))
            raise BackendUnavailable(f"Redis {op} failed: {e}", key=key) from e

    def exists(self, key: str) -> bool:
        """Check if key exists.

        Args:
            key: Backend key

        Returns:
            True if exists
        """
        redis_key = self._make_key(key)
        return self._call("exists", key, lambda c: c.exists(redis_key)) > 0

    def read(self, key: str) -> Optional[bytes]:
        """Read entry by key.

        Args:
            key: Backend key

        Returns:
            Payload or None
        """
        redis_key = self._make_key(key)
        self._stats.reads += 1
        return self._call("get", key, lambda c: c.get(redis_key))

    def write(self, key: str, data: bytes, ttl: Optional[float] = None) -> None:
        """Store entry.

        Args:
            key: Backend key
            data: Payload
            ttl: TTL in seconds
        """
        redis_key = self._make_key(key)
        if ttl:
            ttl_ms = int(ttl * 1000)
            self._call("psetex", key, lambda c: c.psetex(redis_key, ttl_ms, data))
        else:
            self._call("set", key, lambda c: c.set(redis_key, data))
        self._stats.writes += 1

    def delete(self, key: str) -> bool:
        """Delete entry.

        Args:
            key: Backend key

        Returns:
            True if deleted
        """
        redis_key = self._make_key(key)
        removed = self._call("delete", key, lambda c: c.delete(redis_key))
        self._stats.deletes += 1
        return removed > 0

    def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix.

        Args:
            prefix: Key prefix

        Returns:
            Number deleted
        """
        pattern = _GLOB_SPECIAL.sub(r"\\\1", self._make_key(prefix)) + "*"

        def sweep(client: Any) -> int:
            count = 0
            cursor = 0
            while True:
                cursor, keys = client.scan(cursor, match=pattern, count=self.config.scan_count)
                if keys:
                    count += client.delete(*keys)
                if cursor == 0:
                    break
            return count

        count = self._call("delete_prefix", prefix, sweep)
        self._stats.deletes += count
        return count

    def clear_namespace(self, namespace: str) -> int:
        """Clear all entries under "/<namespace>/".

        Args:
            namespace: Namespace to clear

        Returns:
            Number cleared
        """
        return self.delete_prefix(f"/{namespace}/")

    def close(self) -> None:
        """Close Redis connection."""
        if self._pool:
            self._pool.disconnect()
            self._pool = None
            self._client = None

    def __repr__(self) -> str:
        if self.config.url:
            parts = urlsplit(self.config.url)
            return f"RedisStore(host={parts.hostname}, port={parts.port})"
        return f"RedisStore(host={self.config.host}, port={self.config.port})"


__all__ = ["RedisStore", "RedisConfig"]
