"""SmashCache Facade - Caching with Key, Pattern and Tag Sweeps.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Callable, Iterable, Optional, TypeVar, Union

from smashcache.cache.keys import full_path, pattern_path, shorten_key, tag_path
from smashcache.cache.tags import TagIndex
from smashcache.config import BACKEND_FIELDS, SmashCacheConfig, to_seconds
from smashcache.errors import (
    MalformedPersistedState,
    SmashCacheError,
    UnsupportedCapability,
)
from smashcache.metrics.counters import CounterAggregator, CounterSnapshot
from smashcache.store.backend import StorageBackend
from smashcache.store.factory import create_store

logger = logging.getLogger(__name__)

# Operational notifications; route this logger to alerting.
notifier = logging.getLogger("smashcache.notifications")

T = TypeVar("T")

Payload = Union[bytes, bytearray, memoryview, str]
Duration = Union[float, int, timedelta]


def _to_bytes(data: Payload) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"Cache payload must be bytes or str, not {type(data).__name__}")


class SmashCache:
    """Caching facade with group invalidation.

    Values are written under a primary key and optionally tagged; one
    tag sweep later removes every key written under that tag. Every
    public operation is a failure boundary: backend errors are logged
    with operation, key and namespace, and the operation returns its
    empty result (False, None or 0). Nothing is retried.

    When ``config.enabled`` is False the facade is a pure no-op layer and
    never builds or touches its backend.

    Example:
        api_cache = SmashCache(SmashCacheConfig(namespace="api_cache", default_ttl=1800))

        # Tag paginated variants with their route root
        api_cache.add("/v1/dogs?page=2", payload, tags=["/v1/dogs"])
        api_cache.find("/v1/dogs?page=2")

        # Sweeping
        api_cache.smash("/v1/dogs/7")          # one key (or its prefix)
        api_cache.smash_by_tag("/v1/dogs")     # every tagged page
        api_cache.smash_by_pattern("/v1/dogs") # prefix, where supported
    """

    def __init__(
        self,
        config: Optional[SmashCacheConfig] = None,
        store: Optional[StorageBackend] = None,
    ):
        """Initialize cache.

        Args:
            config: Cache configuration
            store: Backend to use instead of the one config.backend names
        """
        self.config = config or SmashCacheConfig()
        self._store = store
        self._owns_store = store is None
        self._tags: Optional[TagIndex] = None
        self._counters = CounterAggregator(
            self.config.namespace,
            keys=self.config.counter_keys,
            action_default_count=self.config.action_default_count,
        )

        if self.enabled:
            self._open_store()

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    @property
    def store(self) -> Optional[StorageBackend]:
        return self._store

    @property
    def cache_type(self) -> str:
        """Backend kind in use, or "disabled"."""
        if not self.enabled:
            return "disabled"
        return self._store.kind

    @property
    def namespace(self) -> str:
        return self.config.namespace

    def _open_store(self) -> None:
        if self._store is None:
            self._store = create_store(self.config)
        self._tags = TagIndex(self._store, default_ttl=self.config.default_ttl)
        self._seed_object_count()

    def _seed_object_count(self) -> None:
        try:
            count = self._store.load_object_count(self.config.namespace)
        except MalformedPersistedState as e:
            logger.warning(f"Object count reset to 0 for {self.config.namespace!r}: {e}")
            count = 0
        except SmashCacheError as e:
            logger.error(f"Object count not loaded for {self.config.namespace!r}: {e}")
            return
        if count is not None:
            self._counters.seed_objects(count)

    def update_defaults(self, **changes: Any) -> SmashCacheConfig:
        """Reconfigure the cache.

        Only non-empty, valid values are applied. The backend is rebuilt
        when a backend setting changes and the cache created it itself.
        Must not run concurrently with other operations.

        Args:
            **changes: SmashCacheConfig field overrides

        Returns:
            The new configuration
        """
        previous = self.config
        self.config = previous.updated(**changes)

        self._counters.reconfigure(
            namespace=self.config.namespace,
            keys=self.config.counter_keys,
            action_default_count=self.config.action_default_count,
        )

        backend_changed = any(
            getattr(previous, name) != getattr(self.config, name) for name in BACKEND_FIELDS
        )
        if backend_changed and self._owns_store:
            self._store = None
            self._tags = None

        if self.enabled:
            self._open_store()
        return self.config

    def _run(
        self,
        operation: str,
        key: Optional[str],
        namespace: Optional[str],
        default: T,
        action: Callable[[str], T],
    ) -> T:
        """Run one public operation behind the failure boundary.

        Args:
            operation: Operation name for logs
            key: Key, tag or prefix involved
            namespace: Explicit namespace, or None for the default
            default: Result when disabled or on failure
            action: Work to do, given the resolved namespace

        Returns:
            The action's result or default
        """
        if not self.enabled:
            return default

        namespace = namespace or self.config.namespace
        context = f"{operation} - Key: {key!r} - Namespace: {namespace!r}"
        try:
            return action(namespace)
        except UnsupportedCapability as e:
            notifier.warning(f"SmashCache Notification: {context} - {e}")
        except SmashCacheError as e:
            logger.error(f"SmashCache {type(e).__name__} in {context} - {e}")
        except Exception:
            logger.exception(f"SmashCache unexpected error in {context}")
        return default

    def exists(self, key: str) -> bool:
        """Check if a live entry exists.

        Args:
            key: Logical key

        Returns:
            True if exists; False on any failure
        """
        return self._run(
            "exists",
            key,
            None,
            False,
            lambda ns: self._store.exists(full_path(ns, shorten_key(key))),
        )

    def find(self, key: str) -> Optional[bytes]:
        """Look up an entry, counting the hit or miss.

        Args:
            key: Logical key

        Returns:
            Payload, or None on a miss or failure
        """

        def _find(ns: str) -> Optional[bytes]:
            data = self._store.read(full_path(ns, shorten_key(key)))
            if data is None:
                snapshot = self._counters.record_miss()
            else:
                snapshot = self._counters.record_hit()
            if snapshot is not None:
                self._flush(snapshot)
            return data

        return self._run("find", key, None, None, _find)

    def add(
        self,
        key: str,
        data: Payload,
        ttl: Optional[Duration] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> bool:
        """Create an entry unless one exists.

        Args:
            key: Logical key
            data: Payload; str is stored as UTF-8
            ttl: TTL, defaults to config.default_ttl
            tags: Tags to file the entry under

        Returns:
            True if the entry was written
        """
        expires = self.config.default_ttl if ttl is None else to_seconds(ttl)

        def _add(ns: str) -> bool:
            payload = _to_bytes(data)
            path = full_path(ns, shorten_key(key))
            if self._store.exists(path):
                return False
            self._store.write(path, payload, expires)
            self._counters.object_created()
            self._tag(tags, path, expires)
            return True

        return self._run("add", key, None, False, _add)

    def replace(
        self,
        key: str,
        data: Payload,
        ttl: Optional[Duration] = None,
        tags: Optional[Iterable[str]] = None,
    ) -> bool:
        """Create or overwrite an entry.

        Args:
            key: Logical key
            data: Payload; str is stored as UTF-8
            ttl: TTL, defaults to config.default_ttl
            tags: Tags to file the entry under

        Returns:
            True if an entry existed and was overwritten
        """
        expires = self.config.default_ttl if ttl is None else to_seconds(ttl)

        def _replace(ns: str) -> bool:
            payload = _to_bytes(data)
            path = full_path(ns, shorten_key(key))
            existed = self._store.exists(path)
            self._store.write(path, payload, expires)
            if not existed:
                self._counters.object_created()
            self._tag(tags, path, expires)
            return existed

        return self._run("replace", key, None, False, _replace)

    def _tag(self, tags: Optional[Iterable[str]], path: str, ttl: Optional[float]) -> None:
        """Best-effort tag update after a successful write."""
        if not tags:
            return
        if isinstance(tags, str):
            tags = [tags]
        if not self._store.supports_tags:
            logger.debug(f"{self._store!r} cannot use tags; {path!r} left untagged")
            return
        try:
            self._tags.add_tags(tags, path, ttl)
        except SmashCacheError as e:
            logger.error(f"SmashCache tag update failed for {path!r}: {e}")

    def smash(
        self,
        key: str,
        wide_net_flush: Optional[bool] = None,
        namespace: Optional[str] = None,
    ) -> bool:
        """Invalidate one logical key.

        With a wide-net flush, backends that delete by prefix remove every
        entry below the key's full path (query-string variants included);
        tag-only backends sweep the key's tag instead, assuming the entries
        were tagged with their route root. A blank key removes nothing.

        Args:
            key: Logical key
            wide_net_flush: Override config.wide_net_flush
            namespace: Namespace to smash in, defaults to the cache's own

        Returns:
            True if anything was removed
        """
        wide = self.config.wide_net_flush if wide_net_flush is None else wide_net_flush

        def _smash(ns: str) -> bool:
            short = shorten_key(key)
            if not short:
                notifier.warning(
                    f"SmashCache Notification: blank key ignored by smash in {ns}; "
                    "use smash_the_cache to clear a namespace"
                )
                return False
            path = full_path(ns, short)
            if wide and self._store.supports_prefix_delete:
                removed = self._store.delete_prefix(path)
            elif wide and self._store.supports_tags:
                removed = self._tags.sweep(tag_path(short))
                removed += 1 if self._store.delete(path) else 0
            else:
                removed = 1 if self._store.delete(path) else 0
            self._counters.objects_removed(removed)
            return removed > 0

        return self._run("smash", key, namespace, False, _smash)

    def smash_by_tag(self, tag: str) -> int:
        """Invalidate every entry filed under a tag.

        Args:
            tag: Tag name

        Returns:
            Number of entries removed
        """

        def _smash_by_tag(ns: str) -> int:
            removed = self._tags.sweep(tag_path(shorten_key(tag)))
            self._counters.objects_removed(removed)
            return removed

        return self._run("smash_by_tag", tag, None, 0, _smash_by_tag)

    def smash_by_pattern(self, prefix: str, namespace: Optional[str] = None) -> int:
        """Invalidate every entry whose key starts with prefix.

        Backends without prefix deletes log a notification and delete
        nothing; use tags with them. A blank prefix removes nothing, since it
        would also match sibling namespaces sharing the name as a prefix.

        Args:
            prefix: Logical key prefix
            namespace: Namespace to smash in, defaults to the cache's own

        Returns:
            Number of entries removed
        """

        def _smash_by_pattern(ns: str) -> int:
            if not prefix:
                notifier.warning(
                    f"SmashCache Notification: blank prefix ignored by smash_by_pattern in {ns}; "
                    "use smash_the_cache to clear a namespace"
                )
                return 0
            removed = self._store.delete_prefix(pattern_path(ns, shorten_key(prefix)))
            self._counters.objects_removed(removed)
            return removed

        return self._run("smash_by_pattern", prefix, namespace, 0, _smash_by_pattern)

    def smash_the_cache(self, namespace: Optional[str] = None) -> int:
        """Clear a whole namespace.

        Args:
            namespace: Namespace to clear, defaults to the cache's own

        Returns:
            Number of entries removed
        """

        def _smash_the_cache(ns: str) -> int:
            removed = self._store.clear_namespace(ns)
            if ns == self.config.namespace:
                self._counters.reset_objects()
                self._flush(self._counters.snapshot())
            notifier.warning(f"SmashCache Notification: {ns} namespace smashed! ({removed} entries)")
            return removed

        return self._run("smash_the_cache", None, namespace, 0, _smash_the_cache)

    def _flush(self, snapshot: CounterSnapshot) -> None:
        try:
            self._store.persist_counters(snapshot)
        except SmashCacheError as e:
            logger.error(
                f"Failing SmashCache counters for namespace {snapshot.namespace!r} - {e}"
            )
        except Exception:
            logger.exception(
                f"SmashCache counter flush crashed for namespace {snapshot.namespace!r}"
            )

    def stats(self) -> CounterSnapshot:
        """Get current counters.

        Returns:
            CounterSnapshot instance
        """
        return self._counters.snapshot()

    def __repr__(self) -> str:
        return f"SmashCache(namespace={self.config.namespace!r}, type={self.cache_type!r})"


__all__ = ["SmashCache", "notifier"]
