"""SmashCache Counters - Hit/Miss/Object Count Aggregation.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CounterKeys:
    """Backend keys counters are persisted under.

    A blank key disables persistence of that counter.

    Attributes:
        hit_key: Key for the hit count
        miss_key: Key for the miss count
        object_key: Key for the cached object count
    """

    hit_key: str = "/hits"
    miss_key: str = "/misses"
    object_key: str = "/object_count"


@dataclass(frozen=True)
class CounterSnapshot:
    """Point-in-time copy of the counters.

    Attributes:
        namespace: Namespace the counters belong to
        hits: Cache hits since construction
        misses: Cache misses since construction
        objects: Approximate cached object count
        keys: Keys the values persist under
        taken_at: When the snapshot was taken
    """

    namespace: str
    hits: int
    misses: int
    objects: int
    keys: CounterKeys = field(default_factory=CounterKeys)
    taken_at: datetime = field(default_factory=datetime.now)

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def persisted_values(self) -> Dict[str, int]:
        """Map each configured (non-blank) key to its counter value."""
        values = {
            self.keys.hit_key: self.hits,
            self.keys.miss_key: self.misses,
            self.keys.object_key: self.objects,
        }
        return {key: value for key, value in values.items() if key}


class CounterAggregator:
    """Aggregates lookup outcomes in memory between periodic flushes.

    Every ``action_default_count`` lookups, ``record_hit``/``record_miss``
    hand back a snapshot for the caller to persist and the action count
    starts over. Updates are serialized with an RLock so concurrent
    callers sharing one facade do not undercount.

    Example:
        counters = CounterAggregator("api", action_default_count=2)
        counters.record_hit()           # None
        snapshot = counters.record_miss()
        store.persist_counters(snapshot)
    """

    def __init__(
        self,
        namespace: str,
        keys: Optional[CounterKeys] = None,
        action_default_count: int = 250,
    ):
        """Initialize aggregator.

        Args:
            namespace: Namespace the counters belong to
            keys: Persistence keys
            action_default_count: Lookups between flushes
        """
        self.namespace = namespace
        self.keys = keys or CounterKeys()
        self.action_default_count = action_default_count

        self._hits = 0
        self._misses = 0
        self._objects = 0
        self._actions = 0

        self._lock = threading.RLock()

    @property
    def hit_count(self) -> int:
        return self._hits

    @property
    def miss_count(self) -> int:
        return self._misses

    @property
    def object_count(self) -> int:
        return self._objects

    @property
    def action_count(self) -> int:
        return self._actions

    def record_hit(self) -> Optional[CounterSnapshot]:
        """Record a cache hit.

        Returns:
            Snapshot to persist when the flush threshold was reached
        """
        with self._lock:
            self._hits += 1
            return self._record_action()

    def record_miss(self) -> Optional[CounterSnapshot]:
        """Record a cache miss.

        Returns:
            Snapshot to persist when the flush threshold was reached
        """
        with self._lock:
            self._misses += 1
            return self._record_action()

    def _record_action(self) -> Optional[CounterSnapshot]:
        self._actions += 1
        if self._actions < self.action_default_count:
            return None
        self._actions = 0
        return self.snapshot()

    def object_created(self) -> None:
        """Record a newly created entry."""
        with self._lock:
            self._objects += 1

    def objects_removed(self, count: int = 1) -> None:
        """Record removed entries.

        Args:
            count: Entries actually removed; the total never drops below zero
        """
        if count <= 0:
            return
        with self._lock:
            self._objects = max(0, self._objects - count)

    def seed_objects(self, count: int) -> None:
        """Seed the object count from persisted state.

        Args:
            count: Persisted object count
        """
        with self._lock:
            self._objects = max(0, count)

    def reset_objects(self) -> None:
        """Reset the object count after a namespace clear."""
        with self._lock:
            self._objects = 0

    def reconfigure(
        self,
        namespace: Optional[str] = None,
        keys: Optional[CounterKeys] = None,
        action_default_count: Optional[int] = None,
    ) -> None:
        """Apply new defaults without touching accumulated counts.

        Args:
            namespace: New namespace
            keys: New persistence keys
            action_default_count: New flush threshold
        """
        with self._lock:
            if namespace:
                self.namespace = namespace
            if keys is not None:
                self.keys = keys
            if action_default_count:
                self.action_default_count = action_default_count

    def snapshot(self) -> CounterSnapshot:
        """Get current counters.

        Returns:
            CounterSnapshot instance
        """
        with self._lock:
            return CounterSnapshot(
                namespace=self.namespace,
                hits=self._hits,
                misses=self._misses,
                objects=self._objects,
                keys=self.keys,
            )

    def __repr__(self) -> str:
        return (
            f"CounterAggregator(namespace={self.namespace!r}, hits={self._hits}, "
            f"misses={self._misses}, objects={self._objects})"
        )


__all__ = ["CounterAggregator", "CounterKeys", "CounterSnapshot"]
