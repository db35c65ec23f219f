"""SmashCache Entry - Stored Payload with TTL.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import dataclasses
import time
from dataclasses import dataclass, field
from typing import Mapping, Optional


@dataclass
class CacheEntry:
    """Payload held by stores that expire lazily (file and memory).

    Redis keeps raw payloads and relies on its own TTLs.

    Attributes:
        key: Backend key
        value: Opaque payload
        ttl_seconds: Lifetime in seconds, None to keep forever
        stored_at: Epoch seconds of the write
    """

    key: str
    value: bytes
    ttl_seconds: Optional[float] = None
    stored_at: float = field(default_factory=time.time)

    @property
    def deadline(self) -> Optional[float]:
        if not self.ttl_seconds:
            return None
        return self.stored_at + self.ttl_seconds

    @property
    def is_expired(self) -> bool:
        deadline = self.deadline
        return deadline is not None and time.time() > deadline

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping) -> "CacheEntry":
        """Rebuild an entry written by to_dict.

        Raises:
            KeyError: If key or value is missing
            TypeError: If data is not a mapping of entry fields
        """
        return cls(
            key=data["key"],
            value=data["value"],
            ttl_seconds=data.get("ttl_seconds"),
            stored_at=data.get("stored_at", time.time()),
        )

    def __repr__(self) -> str:
        deadline = self.deadline
        if deadline is None:
            return f"CacheEntry(key={self.key!r})"
        return f"CacheEntry(key={self.key!r}, expires_in={deadline - time.time():.1f}s)"


__all__ = ["CacheEntry"]
