"""SmashCache Errors - Backend and Invalidation Error Taxonomy.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.

Backends raise these; the SmashCache facade catches them, logs them with
operation context and converts them to safe default return values.
"""

from __future__ import annotations

from typing import Optional


class SmashCacheError(Exception):
    """Base class for all SmashCache errors.

    Attributes:
        key: Backend key involved, if any
    """

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class BackendUnavailable(SmashCacheError):
    """Transient I/O or network failure talking to the backing store."""


class CapacityExceeded(SmashCacheError):
    """The file store object ceiling was reached; the write was rejected."""


class UnsupportedCapability(SmashCacheError):
    """Prefix or tag invalidation requested on a backend that lacks it."""


class MalformedPersistedState(SmashCacheError):
    """A persisted record (e.g. the object-count data log) could not be parsed."""


__all__ = [
    "SmashCacheError",
    "BackendUnavailable",
    "CapacityExceeded",
    "UnsupportedCapability",
    "MalformedPersistedState",
]
