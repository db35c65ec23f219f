"""Shared fixtures for SmashCache tests.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import re
import time

import pytest

from smashcache.config import BackendKind, SmashCacheConfig
from smashcache.errors import BackendUnavailable
from smashcache.store.backend import StorageBackend
from smashcache.store.file import FileStore
from smashcache.store.memory import MemoryStore
from smashcache.store.redis import RedisStore


def _glob_to_regex(pattern):
    """Translate a Redis MATCH glob (*, ?, backslash escapes) to a regex."""
    out = []
    i = 0
    while i < len(pattern):
        c = pattern[i]
        if c == "\\" and i + 1 < len(pattern):
            out.append(re.escape(pattern[i + 1]))
            i += 2
            continue
        if c == "*":
            out.append(".*")
        elif c == "?":
            out.append(".")
        else:
            out.append(re.escape(c))
        i += 1
    return re.compile("".join(out) + r"\Z", re.S)


class FakeRedis:
    """In-process stand-in for the redis-py client calls RedisStore makes."""

    def __init__(self, fail=False):
        self.fail = fail
        self.data = {}
        self.expires = {}

    def _check(self):
        if self.fail:
            raise ConnectionError("Connection refused")

    @staticmethod
    def _key(key):
        return key.decode() if isinstance(key, bytes) else key

    def _live(self, key):
        expires = self.expires.get(key)
        if expires is not None and time.time() >= expires:
            self.data.pop(key, None)
            self.expires.pop(key, None)
        return key in self.data

    def exists(self, key):
        self._check()
        return 1 if self._live(self._key(key)) else 0

    def get(self, key):
        self._check()
        key = self._key(key)
        return self.data[key] if self._live(key) else None

    def set(self, key, value):
        self._check()
        key = self._key(key)
        self.data[key] = value
        self.expires.pop(key, None)
        return True

    def psetex(self, key, ttl_ms, value):
        self._check()
        key = self._key(key)
        self.data[key] = value
        self.expires[key] = time.time() + ttl_ms / 1000
        return True

    def delete(self, *keys):
        self._check()
        count = 0
        for key in keys:
            key = self._key(key)
            if self._live(key):
                del self.data[key]
                self.expires.pop(key, None)
                count += 1
        return count

    def scan(self, cursor, match=None, count=None):
        self._check()
        regex = _glob_to_regex(match or "*")
        keys = [k.encode() for k in list(self.data) if self._live(k) and regex.match(k)]
        return 0, keys


class CountingStore(MemoryStore):
    """MemoryStore that records every backend call it receives."""

    def __init__(self):
        super().__init__()
        self.calls = []

    def exists(self, key):
        self.calls.append("exists")
        return super().exists(key)

    def read(self, key):
        self.calls.append("read")
        return super().read(key)

    def write(self, key, data, ttl=None):
        self.calls.append("write")
        super().write(key, data, ttl)

    def delete(self, key):
        self.calls.append("delete")
        return super().delete(key)

    def clear_namespace(self, namespace):
        self.calls.append("clear_namespace")
        return super().clear_namespace(namespace)

    def load_object_count(self, namespace):
        self.calls.append("load_object_count")
        return super().load_object_count(namespace)


class BrokenStore(StorageBackend):
    """Backend whose every call fails like an unreachable server."""

    kind = "broken"
    supports_prefix_delete = True

    def _fail(self, key=None):
        raise BackendUnavailable("connection refused", key=key)

    def exists(self, key):
        self._fail(key)

    def read(self, key):
        self._fail(key)

    def write(self, key, data, ttl=None):
        self._fail(key)

    def delete(self, key):
        self._fail(key)

    def delete_prefix(self, prefix):
        self._fail(prefix)

    def clear_namespace(self, namespace):
        self._fail()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def redis_store(fake_redis):
    return RedisStore(client=fake_redis)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def file_store(tmp_path):
    return FileStore(tmp_path / "cache", max_num_objects=10, expire_log_path=tmp_path / "expire")


@pytest.fixture
def counting_store():
    return CountingStore()


@pytest.fixture
def config():
    return SmashCacheConfig(namespace="api", backend=BackendKind.MEMORY)


@pytest.fixture
def broken_store():
    return BrokenStore()


@pytest.fixture
def broken_redis_store():
    return RedisStore(client=FakeRedis(fail=True))
