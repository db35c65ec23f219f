"""Tests for the key codec.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import hashlib

import pytest

from smashcache.cache.keys import (
    MAX_KEY_LENGTH,
    full_path,
    pattern_path,
    shorten_key,
    tag_path,
)


class TestShortenKey:
    """Tests for shorten_key."""

    def test_short_key_unchanged(self):
        """Keys under the threshold pass through."""
        key = "/v1/dogs?page=2"
        assert shorten_key(key) == key
        assert shorten_key("k" * (MAX_KEY_LENGTH - 1)) == "k" * (MAX_KEY_LENGTH - 1)

    @pytest.mark.parametrize("length", [MAX_KEY_LENGTH, MAX_KEY_LENGTH + 1, 1000])
    def test_long_key_hashed(self, length):
        """Keys at or over the threshold become a SHA-1 hex digest."""
        key = "/v1/search?q=" + "x" * length
        short = shorten_key(key)

        assert short == hashlib.sha1(key.encode()).hexdigest()
        assert len(short) == 40

    @pytest.mark.parametrize("key", ["", "/v1/dogs", "y" * 300])
    def test_idempotent(self, key):
        """Shortening twice equals shortening once."""
        assert shorten_key(shorten_key(key)) == shorten_key(key)

    def test_stable(self):
        """The same key always maps to the same backend key."""
        key = "z" * 500
        assert shorten_key(key) == shorten_key(key)

    def test_none_is_empty(self):
        """None is treated as the empty key."""
        assert shorten_key(None) == ""


class TestPaths:
    """Tests for full_path, tag_path and pattern_path."""

    def test_full_path_replaces_query(self):
        """Query strings become path segments."""
        assert full_path("api", "/v1/dogs?page=2") == "/api/v1/dogs/page=2"

    def test_full_path_without_query(self):
        assert full_path("default", "/started_cache") == "/default/started_cache"

    def test_full_path_every_question_mark(self):
        assert full_path("ns", "/a?b?c") == "/ns/a/b/c"

    def test_full_path_total(self):
        """Empty and None keys still produce a path."""
        assert full_path("ns", "") == "/ns"
        assert full_path("ns", None) == "/ns"

    def test_tag_path_drops_query(self):
        """All query variants of a route share one tag."""
        assert tag_path("/v1/dogs?page=2") == "/sc-tag:/v1/dogs"
        assert tag_path("/v1/dogs?page=3") == tag_path("/v1/dogs")

    def test_tag_path_total(self):
        assert tag_path("") == "/sc-tag:"
        assert tag_path(None) == "/sc-tag:"

    def test_pattern_path_keeps_query(self):
        """Pattern prefixes are not rewritten."""
        assert pattern_path("api", "/v1/dogs?page") == "/api/v1/dogs?page"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
