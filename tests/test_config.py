"""Tests for configuration.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

import logging
from datetime import timedelta

import pytest
from pydantic import ValidationError

from smashcache.config import BackendKind, SmashCacheConfig
from smashcache.metrics.counters import CounterKeys
from smashcache.settings import SmashCacheSettings, load_config


class TestSmashCacheConfig:
    """Tests for SmashCacheConfig."""

    def test_defaults(self):
        config = SmashCacheConfig()

        assert config.enabled
        assert config.namespace == "default"
        assert config.default_ttl == 3600.0
        assert config.wide_net_flush
        assert config.action_default_count == 250
        assert config.backend == BackendKind.REMOTE
        assert config.max_num_objects == 5000

    def test_backend_coerced(self):
        assert SmashCacheConfig(backend="file").backend is BackendKind.FILE

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"namespace": ""},
            {"action_default_count": 0},
            {"default_ttl": -1},
            {"backend": "memcached"},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            SmashCacheConfig(**kwargs)

    def test_timedelta_ttl(self):
        assert SmashCacheConfig(default_ttl=timedelta(minutes=30)).default_ttl == 1800.0

    def test_non_numeric_ttl(self):
        with pytest.raises(ValueError):
            SmashCacheConfig(default_ttl="an hour")

    def test_counter_keys(self):
        config = SmashCacheConfig(hit_key="/h", miss_key="", object_count_key="/o")
        assert config.counter_keys == CounterKeys(hit_key="/h", miss_key="", object_key="/o")


class TestUpdated:
    """Tests for SmashCacheConfig.updated."""

    def test_applies_changes(self):
        config = SmashCacheConfig().updated(namespace="api", default_ttl=60)

        assert config.namespace == "api"
        assert config.default_ttl == 60

    def test_returns_copy(self):
        original = SmashCacheConfig()
        original.updated(namespace="api")
        assert original.namespace == "default"

    def test_blank_values_keep_current(self):
        config = SmashCacheConfig(namespace="api").updated(namespace="", cache_path=None)

        assert config.namespace == "api"
        assert config.cache_path == "smash_cache/"

    def test_false_is_applied(self):
        """False is a real value, not a blank."""
        config = SmashCacheConfig().updated(enabled=False, wide_net_flush=False)

        assert not config.enabled
        assert not config.wide_net_flush

    def test_invalid_values_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            config = SmashCacheConfig().updated(action_default_count=-5, backend="bogus")

        assert config.action_default_count == 250
        assert config.backend == BackendKind.REMOTE
        assert "Ignoring action_default_count" in caplog.text

    def test_timedelta_ttl(self):
        config = SmashCacheConfig().updated(default_ttl=timedelta(minutes=30))
        assert config.default_ttl == 1800.0

    def test_non_numeric_values_ignored(self, caplog):
        """Values of the wrong type are reported, not raised."""
        with caplog.at_level(logging.WARNING):
            config = SmashCacheConfig().updated(default_ttl="soon", max_num_objects=[1])

        assert config.default_ttl == 3600.0
        assert config.max_num_objects == 5000
        assert "must be a number" in caplog.text

    def test_unknown_setting(self):
        with pytest.raises(TypeError):
            SmashCacheConfig().updated(colour="blue")


class TestSettings:
    """Tests for environment settings."""

    def test_disabled_by_default(self, monkeypatch):
        monkeypatch.delenv("SMASH_CACHE_ENABLED", raising=False)
        settings = SmashCacheSettings(_env_file=None)

        assert not settings.enabled
        assert not settings.to_config().enabled

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("SMASH_CACHE_ENABLED", "true")
        monkeypatch.setenv("SMASH_CACHE_BACKEND", "file")
        monkeypatch.setenv("SMASH_CACHE_CACHE_PATH", "/var/cache/smash")
        monkeypatch.setenv("SMASH_CACHE_MAX_NUM_OBJECTS", "100")
        monkeypatch.setenv("SMASH_CACHE_ACTION_DEFAULT_COUNT", "10")

        config = SmashCacheSettings(_env_file=None).to_config()

        assert config.enabled
        assert config.backend is BackendKind.FILE
        assert config.cache_path == "/var/cache/smash"
        assert config.max_num_objects == 100
        assert config.action_default_count == 10

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("SMASH_CACHE_ACTION_DEFAULT_COUNT", "0")
        with pytest.raises(ValidationError):
            SmashCacheSettings(_env_file=None)

    def test_unknown_backend(self, monkeypatch):
        monkeypatch.setenv("SMASH_CACHE_BACKEND", "memcached")
        with pytest.raises(ValidationError):
            SmashCacheSettings(_env_file=None)

    def test_load_config_overrides(self, monkeypatch):
        """Per-instance overrides sit on top of process settings."""
        monkeypatch.setenv("SMASH_CACHE_ENABLED", "1")
        monkeypatch.setenv("SMASH_CACHE_DEFAULT_TTL", "600")

        config = load_config(
            SmashCacheSettings(_env_file=None), namespace="api_cache", default_ttl=None
        )

        assert config.enabled
        assert config.namespace == "api_cache"
        assert config.default_ttl == 600.0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
