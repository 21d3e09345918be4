"""
Tests for settings loading and store construction.
"""
import pytest

from config.settings import Settings
from querycache import (
    ConsoleLogger,
    InMemoryCacheStore,
    KeyValueCacheStore,
    LoggingLogger,
    SqliteKeyValueBackend,
)
from querycache import manager
from querycache.manager import create_cache_store, options_from_settings


@pytest.fixture(autouse=True)
def reset_global_store():
    manager.reset_cache_store()
    yield
    manager.reset_cache_store()


def test_settings_defaults():
    config = Settings(_env_file=None)
    assert config.default_stale_time == 300.0
    assert config.default_cache_time == 1800.0
    assert config.gc_interval == 60.0
    assert config.debug is False
    assert config.backend == "memory"


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("QUERYCACHE_DEBUG", "1")
    monkeypatch.setenv("QUERYCACHE_DEFAULT_STALE_TIME", "12.5")
    monkeypatch.setenv("QUERYCACHE_BACKEND", "sqlite")

    config = Settings(_env_file=None)

    assert config.debug is True
    assert config.default_stale_time == 12.5
    assert config.backend == "sqlite"


def test_options_pick_sink_from_settings():
    console = options_from_settings(Settings(_env_file=None, log_to_console=True))
    routed = options_from_settings(Settings(_env_file=None, log_to_console=False))

    assert isinstance(console.logger, ConsoleLogger)
    assert isinstance(routed.logger, LoggingLogger)


def test_options_carry_settings_values(sink):
    config = Settings(_env_file=None, default_stale_time=1, default_cache_time=2, gc_interval=3, debug=True)
    options = options_from_settings(config, sink)

    assert options.default_stale_time == 1
    assert options.default_cache_time == 2
    assert options.gc_interval == 3
    assert options.debug is True
    assert options.logger is sink


def test_create_memory_store(sink):
    store = create_cache_store(Settings(_env_file=None, gc_interval=0), sink)
    assert isinstance(store, InMemoryCacheStore)
    assert store.gc_running is False


def test_create_sqlite_store(tmp_path, sink):
    config = Settings(
        _env_file=None,
        backend="sqlite",
        sqlite_path=tmp_path / "cache.db",
        gc_interval=0,
    )
    store = create_cache_store(config, sink)

    assert isinstance(store, KeyValueCacheStore)
    assert isinstance(store.backend, SqliteKeyValueBackend)
    store.set(["a"], {"b": 1})
    assert store.get(["a"]).data == {"b": 1}


def test_store_defaults_come_from_settings(sink, clock):
    store = create_cache_store(Settings(_env_file=None, gc_interval=0, default_stale_time=1), sink)
    store._clock = clock
    store.set(["k"], "v")
    clock.advance(2)
    assert store.get(["k"]).stale is True


def test_unknown_backend_rejected(sink):
    with pytest.raises(ValueError, match="Unknown cache backend 'redis'"):
        create_cache_store(Settings(_env_file=None, backend="redis", gc_interval=0), sink)


def test_global_store_is_shared_and_resettable():
    first = manager.get_cache_store()
    assert manager.get_cache_store() is first

    manager.reset_cache_store()
    assert first.gc_running is False

    second = manager.get_cache_store()
    assert second is not first
