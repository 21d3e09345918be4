"""
Store construction from settings and the process-wide store instance.
"""
import logging
from typing import Optional

from config.settings import Settings, settings as default_settings

from .base import BaseCacheStore
from .core import CacheOptions
from .kv_backends import SqliteKeyValueBackend
from .kv_store import KeyValueCacheStore
from .logger import CacheLogger, ConsoleLogger, LoggingLogger
from .memory_store import InMemoryCacheStore

logger = logging.getLogger("cache.manager")

BACKENDS = ("memory", "sqlite")


def options_from_settings(
    config: Settings,
    sink: Optional[CacheLogger] = None,
) -> CacheOptions:
    """Build store options, picking the log sink the settings ask for."""
    if sink is None:
        sink = ConsoleLogger() if config.log_to_console else LoggingLogger()
    return CacheOptions(
        gc_interval=config.gc_interval,
        default_stale_time=config.default_stale_time,
        default_cache_time=config.default_cache_time,
        debug=config.debug,
        logger=sink,
    )


def create_cache_store(
    config: Optional[Settings] = None,
    sink: Optional[CacheLogger] = None,
) -> BaseCacheStore:
    """
    Create a store for the configured backend.

    Args:
        config: Settings to use; defaults to the environment-loaded settings
        sink: Log sink overriding the one the settings would pick

    Raises:
        ValueError: If the backend name is unknown
    """
    config = config or default_settings
    options = options_from_settings(config, sink)

    if config.backend == "memory":
        store = InMemoryCacheStore(options=options)
    elif config.backend == "sqlite":
        store = KeyValueCacheStore(
            backend=SqliteKeyValueBackend(config.sqlite_path),
            options=options,
        )
    else:
        raise ValueError(
            f"Unknown cache backend {config.backend!r}, expected one of {BACKENDS}"
        )

    logger.info(
        f"Created {config.backend} cache store "
        f"(stale={config.default_stale_time}s, cache={config.default_cache_time}s, "
        f"gc={config.gc_interval}s)"
    )
    return store


# Global cache store instance
_cache_store: Optional[BaseCacheStore] = None


def get_cache_store() -> BaseCacheStore:
    """Get or create the global cache store."""
    global _cache_store
    if _cache_store is None:
        _cache_store = create_cache_store()
    return _cache_store


def reset_cache_store() -> None:
    """Stop and discard the global cache store."""
    global _cache_store
    if _cache_store is not None:
        _cache_store.stop_garbage_collector()
        _cache_store = None
