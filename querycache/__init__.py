"""
Hierarchical, time-aware cache with stale-while-revalidate fetching.
"""
from .core import (
    DEFAULT_CACHE_TIME,
    DEFAULT_GC_INTERVAL,
    DEFAULT_STALE_TIME,
    CacheEntry,
    CacheKey,
    CacheOptions,
    CacheResult,
    EntryState,
)
from .logger import CacheLogger, ConsoleLogger, LoggingLogger
from .base import BaseCacheStore, CacheStore
from .memory_store import InMemoryCacheStore
from .kv_backends import KeyValueBackend, MemoryKeyValueBackend, SqliteKeyValueBackend
from .kv_store import KeyValueCacheStore
from .query import query_with_cache
from .manager import create_cache_store, get_cache_store, reset_cache_store

__all__ = [
    # Core types
    "CacheEntry",
    "CacheKey",
    "CacheOptions",
    "CacheResult",
    "EntryState",
    "DEFAULT_CACHE_TIME",
    "DEFAULT_GC_INTERVAL",
    "DEFAULT_STALE_TIME",
    # Logging
    "CacheLogger",
    "ConsoleLogger",
    "LoggingLogger",
    # Stores
    "BaseCacheStore",
    "CacheStore",
    "InMemoryCacheStore",
    "KeyValueBackend",
    "MemoryKeyValueBackend",
    "SqliteKeyValueBackend",
    "KeyValueCacheStore",
    # Orchestration
    "query_with_cache",
    # Manager
    "create_cache_store",
    "get_cache_store",
    "reset_cache_store",
]
