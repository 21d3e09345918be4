"""
Cache store contract and the behavior shared by every backend.
"""
import threading
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Protocol, Tuple

from .core import (
    DEFAULT_CACHE_TIME,
    DEFAULT_GC_INTERVAL,
    DEFAULT_STALE_TIME,
    MISS,
    CacheEntry,
    CacheKey,
    CacheOptions,
    CacheResult,
    KeySegment,
    normalize_key,
    resolve_time,
)
from .gc import GarbageCollector
from .logger import CacheLogger, ConsoleLogger


class CacheStore(Protocol):
    """
    Public contract every store backend satisfies.

    Keys are non-empty sequences of str/int segments. Lookups are exact-path;
    invalidation removes the key and everything below it.
    """

    def set(
        self,
        key: CacheKey,
        data: Any,
        stale_time: Optional[float] = None,
        cache_time: Optional[float] = None,
    ) -> None: ...

    def get(self, key: CacheKey) -> CacheResult: ...

    def invalidate(self, key: CacheKey) -> None: ...

    def clean_up(self) -> int: ...

    def stop_garbage_collector(self) -> None: ...


class BaseCacheStore(ABC):
    """
    Shared store machinery:
    - Option resolution (per-call > store options > library defaults)
    - Debug logging through the injected sink
    - Ownership of the periodic garbage collector
    - A re-entrant lock around every structural read/write

    Subclasses only decide how entries are laid out physically.
    """

    def __init__(
        self,
        options: Optional[CacheOptions] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the store and start its garbage collector.

        Args:
            options: Store-instance defaults, debug flag and log sink
            clock: Returns the current time in seconds
        """
        self.options = options or CacheOptions()
        self.logger: CacheLogger = self.options.logger or ConsoleLogger()
        self._clock = clock
        self._lock = threading.RLock()

        gc_interval = self.options.gc_interval
        if gc_interval is None:
            gc_interval = DEFAULT_GC_INTERVAL
        self._gc = GarbageCollector(
            interval=gc_interval,
            sweep=self._automatic_sweep,
            name=f"{type(self).__name__}-gc",
        )
        self._gc.start()

    # =========================================================================
    # Backend hooks
    # =========================================================================

    @abstractmethod
    def _write(self, key: Tuple[KeySegment, ...], entry: CacheEntry) -> None:
        """Store an entry at exactly this key, replacing any existing one."""

    @abstractmethod
    def _read(self, key: Tuple[KeySegment, ...]) -> Optional[CacheEntry]:
        """Return the entry stored at exactly this key, if any."""

    @abstractmethod
    def _remove_tree(self, key: Tuple[KeySegment, ...]) -> int:
        """Remove the entry at this key and every descendant. Returns count removed."""

    @abstractmethod
    def _sweep_expired(self, now: float) -> int:
        """Remove every expired entry. Returns count removed."""

    # =========================================================================
    # Public contract
    # =========================================================================

    def set(
        self,
        key: CacheKey,
        data: Any,
        stale_time: Optional[float] = None,
        cache_time: Optional[float] = None,
    ) -> None:
        """
        Create or overwrite the entry at key with a fresh timestamp.

        Invalid keys are logged and ignored.
        """
        normalized = normalize_key(key)
        if normalized is None:
            self.logger.log("Invalid key:", key)
            return

        entry = CacheEntry(
            data=data,
            timestamp=self._clock(),
            stale_time=resolve_time(
                stale_time, self.options.default_stale_time, DEFAULT_STALE_TIME
            ),
            cache_time=resolve_time(
                cache_time, self.options.default_cache_time, DEFAULT_CACHE_TIME
            ),
        )
        with self._lock:
            self._write(normalized, entry)

        self._debug_log("Set:", list(normalized), entry)

    def get(self, key: CacheKey) -> CacheResult:
        """
        Look up the entry at exactly key.

        Never removes anything, even when the entry is already expired.
        """
        normalized = normalize_key(key)
        if normalized is None:
            self._debug_log("Get (miss):", key)
            return MISS

        with self._lock:
            entry = self._read(normalized)

        if entry is None:
            self._debug_log("Get (miss):", list(normalized))
            return MISS

        stale = self._check_stale(entry)
        self._debug_log("Get (hit):", list(normalized), entry, "Stale:", stale)
        return CacheResult(data=entry.data, stale=stale)

    def invalidate(self, key: CacheKey) -> None:
        """Remove the entry at key and every entry whose key extends it."""
        normalized = normalize_key(key)
        if normalized is None:
            self.logger.log("Invalid key:", key)
            return

        with self._lock:
            self._remove_tree(normalized)

        self._debug_log("Invalidate:", list(normalized))

    def clean_up(self) -> int:
        """
        Remove every expired entry now.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        self._debug_log("Running manual cleanup...")
        with self._lock:
            return self._sweep_expired(now)

    def stop_garbage_collector(self) -> None:
        """Halt the periodic sweep. Idempotent."""
        if self._gc.stop():
            self._debug_log("Stopped garbage collection")

    def close(self) -> None:
        self.stop_garbage_collector()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    # =========================================================================
    # Helpers
    # =========================================================================

    @property
    def gc_running(self) -> bool:
        return self._gc.running

    def _check_stale(self, entry: CacheEntry) -> bool:
        return entry.is_stale(self._clock())

    def _automatic_sweep(self) -> None:
        self._debug_log("Running automatic garbage collection...")
        self.clean_up()

    def _debug_log(self, *messages: Any) -> None:
        """Log messages if debug is enabled."""
        if self.options.debug:
            self.logger.log("[Cache Debug]", *messages)
