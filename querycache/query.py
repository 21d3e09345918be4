"""
Cached fetch orchestration with stale-while-revalidate.

Serves whatever the store holds straight away, then refetches when the
entry is missing or stale and only re-delivers the result if it changed.
"""
import logging
from contextlib import contextmanager
from typing import Any, Awaitable, Callable, Iterator, Optional

from .base import CacheStore
from .core import CacheKey, has_changed

logger = logging.getLogger("cache.query")

FetchFn = Callable[[], Awaitable[Any]]


@contextmanager
def fetching_state(
    on_fetching_change: Optional[Callable[[bool], None]],
) -> Iterator[None]:
    """
    Report True on entry and False on every exit path, success or failure.

    With no callback this is a no-op.
    """
    if on_fetching_change is None:
        yield
        return

    on_fetching_change(True)
    try:
        yield
    finally:
        on_fetching_change(False)


async def query_with_cache(
    *,
    key: CacheKey,
    cache: CacheStore,
    fetch: FetchFn,
    on_data: Callable[[Any], None],
    on_fetching_change: Optional[Callable[[bool], None]] = None,
    on_error: Optional[Callable[[Exception], None]] = None,
    stale_time: Optional[float] = None,
    cache_time: Optional[float] = None,
) -> None:
    """
    Deliver cached data for key, refetching when it is absent or stale.

    Flow:
    - Cached data (fresh or stale) goes to on_data immediately
    - Fresh data ends the call; no fetch, no fetching-state callbacks
    - Otherwise fetch; on_fetching_change(True/False) brackets the fetch
      only on a true miss
    - A fetched value reaches on_data only if it differs from the cached one,
      but is always written back to the cache
    - A failure anywhere after the fetch starts (fetch, comparison, on_data,
      cache write) goes to on_error, or is re-raised when no on_error was given;
      a failed fetch leaves the cache untouched

    Args:
        key: Cache key to read and write
        cache: Store shared by all callers
        fetch: Async function producing the value
        on_data: Receives cached and/or freshly fetched data
        on_fetching_change: Receives True before and False after a fetch on a miss
        on_error: Receives fetch or write-back failures; when given, failures are swallowed
        stale_time: Per-call stale time for the written entry (seconds)
        cache_time: Per-call cache time for the written entry (seconds)

    Raises:
        Exception: Whatever the fetch or the write-back raised, if on_error is None
    """
    cached = cache.get(key)
    has_cached_data = cached.data is not None

    if has_cached_data:
        on_data(cached.data)
        if not cached.stale:
            return
        logger.debug(f"Serving stale data for {key}, revalidating")
    else:
        logger.debug(f"Cache miss for {key}, fetching")

    # Loading indication is reserved for true misses
    fetching_callback = None if has_cached_data else on_fetching_change

    with fetching_state(fetching_callback):
        try:
            result = await fetch()

            if has_changed(result, cached.data):
                on_data(result)

            cache.set(key, result, stale_time=stale_time, cache_time=cache_time)
        except Exception as e:
            if on_error is None:
                raise
            logger.debug(f"Query failed for {key}: {e}")
            on_error(e)
