"""
Cache store over a flat key-value backend.

Hierarchy is simulated by joining key segments into one string per entry.
Segments are escaped before joining, so a segment that itself contains the
delimiter can never be mistaken for a deeper path during prefix scans.

Record format (one record per cache key):
    key   = escaped segments joined by ":", ints tagged   e.g. "users:#42:profile"
    value = JSON {"data": ..., "timestamp": ..., "staleTime": ..., "cacheTime": ...}
"""
import json
import logging
import time
from typing import Callable, Optional, Tuple

from .base import BaseCacheStore
from .core import CacheEntry, CacheOptions, KeySegment
from .kv_backends import KeyValueBackend, MemoryKeyValueBackend

logger = logging.getLogger("cache.kv_store")

KEY_DELIMITER = ":"
ESCAPE_CHAR = "\\"
INT_TAG = "#"


def encode_segment(segment: KeySegment) -> str:
    """
    Encode one segment.

    Integers are tagged so 1 and "1" stay distinct. In strings the escape
    character, the delimiter and the tag are escaped.
    """
    if isinstance(segment, int):
        return INT_TAG + str(segment)
    text = segment.replace(ESCAPE_CHAR, ESCAPE_CHAR * 2)
    text = text.replace(KEY_DELIMITER, ESCAPE_CHAR + KEY_DELIMITER)
    return text.replace(INT_TAG, ESCAPE_CHAR + INT_TAG)


def encode_key(key: Tuple[KeySegment, ...]) -> str:
    """Join a validated key into its physical string form."""
    return KEY_DELIMITER.join(encode_segment(segment) for segment in key)


class KeyValueCacheStore(BaseCacheStore):
    """
    Flat-backend store.

    - get/set touch exactly one physical record
    - invalidate scans every physical key for the exact key or its descendants
    - clean_up scans every record, dropping expired and unreadable ones
    """

    def __init__(
        self,
        backend: Optional[KeyValueBackend] = None,
        options: Optional[CacheOptions] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            backend: Physical storage; defaults to a process-local dict
            options: Store-instance defaults, debug flag and log sink
            clock: Returns the current time in seconds
        """
        self.backend: KeyValueBackend = backend if backend is not None else MemoryKeyValueBackend()
        super().__init__(options=options, clock=clock)

    def _write(self, key: Tuple[KeySegment, ...], entry: CacheEntry) -> None:
        # Serialize first so an unserializable payload leaves the old record intact
        value = json.dumps(entry.to_record())
        self.backend.set(encode_key(key), value)

    def _read(self, key: Tuple[KeySegment, ...]) -> Optional[CacheEntry]:
        physical_key = encode_key(key)
        raw = self.backend.get(physical_key)
        if raw is None:
            return None
        return self._parse(physical_key, raw)

    def _remove_tree(self, key: Tuple[KeySegment, ...]) -> int:
        physical_key = encode_key(key)
        prefix = physical_key + KEY_DELIMITER

        to_delete = [
            k for k in self.backend.keys()
            if k == physical_key or k.startswith(prefix)
        ]
        for k in to_delete:
            self.backend.delete(k)
        return len(to_delete)

    def _sweep_expired(self, now: float) -> int:
        removed = 0
        for physical_key in self.backend.keys():
            raw = self.backend.get(physical_key)
            if raw is None:
                continue

            entry = self._parse(physical_key, raw)
            if entry is None:
                # Unreadable records can never be served, so drop them too
                self.backend.delete(physical_key)
                removed += 1
                continue

            if entry.is_expired(now):
                self.backend.delete(physical_key)
                removed += 1
                self._debug_log("Garbage collected:", physical_key)
        return removed

    def _check_stale(self, entry: CacheEntry) -> bool:
        now = self._clock()
        if self.options.debug:
            self._debug_log(
                "Checking stale:",
                f"{entry.state(now).value.capitalize()},",
                "Time passed:",
                round(entry.age_seconds(now), 3),
                "seconds",
            )
        return entry.is_stale(now)

    def _parse(self, physical_key: str, raw: str) -> Optional[CacheEntry]:
        try:
            return CacheEntry.from_record(json.loads(raw))
        except ValueError as e:
            logger.warning(f"Ignoring malformed cache record {physical_key!r}: {e}")
            return None
