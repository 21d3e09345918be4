"""
Core cache data structures.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from .logger import CacheLogger


# Library defaults (in seconds)
DEFAULT_STALE_TIME = 300.0     # 5 minutes
DEFAULT_CACHE_TIME = 1800.0    # 30 minutes
DEFAULT_GC_INTERVAL = 60.0     # 1 minute

KeySegment = Union[str, int]
CacheKey = Sequence[KeySegment]


class EntryState(Enum):
    """Derived state of an entry at read time."""
    FRESH = "fresh"       # Within stale time
    STALE = "stale"       # Past stale time, still servable
    EXPIRED = "expired"   # Past cache time, eligible for garbage collection


@dataclass
class CacheEntry:
    """
    A cached value plus the times needed to judge its staleness and expiry.

    Replaced wholesale on every set; never partially updated.
    """
    data: Any
    timestamp: float
    stale_time: float
    cache_time: float

    def age_seconds(self, now: float) -> float:
        """Seconds since the entry was written."""
        return now - self.timestamp

    def is_stale(self, now: float) -> bool:
        return self.age_seconds(now) > self.stale_time

    def is_expired(self, now: float) -> bool:
        return self.age_seconds(now) > self.cache_time

    def state(self, now: float) -> EntryState:
        if self.is_expired(now):
            return EntryState.EXPIRED
        elif self.is_stale(now):
            return EntryState.STALE
        return EntryState.FRESH

    def to_record(self) -> Dict[str, Any]:
        """Convert to the persisted record layout."""
        return {
            "data": self.data,
            "timestamp": self.timestamp,
            "staleTime": self.stale_time,
            "cacheTime": self.cache_time,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "CacheEntry":
        """
        Create from a persisted record.

        Raises:
            ValueError: If the record is missing fields or has the wrong shape
        """
        if not isinstance(record, dict):
            raise ValueError(f"Expected a mapping, got {type(record).__name__}")
        try:
            return cls(
                data=record["data"],
                timestamp=float(record["timestamp"]),
                stale_time=float(record["staleTime"]),
                cache_time=float(record["cacheTime"]),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed cache record: {e}") from e


@dataclass(frozen=True)
class CacheResult:
    """
    Outcome of a cache read.

    A miss is reported as data=None, stale=False.
    """
    data: Any = None
    stale: bool = False


MISS = CacheResult()


@dataclass
class CacheOptions:
    """
    Store-instance configuration.

    Any value left as None falls back to the library default.
    """
    gc_interval: Optional[float] = None
    default_stale_time: Optional[float] = None
    default_cache_time: Optional[float] = None
    debug: bool = False
    logger: Optional[CacheLogger] = None


def is_valid_segment(segment: Any) -> bool:
    # bool is an int subclass but never a meaningful path segment
    if isinstance(segment, bool):
        return False
    return isinstance(segment, (str, int))


def normalize_key(key: Any) -> Optional[Tuple[KeySegment, ...]]:
    """
    Validate a cache key and return it as a tuple.

    Returns:
        The key as a tuple of segments, or None if the key is empty,
        not a sequence, or contains a segment that is not a str or int.
    """
    if isinstance(key, (str, bytes)) or not isinstance(key, (list, tuple)):
        return None
    if len(key) == 0:
        return None
    if not all(is_valid_segment(segment) for segment in key):
        return None
    return tuple(key)


def resolve_time(
    per_call: Optional[float],
    store_default: Optional[float],
    library_default: float,
) -> float:
    """Resolve a duration: per-call value, then store default, then library default."""
    if per_call is not None:
        return per_call
    if store_default is not None:
        return store_default
    return library_default


def has_changed(new_value: Any, old_value: Any) -> bool:
    """
    Check whether a fetched value differs from what was already delivered.

    Uses structural equality, so nested dicts compare equal regardless of
    key insertion order. A bool is never equal to a number here, unlike
    plain ``==``.
    """
    return not _deep_equal(new_value, old_value)


def _deep_equal(a: Any, b: Any) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return type(a) is type(b) and a == b
    if isinstance(a, dict) and isinstance(b, dict):
        if a.keys() != b.keys():
            return False
        return all(_deep_equal(a[k], b[k]) for k in a)
    if isinstance(a, (list, tuple)) and isinstance(b, (list, tuple)):
        if type(a) is not type(b) or len(a) != len(b):
            return False
        return all(_deep_equal(x, y) for x, y in zip(a, b))
    return a == b
