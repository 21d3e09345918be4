"""
Flat key-value backends for the string-keyed cache store.

A backend only knows about opaque string keys and string values; the
hierarchy and the record format are layered on top by KeyValueCacheStore.
"""
import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List, Optional, Protocol

logger = logging.getLogger("cache.kv_backends")

# Default database path
DEFAULT_DB_PATH = Path("./cache/querycache.db")


SCHEMA = """
CREATE TABLE IF NOT EXISTS cache_records (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL
);
"""


class KeyValueBackend(Protocol):
    """Minimal physical storage a flat cache store needs."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...

    def keys(self) -> List[str]: ...


class MemoryKeyValueBackend:
    """Dict-backed backend. Nothing survives the process."""

    def __init__(self):
        self._records: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._records.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._records[key] = value

    def delete(self, key: str) -> None:
        with self._lock:
            self._records.pop(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._records)


class SqliteKeyValueBackend:
    """
    SQLite-based persistent backend.

    One row per cache key. A fresh connection is opened per operation, so
    the backend can be shared between the caller's thread and the
    garbage collector thread.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path is not None else DEFAULT_DB_PATH
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self):
        """Initialize database with schema."""
        with self._get_connection() as conn:
            conn.executescript(SCHEMA)
            conn.commit()
        logger.debug(f"Cache database ready at {self.db_path}")

    @contextmanager
    def _get_connection(self):
        """Get a database connection."""
        conn = sqlite3.connect(str(self.db_path), timeout=5.0)
        try:
            yield conn
        finally:
            conn.close()

    def get(self, key: str) -> Optional[str]:
        with self._get_connection() as conn:
            row = conn.execute(
                "SELECT value FROM cache_records WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        with self._get_connection() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO cache_records (key, value) VALUES (?, ?)",
                (key, value),
            )
            conn.commit()

    def delete(self, key: str) -> None:
        with self._get_connection() as conn:
            conn.execute("DELETE FROM cache_records WHERE key = ?", (key,))
            conn.commit()

    def keys(self) -> List[str]:
        with self._get_connection() as conn:
            rows = conn.execute("SELECT key FROM cache_records").fetchall()
        return [row[0] for row in rows]
