# Key/Value Store - persisted slots for the vault engine
#
# The vault engine never touches files directly. It reads and writes three
# independent slots through a small get/set/remove interface, so the store
# can be swapped for an in-memory fake in tests.

import logging
import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Protocol, Union, runtime_checkable

logger = logging.getLogger(__name__)


def _open_db(db_path: Path) -> sqlite3.Connection:
    """Open the slot database in WAL mode with a busy timeout, rows by name."""
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    conn.row_factory = sqlite3.Row
    return conn


@runtime_checkable
class KeyValueStore(Protocol):
    """Synchronous byte-valued key/value store used by the vault."""

    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: bytes) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class MemoryKeyValueStore:
    """Dict-backed store. Contents vanish with the instance."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None):
        self._data: Dict[str, bytes] = dict(initial or {})
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"value for {key!r} must be bytes, got {type(value).__name__}")
        with self._lock:
            self._data[key] = bytes(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def snapshot(self) -> Dict[str, bytes]:
        """Copy of the current contents (used to compare storage states)."""
        with self._lock:
            return dict(self._data)


class SQLiteKeyValueStore:
    """SQLite-backed slots, one row per key.

    Every call opens a short-lived connection, so the store can be shared
    between threads (the vault serializes its own writes).

    Args:
        db_path: Path to SQLite file. Parent directories are created.
    """

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_database()

    def _init_database(self):
        with self._transaction() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS vault_slots (
                    key TEXT PRIMARY KEY,
                    value BLOB NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
        logger.debug("Vault slot table ready at %s", self.db_path)

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = _open_db(self.db_path)
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def get(self, key: str) -> Optional[bytes]:
        """Value of ``key``, or None if the slot is empty."""
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT value FROM vault_slots WHERE key = ?", (key,)
            ).fetchone()
        return None if row is None else bytes(row["value"])

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError(f"value for {key!r} must be bytes, got {type(value).__name__}")
        with self._transaction() as conn:
            conn.execute(
                """INSERT INTO vault_slots (key, value, updated_at)
                   VALUES (?, ?, ?)
                   ON CONFLICT(key) DO UPDATE SET
                       value = excluded.value,
                       updated_at = excluded.updated_at""",
                (key, bytes(value), datetime.now(timezone.utc).isoformat()),
            )

    def remove(self, key: str) -> None:
        """Empty a slot. Missing keys are ignored."""
        with self._transaction() as conn:
            conn.execute("DELETE FROM vault_slots WHERE key = ?", (key,))

    def keys(self) -> List[str]:
        """Occupied slot keys, sorted."""
        with self._transaction() as conn:
            rows = conn.execute("SELECT key FROM vault_slots ORDER BY key").fetchall()
        return [row["key"] for row in rows]
