"""Key-value storage backends for the persisted stores.

Every store keeps one JSON document under one key. Backends only move whole
documents around: ``read(key)`` returns the stored bytes or None,
``write(key, data)`` replaces them in a single step. Subscribers registered
with ``subscribe(key, handler)`` are called with the key (never the value)
when *another* storage context changes it, the way a browser fires a
``storage`` event in every tab except the one that wrote.
"""

import logging
import sqlite3
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Generator, List, Optional

from storefront.config import DB_PATH, POLL_INTERVAL

__all__ = [
    "ChangeHandler",
    "Storage",
    "MemoryArea",
    "MemoryStorage",
    "SQLiteStorage",
    "get_connection",
    "init_storage",
]

logger = logging.getLogger(__name__)

ChangeHandler = Callable[[str], None]


class Storage(ABC):
    """Base class for storage backends."""

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[ChangeHandler]] = defaultdict(list)

    @abstractmethod
    def read(self, key: str) -> Optional[bytes]:
        """Return the stored bytes for ``key``, or None."""

    @abstractmethod
    def write(self, key: str, data: bytes) -> None:
        """Replace the value of ``key`` in a single step."""

    def subscribe(self, key: str, handler: ChangeHandler) -> Callable[[], None]:
        """Register a handler for external changes to ``key``.

        Returns:
            A function that removes the handler again.
        """
        self._subscribers[key].append(handler)

        def unsubscribe() -> None:
            handlers = self._subscribers.get(key, [])
            if handler in handlers:
                handlers.remove(handler)

        return unsubscribe

    def _notify(self, key: str) -> None:
        for handler in list(self._subscribers.get(key, ())):
            try:
                handler(key)
            except Exception:
                logger.exception("Change handler for '%s' failed", key)


# =============================================================================
# In-memory storage
# =============================================================================

class MemoryArea:
    """Data shared by several in-memory storage contexts."""

    def __init__(self) -> None:
        self.data: Dict[str, bytes] = {}
        self._contexts: List["MemoryStorage"] = []

    def open(self) -> "MemoryStorage":
        """Open a new context (a "tab") on this area."""
        return MemoryStorage(self)

    def attach(self, context: "MemoryStorage") -> None:
        self._contexts.append(context)

    def detach(self, context: "MemoryStorage") -> None:
        if context in self._contexts:
            self._contexts.remove(context)

    def broadcast(self, key: str, source: "MemoryStorage") -> None:
        for context in list(self._contexts):
            if context is not source:
                context._notify(key)


class MemoryStorage(Storage):
    """In-memory storage, used by tests and as the default for throwaway runs."""

    def __init__(self, area: Optional[MemoryArea] = None) -> None:
        super().__init__()
        self.area = area if area is not None else MemoryArea()
        self.area.attach(self)

    def read(self, key: str) -> Optional[bytes]:
        return self.area.data.get(key)

    def write(self, key: str, data: bytes) -> None:
        if not isinstance(data, bytes):
            raise TypeError(f"Storage values must be bytes, got {type(data).__name__}")
        self.area.data[key] = data
        self.area.broadcast(key, self)

    def close(self) -> None:
        self.area.detach(self)


# =============================================================================
# SQLite storage
# =============================================================================

@contextmanager
def get_connection(db_path: str = DB_PATH) -> Generator[sqlite3.Connection, None, None]:
    """Context manager for database connections."""
    # Ensure directory exists
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        yield conn
    finally:
        conn.close()


def init_storage(db_path: str = DB_PATH) -> None:
    """Initialize the key-value table."""
    with get_connection(db_path) as conn:
        conn.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value BLOB NOT NULL,
                revision INTEGER NOT NULL DEFAULT 1,
                updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        conn.commit()


class SQLiteStorage(Storage):
    """SQLite-backed storage shared by every process that opens the same file.

    Each write bumps the key's revision. ``poll()`` compares the revisions of
    subscribed keys with the last ones this instance saw and notifies
    subscribers about changes written through other instances.
    """

    def __init__(self, db_path: str = DB_PATH) -> None:
        super().__init__()
        self.db_path = db_path
        self._seen: Dict[str, int] = {}
        init_storage(db_path)

    def _revision(self, key: str) -> int:
        with get_connection(self.db_path) as conn:
            row = conn.execute(
                "SELECT revision FROM kv_store WHERE key = ?", (key,)
            ).fetchone()
        return row["revision"] if row else 0

    def read(self, key: str) -> Optional[bytes]:
        with get_connection(self.db_path) as conn:
            row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return bytes(row["value"]) if row else None

    def write(self, key: str, data: bytes) -> None:
        if not isinstance(data, bytes):
            raise TypeError(f"Storage values must be bytes, got {type(data).__name__}")
        with get_connection(self.db_path) as conn:
            conn.execute("""
                INSERT INTO kv_store (key, value, revision, updated_at)
                VALUES (?, ?, 1, CURRENT_TIMESTAMP)
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    revision = kv_store.revision + 1,
                    updated_at = CURRENT_TIMESTAMP
            """, (key, sqlite3.Binary(data)))
            # Same transaction, so this is our own revision
            revision = conn.execute(
                "SELECT revision FROM kv_store WHERE key = ?", (key,)
            ).fetchone()["revision"]
            conn.commit()
        self._seen[key] = revision

    def subscribe(self, key: str, handler: ChangeHandler) -> Callable[[], None]:
        if key not in self._seen:
            self._seen[key] = self._revision(key)
        return super().subscribe(key, handler)

    def poll(self) -> List[str]:
        """Notify subscribers of keys changed elsewhere since the last poll.

        Returns:
            The keys that changed.
        """
        keys = [key for key, handlers in self._subscribers.items() if handlers]
        if not keys:
            return []

        placeholders = ", ".join("?" for _ in keys)
        with get_connection(self.db_path) as conn:
            rows = conn.execute(
                f"SELECT key, revision FROM kv_store WHERE key IN ({placeholders})", keys
            ).fetchall()
        revisions = {row["key"]: row["revision"] for row in rows}

        changed = []
        for key in keys:
            revision = revisions.get(key, 0)
            if revision != self._seen.get(key, 0):
                self._seen[key] = revision
                changed.append(key)

        for key in changed:
            logger.debug("External change detected for '%s'", key)
            self._notify(key)
        return changed

    def watch(
        self,
        interval: float = POLL_INTERVAL,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        """Poll until ``stop_event`` is set."""
        stop_event = stop_event or threading.Event()
        while not stop_event.is_set():
            self.poll()
            stop_event.wait(interval)
