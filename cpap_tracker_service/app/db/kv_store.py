# app/db/kv_store.py
from __future__ import annotations

import asyncio
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol, Union

from app.db.db_config import KV_TABLE, get_sqlite_connection

logger = logging.getLogger(__name__)

STORE_BACKENDS = ("sqlite", "memory")


class KeyValueStore(Protocol):
    """A string-keyed slot store. Each put replaces the whole value."""

    async def get(self, key: str) -> Optional[str]: ...

    async def put(self, key: str, value: str) -> None: ...

    async def close(self) -> None: ...


class MemoryKeyValueStore:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def put(self, key: str, value: str) -> None:
        self._data[key] = value

    async def close(self) -> None:
        return None


class SqliteKeyValueStore:
    """
    One row per key. Blocking sqlite calls run in a worker thread so the
    event loop stays responsive; a thread lock keeps the shared connection
    to one statement at a time.
    """

    def __init__(self, db_path: Union[str, Path]):
        self.db_path = Path(db_path)
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = threading.Lock()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = get_sqlite_connection(self.db_path)
            logger.info("Opened key-value store at %s", self.db_path)
        return self._conn

    def _get_sync(self, key: str) -> Optional[str]:
        with self._lock:
            row = self._connection().execute(
                f"SELECT value FROM {KV_TABLE} WHERE key = ?", (key,)
            ).fetchone()
        return row[0] if row else None

    def _put_sync(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc).isoformat(timespec="seconds")
        with self._lock:
            conn = self._connection()
            # single statement in its own transaction: readers see old or new, never partial
            with conn:
                conn.execute(
                    f"INSERT INTO {KV_TABLE} (key, value, updated_at) VALUES (?, ?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at",
                    (key, value, now),
                )

    def _close_sync(self) -> None:
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    async def get(self, key: str) -> Optional[str]:
        return await asyncio.to_thread(self._get_sync, key)

    async def put(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._put_sync, key, value)

    async def close(self) -> None:
        await asyncio.to_thread(self._close_sync)


def build_kv_store(backend: str, db_path: Union[str, Path]) -> KeyValueStore:
    backend = (backend or "").lower().strip()
    if backend == "sqlite":
        return SqliteKeyValueStore(db_path)
    if backend == "memory":
        return MemoryKeyValueStore()
    raise ValueError(f"Unknown store backend: {backend!r} (expected one of {', '.join(STORE_BACKENDS)})")
