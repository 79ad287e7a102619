# app/db/db_config.py

import sqlite3
from pathlib import Path
from typing import Union

KV_TABLE = "kv_slots"


def get_sqlite_connection(db_path: Union[str, Path]) -> sqlite3.Connection:
    """
    Create and configure SQLite connection with recommended PRAGMA settings.
    The parent directory is created if missing.
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path), check_same_thread=False)

    # Performance & concurrency settings
    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute("PRAGMA synchronous=NORMAL;")
    conn.execute("PRAGMA busy_timeout=5000;")

    conn.execute(
        f"CREATE TABLE IF NOT EXISTS {KV_TABLE} ("
        "key TEXT PRIMARY KEY, "
        "value TEXT NOT NULL, "
        "updated_at TEXT NOT NULL)"
    )
    conn.commit()

    return conn
