"""Key-value store initialization and connection management."""
import json
import sqlite3
from datetime import datetime
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_DB_PATH = str(Path.home() / ".skill_coach" / "coach.db")

SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT
);
"""

RATINGS_KEY = "ratings"
HISTORY_KEY = "quiz_history"
PLANS_KEY = "daily_plans"


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Return a SQLite connection with row factory enabled."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    return conn


def init_db(db_path: str = DEFAULT_DB_PATH) -> None:
    """Initialize the database, creating the store table if it doesn't exist."""
    Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(db_path)
    conn.executescript(SCHEMA)
    conn.commit()
    conn.close()


class KeyValueStore:
    """JSON documents stored under string keys.

    Every ``set`` writes the whole document, so callers persist full state
    after each read-modify-write.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        self.db_path = db_path
        init_db(db_path)

    def get(self, key: str, default=None):
        conn = get_connection(self.db_path)
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        conn.close()
        return json.loads(row["value"]) if row else default

    def set(self, key: str, value) -> None:
        payload = json.dumps(value)
        conn = get_connection(self.db_path)
        conn.execute(
            "INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at",
            (key, payload, datetime.now().isoformat()),
        )
        conn.commit()
        conn.close()
        logger.debug("kv_store_set", key=key, size=len(payload))

    def delete(self, key: str) -> None:
        conn = get_connection(self.db_path)
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()
        conn.close()

    def keys(self) -> list:
        conn = get_connection(self.db_path)
        rows = conn.execute("SELECT key FROM kv_store ORDER BY key").fetchall()
        conn.close()
        return [row["key"] for row in rows]
