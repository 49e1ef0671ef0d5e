import logging
import os
import sqlite3
from typing import Optional

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS books (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT NOT NULL CHECK(length(trim(title)) > 0),
    author TEXT NOT NULL CHECK(length(trim(author)) > 0),
    status TEXT NOT NULL DEFAULT 'to-read' CHECK(status IN ('to-read', 'reading', 'read')),
    rating INTEGER CHECK(rating IS NULL OR (rating >= 1 AND rating <= 5)),
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_books_status ON books(status);
CREATE INDEX IF NOT EXISTS idx_books_created_at ON books(created_at);
"""


class Database:
    """Owns the single SQLite connection used by the application.

    The connection is opened by ``connect()`` (or on entering the context
    manager) and released by ``close()``. Leaving the ``with`` block closes it
    on every path, including exceptions, so the web app's lifespan and the CLI
    both use it that way.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise RuntimeError("Database connection is not open.")
        return self._conn

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    def connect(self) -> "Database":
        if self._conn is not None:
            return self
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        # FastAPI runs sync endpoints in a worker thread pool
        conn = sqlite3.connect(self.path, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        self._conn = conn
        self.create_tables()
        logger.info(f"Opened database {self.path}")
        return self

    def create_tables(self) -> None:
        """Apply the schema. Safe to run on every startup."""
        self.connection.executescript(SCHEMA)
        self.connection.commit()

    def ping(self) -> bool:
        try:
            self.connection.execute("SELECT 1").fetchone()
        except (sqlite3.Error, RuntimeError) as e:
            logger.error(f"Database ping failed: {e}")
            return False
        return True

    def close(self) -> None:
        if self._conn is None:
            return
        try:
            self._conn.close()
        finally:
            self._conn = None
            logger.info(f"Closed database {self.path}")

    def __enter__(self) -> "Database":
        return self.connect()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
