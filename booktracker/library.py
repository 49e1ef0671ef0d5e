import logging
import sqlite3
from typing import Dict, List, Optional

from booktracker.book import Book, ReadingStatus
from booktracker.database import Database

logger = logging.getLogger(__name__)

BOOK_COLUMNS = "id, title, author, status, rating, created_at, updated_at"

# Largest value SQLite can bind as an INTEGER
MAX_ROWID = 2 ** 63 - 1


class StorageError(Exception):
    """Raised when the underlying store rejects or fails an operation."""


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _status_value(status) -> str:
    return status.value if isinstance(status, ReadingStatus) else str(status)


def _valid_id(book_id: int) -> bool:
    return 0 < book_id <= MAX_ROWID


class Library:
    """Manages the reading list and its persistence in the ``books`` table."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def _query(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        try:
            return self.db.connection.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            logger.error(f"Database read failed: {e}")
            raise StorageError(str(e)) from e

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        conn = self.db.connection
        try:
            cursor = conn.execute(sql, params)
            conn.commit()
            return cursor
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(f"Database write failed: {e}")
            raise StorageError(str(e)) from e

    # ------------------------- Core operations ------------------------- #
    def list_books(self, status: Optional[ReadingStatus] = None, query: Optional[str] = None) -> List[Book]:
        """List books matching the filter, most recently created first."""
        sql = f"SELECT {BOOK_COLUMNS} FROM books WHERE 1=1"
        params: list = []

        if status:
            sql += " AND status = ?"
            params.append(_status_value(status))

        if query:
            # LIKE folds case for ASCII letters only; "é" does not match "É"
            sql += " AND (title LIKE ? ESCAPE '\\' OR author LIKE ? ESCAPE '\\')"
            term = f"%{_escape_like(query)}%"
            params.extend([term, term])

        sql += " ORDER BY created_at DESC, id DESC"
        rows = self._query(sql, tuple(params))
        return [Book.from_row(row) for row in rows]

    def find_book(self, book_id: int) -> Optional[Book]:
        if not _valid_id(book_id):
            return None
        rows = self._query(f"SELECT {BOOK_COLUMNS} FROM books WHERE id = ?", (book_id,))
        return Book.from_row(rows[0]) if rows else None

    def add_book(self, book: Book) -> Book:
        """Insert a new book and return it as stored, with id and timestamps."""
        cursor = self._execute(
            "INSERT INTO books (title, author, status, rating) VALUES (?, ?, ?, ?)",
            (book.title, book.author, _status_value(book.status), book.rating),
        )
        created = self.find_book(cursor.lastrowid)
        logger.info(f"Book created: id={cursor.lastrowid}")
        return created

    def update_book(self, book_id: int, book: Book) -> Optional[Book]:
        """Replace title, author, status and rating of a book.

        Returns the updated book, or None when no book has that id.
        """
        if not _valid_id(book_id):
            return None
        cursor = self._execute(
            """
            UPDATE books
            SET title = ?, author = ?, status = ?, rating = ?, updated_at = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            (book.title, book.author, _status_value(book.status), book.rating, book_id),
        )
        if cursor.rowcount == 0:
            return None
        logger.info(f"Book updated: id={book_id}")
        return self.find_book(book_id)

    def remove_book(self, book_id: int) -> bool:
        if not _valid_id(book_id):
            return False
        cursor = self._execute("DELETE FROM books WHERE id = ?", (book_id,))
        if cursor.rowcount > 0:
            logger.info(f"Book deleted: id={book_id}")
            return True
        return False

    # ------------------------- Statistics ------------------------- #
    def get_statistics(self) -> Dict[str, int]:
        rows = self._query("SELECT status, COUNT(*) AS total FROM books GROUP BY status")
        stats = {status.value: 0 for status in ReadingStatus}
        for row in rows:
            stats[row["status"]] = row["total"]
        stats["total_books"] = sum(stats.values())
        return stats
