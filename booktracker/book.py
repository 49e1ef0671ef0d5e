from __future__ import annotations

from enum import Enum
from typing import Any, Mapping


class ReadingStatus(str, Enum):
    """Where a book sits on the reading list."""

    TO_READ = "to-read"
    READING = "reading"
    READ = "read"

    @property
    def label(self) -> str:
        return {
            ReadingStatus.TO_READ: "To read",
            ReadingStatus.READING: "Reading",
            ReadingStatus.READ: "Read",
        }[self]

    @classmethod
    def parse(cls, raw: str | None) -> "ReadingStatus":
        """Parse a submitted status, falling back to ``to-read`` when blank.

        Raises ValueError for a non-blank value outside the enumeration.
        """
        value = (raw or "").strip()
        if not value:
            return cls.TO_READ
        return cls(value)

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class Book:
    """A single tracked book on the reading list."""

    def __init__(self, title: str, author: str, status: ReadingStatus | str = ReadingStatus.TO_READ,
                 rating: int | None = None, id: int | None = None,
                 created_at: str | None = None, updated_at: str | None = None) -> None:
        self.id = id
        self.title = title.strip()
        self.author = author.strip()
        self.status = ReadingStatus(status)
        self.rating = rating
        self.created_at = created_at
        self.updated_at = updated_at

    def __str__(self) -> str:  # pragma: no cover - string formatting trivial
        return f"{self.title} by {self.author} ({self.status.value})"

    def __repr__(self) -> str:  # pragma: no cover
        return f"Book(id={self.id!r}, title={self.title!r}, author={self.author!r}, status={self.status.value!r})"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "status": self.status.value,
            "rating": self.rating,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @staticmethod
    def from_row(row: Mapping[str, Any]) -> "Book":
        # sqlite3.Row supports mapping access but not .get()
        data = dict(row)
        return Book(
            id=data["id"],
            title=data["title"],
            author=data["author"],
            status=data["status"],
            rating=data.get("rating"),
            created_at=data.get("created_at"),
            updated_at=data.get("updated_at"),
        )
