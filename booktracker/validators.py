import re
from typing import Dict, Optional

from pydantic import BaseModel

from booktracker.book import Book, ReadingStatus

TITLE_REQUIRED = "Title is required"
AUTHOR_REQUIRED = "Author is required"
RATING_OUT_OF_RANGE = "Rating must be between 1 and 5"
STATUS_INVALID = "Status must be one of: " + ", ".join(ReadingStatus.values())

MIN_RATING = 1
MAX_RATING = 5

_INTEGER_RE = re.compile(r"[0-9]+")


class BookForm(BaseModel):
    """Raw book fields as submitted from the HTML form.

    Every field is the untouched string the browser sent; a field missing from
    the body arrives as an empty string.
    """

    title: str = ""
    author: str = ""
    status: str = ""
    rating: str = ""

    @classmethod
    def from_book(cls, book: Book) -> "BookForm":
        return cls(
            title=book.title,
            author=book.author,
            status=book.status.value,
            rating="" if book.rating is None else str(book.rating),
        )

    def to_book(self) -> Book:
        """Build a Book from a form that passed ``validate_book_form``."""
        return Book(
            title=self.title.strip(),
            author=self.author.strip(),
            status=ReadingStatus.parse(self.status),
            rating=BookValidator.parse_rating(self.rating),
        )


class BookValidator:
    """Field rules for submitted book data."""

    @staticmethod
    def is_blank(text: Optional[str]) -> bool:
        return text is None or not text.strip()

    @staticmethod
    def parse_rating(raw: Optional[str]) -> Optional[int]:
        """Return the rating as an int, None when blank.

        Raises ValueError when the value is not a whole number in range.
        """
        if BookValidator.is_blank(raw):
            return None
        value = raw.strip()
        if not _INTEGER_RE.fullmatch(value):
            raise ValueError(RATING_OUT_OF_RANGE)
        rating = int(value)
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValueError(RATING_OUT_OF_RANGE)
        return rating

    @staticmethod
    def is_valid_status(raw: Optional[str]) -> bool:
        try:
            ReadingStatus.parse(raw)
        except ValueError:
            return False
        return True


def validate_book_form(form: BookForm) -> Dict[str, str]:
    """Check every field and return messages keyed by field name.

    All rules run, so several errors can come back together. An empty dict
    means the form is valid.
    """
    errors: Dict[str, str] = {}

    if BookValidator.is_blank(form.title):
        errors["title"] = TITLE_REQUIRED
    if BookValidator.is_blank(form.author):
        errors["author"] = AUTHOR_REQUIRED
    try:
        BookValidator.parse_rating(form.rating)
    except ValueError:
        errors["rating"] = RATING_OUT_OF_RANGE
    if not BookValidator.is_valid_status(form.status):
        errors["status"] = STATUS_INVALID

    return errors
