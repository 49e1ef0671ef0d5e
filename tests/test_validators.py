import pytest

from booktracker.book import Book, ReadingStatus
from booktracker.validators import (
    AUTHOR_REQUIRED,
    RATING_OUT_OF_RANGE,
    STATUS_INVALID,
    TITLE_REQUIRED,
    BookForm,
    BookValidator,
    validate_book_form,
)


def test_valid_form_has_no_errors():
    form = BookForm(title="1984", author="Orwell", status="read", rating="5")
    assert validate_book_form(form) == {}


def test_missing_title_only_flags_title():
    errors = validate_book_form(BookForm(title="", author="X"))
    assert errors == {"title": TITLE_REQUIRED}


def test_whitespace_only_fields_are_missing():
    errors = validate_book_form(BookForm(title="   ", author="\t\n"))
    assert errors == {"title": TITLE_REQUIRED, "author": AUTHOR_REQUIRED}


def test_all_errors_reported_together():
    errors = validate_book_form(BookForm(rating="0"))
    assert errors == {
        "title": TITLE_REQUIRED,
        "author": AUTHOR_REQUIRED,
        "rating": RATING_OUT_OF_RANGE,
    }


@pytest.mark.parametrize("rating", ["6", "0", "-1", "abc", "3.5", "1e1"])
def test_invalid_rating(rating):
    errors = validate_book_form(BookForm(title="T", author="A", rating=rating))
    assert errors == {"rating": "Rating must be between 1 and 5"}


@pytest.mark.parametrize("rating", ["", "   ", "1", "5", " 3 "])
def test_acceptable_rating(rating):
    assert validate_book_form(BookForm(title="T", author="A", rating=rating)) == {}


def test_blank_status_is_valid():
    assert validate_book_form(BookForm(title="T", author="A", status="")) == {}


def test_unknown_status_is_rejected():
    errors = validate_book_form(BookForm(title="T", author="A", status="abandoned"))
    assert errors == {"status": STATUS_INVALID}


def test_parse_rating():
    assert BookValidator.parse_rating("") is None
    assert BookValidator.parse_rating(None) is None
    assert BookValidator.parse_rating("5") == 5
    with pytest.raises(ValueError):
        BookValidator.parse_rating("6")


def test_to_book_trims_and_parses():
    book = BookForm(title="  1984 ", author=" Orwell ", status="read", rating="5").to_book()

    assert book.title == "1984"
    assert book.author == "Orwell"
    assert book.status is ReadingStatus.READ
    assert book.rating == 5


def test_to_book_defaults():
    book = BookForm(title="T", author="A").to_book()

    assert book.status is ReadingStatus.TO_READ
    assert book.rating is None


def test_from_book_round_trips_into_form_strings():
    form = BookForm.from_book(Book("T", "A", "reading", 4, id=7))

    assert form == BookForm(title="T", author="A", status="reading", rating="4")
    assert BookForm.from_book(Book("T", "A")).rating == ""


def test_reading_status_parse():
    assert ReadingStatus.parse(None) is ReadingStatus.TO_READ
    assert ReadingStatus.parse(" reading ") is ReadingStatus.READING
    with pytest.raises(ValueError):
        ReadingStatus.parse("finished")
