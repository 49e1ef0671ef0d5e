from markupsafe import Markup

from booktracker.book import Book
from booktracker.views import escape_html, status_label, templates


def test_escape_html_escapes_all_special_characters():
    assert escape_html("""<a href="x">Tom & Jerry's</a>""") == (
        "&lt;a href=&quot;x&quot;&gt;Tom &amp; Jerry&#039;s&lt;/a&gt;"
    )


def test_escape_html_none_and_numbers():
    assert escape_html(None) == ""
    assert escape_html(5) == "5"


def test_escape_html_returns_markup_and_does_not_double_escape():
    once = escape_html("<b>")
    assert isinstance(once, Markup)
    assert escape_html(once) == "&lt;b&gt;"


def test_status_label():
    assert status_label("reading") == "Reading"
    assert status_label("to-read") == "To read"
    assert status_label("unknown") == "unknown"


def test_templates_autoescape_storage_values():
    book = Book("<script>alert(1)</script>", "Mallory", id=1, created_at="2024-01-01 00:00:00")
    template = templates.get_template("books/show.html")

    html = template.render(book=book, error="")

    assert "<script>alert(1)</script>" not in html
    assert "&lt;script&gt;alert(1)&lt;/script&gt;" in html


def test_escape_html_is_available_in_templates():
    template = templates.env.from_string("{{ escape_html(value) }}|{{ value|e_html }}")

    assert template.render(value="'&'") == "&#039;&amp;&#039;|&#039;&amp;&#039;"
