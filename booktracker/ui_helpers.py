import json
import os
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from booktracker.book import Book, ReadingStatus

# Environment variable to control CLI output mode
# Allowed values: 'plain' (default), 'json', 'rich'
OUTPUT_MODE_ENV = "BOOKTRACKER_CLI_OUTPUT"
OUTPUT_MODES = {"plain", "json", "rich"}

_console = Console()


def set_output_mode(mode: str) -> None:
    mode = (mode or "").lower().strip()
    if mode in OUTPUT_MODES:
        os.environ[OUTPUT_MODE_ENV] = mode


def get_output_mode() -> str:
    return os.environ.get(OUTPUT_MODE_ENV, "plain").lower()


def _rating_text(book: Book) -> str:
    return f"{book.rating}/5" if book.rating else "-"


def print_list_result(books: List[Book]) -> None:
    """Print books according to the current output mode.
    - plain: '[id] Title by Author (status)' lines, or 'No books found.'
    - json: JSON array of book dicts
    - rich: Rich table
    """
    mode = get_output_mode()

    if not books:
        print("No books found.")
        return

    if mode == "json":
        print(json.dumps([b.to_dict() for b in books], ensure_ascii=False))
    elif mode == "rich":
        table = Table(title="📚 Books", show_lines=True, header_style="bold cyan")
        table.add_column("ID", style="magenta", no_wrap=True)
        table.add_column("Title", style="white")
        table.add_column("Author", style="white")
        table.add_column("Status", style="green")
        table.add_column("Rating", justify="right")
        for b in books:
            table.add_row(str(b.id), escape(b.title), escape(b.author), b.status.label, _rating_text(b))
        _console.print(table)
    else:
        for b in books:
            print(f"[{b.id}] {b.title} by {b.author} ({b.status.value})")


def print_book_result(book: Book) -> None:
    mode = get_output_mode()

    if mode == "json":
        print(json.dumps(book.to_dict(), ensure_ascii=False))
    elif mode == "rich":
        content = (
            f"[bold]Author:[/] {escape(book.author)}\n"
            f"[bold]Status:[/] {book.status.label}\n"
            f"[bold]Rating:[/] {_rating_text(book)}\n"
            f"[bold]Added:[/] {book.created_at}"
        )
        _console.print(Panel.fit(content, title=escape(book.title), border_style="blue"))
    else:
        print("Book Found")
        print(f"Title: {book.title}")
        print(f"Author: {book.author}")
        print(f"Status: {book.status.value}")
        print(f"Rating: {_rating_text(book)}")


def print_stats_result(stats: Dict[str, Any]) -> None:
    """Print statistics according to the current output mode."""
    mode = get_output_mode()
    total = stats.get("total_books", 0)

    if mode == "json":
        print(json.dumps(stats, ensure_ascii=False))
    elif mode == "rich":
        lines = [f"[bold]Total Books:[/] {total}"]
        lines += [f"[bold]{s.label}:[/] {stats.get(s.value, 0)}" for s in ReadingStatus]
        _console.print(Panel.fit("\n".join(lines), title="📊 Stats", border_style="blue"))
    else:
        print(f"Total Books: {total}")
        for s in ReadingStatus:
            print(f"{s.label}: {stats.get(s.value, 0)}")
