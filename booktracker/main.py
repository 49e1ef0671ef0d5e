from contextlib import contextmanager
from typing import Iterator, Optional

import typer
import uvicorn

from booktracker.api import create_app
from booktracker.book import ReadingStatus
from booktracker.config import settings
from booktracker.database import Database
from booktracker.library import Library, StorageError
from booktracker.ui_helpers import print_book_result, print_list_result, print_stats_result, set_output_mode

app = typer.Typer(help="Book Tracker CLI")

_options = {"db_file": None}


@contextmanager
def open_library() -> Iterator[Library]:
    """Open the configured database for the duration of one command."""
    with Database(_options["db_file"] or settings.database_file) as db:
        yield Library(db)


@app.callback()
def _global_options(
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output format: plain | json | rich (default: plain)",
    ),
    db_file: Optional[str] = typer.Option(
        None,
        "--db",
        help="SQLite database file (default: BOOKS_DB_FILE or books.db)",
    ),
):
    """Global options for the CLI (output mode, database file)."""
    if output:
        set_output_mode(output)
    _options["db_file"] = db_file


@app.command("list")
def cli_list(
    status: Optional[str] = typer.Option(None, "--status", "-s", help="to-read | reading | read"),
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Search in title or author"),
):
    """List books, newest first."""
    status_filter = None
    if status:
        try:
            status_filter = ReadingStatus(status)
        except ValueError:
            print(f"Unknown status: {status}. Use one of: {', '.join(ReadingStatus.values())}")
            raise typer.Exit(code=1)
    with open_library() as lib:
        books = lib.list_books(status=status_filter, query=query)
    print_list_result(books)


@app.command("find")
def cli_find(book_id: int):
    """Show one book by id."""
    with open_library() as lib:
        book = lib.find_book(book_id)
    if book:
        print_book_result(book)
    else:
        print(f"Book with id {book_id} not found.")


@app.command("remove")
def cli_remove(book_id: int):
    """Delete a book by id."""
    with open_library() as lib:
        try:
            removed = lib.remove_book(book_id)
        except StorageError as e:
            print(f"Error: {e}")
            raise typer.Exit(code=1)
    if removed:
        print(f"Book with id {book_id} has been removed.")
    else:
        print(f"Book with id {book_id} not found.")


@app.command("stats")
def cli_stats():
    """Show how many books are in each status."""
    with open_library() as lib:
        stats = lib.get_statistics()
    print_stats_result(stats)


@app.command("serve")
def cli_serve(
    host: Optional[str] = typer.Option(None, "--host", help="Interface to bind (default: HOST or 127.0.0.1)"),
    port: Optional[int] = typer.Option(None, "--port", help="Port to listen on (default: PORT or 3000)"),
):
    """Run the web application with uvicorn."""
    host = host or settings.host
    port = port or settings.port
    print(f"{settings.app_name} running at http://{host}:{port}")
    uvicorn.run(
        create_app(_options["db_file"]),
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    app()
