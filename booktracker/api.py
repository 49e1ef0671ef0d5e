import logging
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Form, HTTPException, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from booktracker.book import Book, ReadingStatus
from booktracker.config import settings
from booktracker.database import Database
from booktracker.library import Library, StorageError
from booktracker.validators import BookForm, validate_book_form
from booktracker.views import render, render_not_found

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

PUBLIC_DIR = Path(__file__).resolve().parent / "public"

BOOK_NOT_FOUND = "Book not found"
PAGE_NOT_FOUND = "Page not found"
CREATE_FAILED = "Failed to create book. Please try again."
UPDATE_FAILED = "Failed to update book. Please try again."
DELETE_FAILED_FLAG = "delete_failed"

router = APIRouter()


# --- Dependencies ---
def get_library(request: Request) -> Library:
    return request.app.state.library


def book_form(
    title: str = Form(""),
    author: str = Form(""),
    status: str = Form(""),
    rating: str = Form(""),
) -> BookForm:
    """Parse the urlencoded book form into a BookForm."""
    return BookForm(title=title, author=author, status=status, rating=rating)


def _get_book_or_404(library: Library, book_id: int) -> Book:
    book = library.find_book(book_id)
    if not book:
        raise HTTPException(status_code=404, detail=BOOK_NOT_FOUND)
    return book


def _parse_status_filter(raw: str) -> Optional[ReadingStatus]:
    try:
        return ReadingStatus(raw.strip())
    except ValueError:
        return None


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=302)


# --- Routes ---
@router.get("/")
def read_root():
    return _redirect("/books")


@router.get("/health")
def health(request: Request):
    """Lightweight health check that pings the database."""
    db: Database = request.app.state.db
    if db.ping():
        return {"status": "ok", "database": "ok", "version": settings.app_version}
    return JSONResponse(status_code=503, content={"status": "error", "database": "error"})


@router.get("/books")
def list_books(request: Request, status: str = "", q: str = "", library: Library = Depends(get_library)):
    """List books, optionally filtered by status and a title/author search."""
    status_filter = _parse_status_filter(status)
    query = q.strip()
    books = library.list_books(status=status_filter, query=query or None)
    return render(request, "books/index.html", {
        "books": books,
        "filter": {"status": status_filter.value if status_filter else "", "q": q},
    })


@router.get("/books/new")
def new_book(request: Request):
    return render(request, "books/new.html", {"form": BookForm(), "errors": {}})


@router.post("/books")
def create_book(request: Request, form: BookForm = Depends(book_form), library: Library = Depends(get_library)):
    errors = validate_book_form(form)
    if errors:
        return render(request, "books/new.html", {"form": form, "errors": errors})

    try:
        book = library.add_book(form.to_book())
    except StorageError:
        logger.exception("Error creating book")
        return render(request, "books/new.html", {"form": form, "errors": {"general": CREATE_FAILED}})
    return _redirect(f"/books/{book.id}")


@router.get("/books/{book_id:int}")
def show_book(request: Request, book_id: int, error: str = "", library: Library = Depends(get_library)):
    book = _get_book_or_404(library, book_id)
    return render(request, "books/show.html", {"book": book, "error": error})


@router.get("/books/{book_id:int}/edit")
def edit_book(request: Request, book_id: int, library: Library = Depends(get_library)):
    book = _get_book_or_404(library, book_id)
    return render(request, "books/edit.html", {
        "book_id": book_id,
        "form": BookForm.from_book(book),
        "errors": {},
    })


@router.post("/books/{book_id:int}")
def update_book(request: Request, book_id: int, form: BookForm = Depends(book_form),
                library: Library = Depends(get_library)):
    _get_book_or_404(library, book_id)

    errors = validate_book_form(form)
    if errors:
        return render(request, "books/edit.html", {"book_id": book_id, "form": form, "errors": errors})

    try:
        updated = library.update_book(book_id, form.to_book())
    except StorageError:
        logger.exception(f"Error updating book {book_id}")
        return render(request, "books/edit.html", {
            "book_id": book_id,
            "form": form,
            "errors": {"general": UPDATE_FAILED},
        })
    if updated is None:
        # Removed between the lookup and the update
        raise HTTPException(status_code=404, detail=BOOK_NOT_FOUND)
    return _redirect(f"/books/{book_id}")


@router.post("/books/{book_id:int}/delete")
def delete_book(book_id: int, library: Library = Depends(get_library)):
    _get_book_or_404(library, book_id)
    try:
        library.remove_book(book_id)
    except StorageError:
        logger.exception(f"Error deleting book {book_id}")
        return _redirect(f"/books/{book_id}?error={DELETE_FAILED_FLAG}")
    return _redirect("/books")


# --- Error handling ---
async def not_found_handler(request: Request, exc: StarletteHTTPException):
    """Render the HTML 404 page for missing books, unknown paths and unsupported methods."""
    if exc.status_code == 404:
        message = exc.detail if exc.detail == BOOK_NOT_FOUND else PAGE_NOT_FOUND
        return render_not_found(request, message)
    if exc.status_code == 405:
        return render_not_found(request, PAGE_NOT_FOUND)
    return await http_exception_handler(request, exc)


# --- Application factory ---
def create_app(database_file: Optional[str] = None) -> FastAPI:
    db_path = database_file or settings.database_file

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Closing happens on every exit from the block, including uvicorn's
        # SIGINT/SIGTERM shutdown and startup failures
        with Database(db_path) as db:
            app.state.db = db
            app.state.library = Library(db)
            logger.info(f"{settings.app_name} ready (database: {db_path})")
            yield
        logger.info(f"{settings.app_name} shut down")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    app.add_exception_handler(StarletteHTTPException, not_found_handler)
    app.mount("/public", StaticFiles(directory=str(PUBLIC_DIR)), name="public")
    app.include_router(router)
    return app


app = create_app()
