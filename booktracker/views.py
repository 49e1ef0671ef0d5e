"""HTML rendering for the book pages.

Templates are rendered with autoescaping switched on, so a plain
``{{ value }}`` is always escaped. ``escape_html`` is also exposed to every
template (as a global and as the ``e_html`` filter) for places where a value
is built up in Python or inside an attribute. Inserting markup unescaped needs
an explicit ``Markup(...)`` or ``|safe`` and is reserved for the layout frame.
"""

from pathlib import Path
from typing import Any

from fastapi import Request
from fastapi.templating import Jinja2Templates
from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from booktracker.book import ReadingStatus
from booktracker.config import settings

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#039;",
}


def escape_html(value: Any) -> Markup:
    """Escape ``& < > " '`` in ``value``; None renders as an empty string."""
    if value is None:
        return Markup("")
    if isinstance(value, Markup):
        return value
    text = str(value)
    # & first so the entities below are not escaped twice
    for char in ("&", "<", ">", '"', "'"):
        text = text.replace(char, _HTML_ESCAPES[char])
    return Markup(text)


def status_label(value: Any) -> str:
    try:
        return ReadingStatus(value).label
    except ValueError:
        return str(value or "")


def _create_environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
    )
    env.filters["e_html"] = escape_html
    env.filters["status_label"] = status_label
    env.globals["escape_html"] = escape_html
    env.globals["statuses"] = list(ReadingStatus)
    env.globals["app_name"] = settings.app_name
    return env


templates = Jinja2Templates(env=_create_environment())


def render(request: Request, name: str, context: dict | None = None, status_code: int = 200):
    return templates.TemplateResponse(request, name, context or {}, status_code=status_code)


def render_not_found(request: Request, message: str = "Page not found"):
    return render(request, "404.html", {"message": message}, status_code=404)
