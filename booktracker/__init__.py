"""Book Tracker - reading list web application

Modules:
- API endpoints and HTML routes (api.py)
- Reading list persistence (library.py)
- SQLite connection lifecycle (database.py)
- Data model (book.py)
- Form validation (validators.py)
- Template rendering (views.py)
- CLI interface (main.py)
"""

__version__ = "1.0.0"
