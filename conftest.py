import pytest
from fastapi.testclient import TestClient

from booktracker.api import create_app
from booktracker.database import Database
from booktracker.library import Library


@pytest.fixture
def db_file(tmp_path):
    # tmp_path is unique per test
    return str(tmp_path / "books.db")


@pytest.fixture
def lib(db_file):
    with Database(db_file) as db:
        yield Library(db)


@pytest.fixture
def client(db_file):
    # Entering the client runs the app lifespan, which opens the database
    with TestClient(create_app(db_file)) as test_client:
        yield test_client
