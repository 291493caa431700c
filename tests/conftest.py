"""Shared fixtures: in-memory SQLite handle, repository and test clients."""

from unittest.mock import create_autospec

import pytest
from fastapi.testclient import TestClient

from config import Settings
from db import SQLiteDatabase
from main import create_app, get_repository
from repository import ProductRepository

SQLITE_SETTINGS = Settings(database_backend="sqlite", sqlite_path=":memory:")


@pytest.fixture
def sqlite_db():
    db = SQLiteDatabase(":memory:")
    db.init_schema()
    yield db
    db.close()


@pytest.fixture
def repo(sqlite_db: SQLiteDatabase) -> ProductRepository:
    return ProductRepository(sqlite_db)


@pytest.fixture(name="client")
def client_fixture(sqlite_db: SQLiteDatabase):
    """Client backed by a real (in-memory) database."""
    app = create_app(settings=SQLITE_SETTINGS, db=sqlite_db)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def mock_repo():
    return create_autospec(ProductRepository, instance=True)


@pytest.fixture
def mock_client(sqlite_db: SQLiteDatabase, mock_repo):
    """Client whose routes talk to `mock_repo` instead of a database."""
    app = create_app(settings=SQLITE_SETTINGS, db=sqlite_db)
    app.dependency_overrides[get_repository] = lambda: mock_repo
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
