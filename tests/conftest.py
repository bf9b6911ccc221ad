import os

# The app module reads its settings at import time.
os.environ.setdefault("APP_DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_API_KEY", "test-api-key")

from datetime import date

import httpx
import pytest

from library_api.app import app
from library_api.db import DatabaseInitializer, DbConnectionFactory, get_connection_factory
from library_api.models import Book
from library_api.service import BookService

API_KEY = os.environ["APP_API_KEY"]


@pytest.fixture(scope="session")
def anyio_backend():
    # The async tests use asyncio primitives (asyncio.gather) directly.
    return "asyncio"


@pytest.fixture()
def connections(tmp_path):
    factory = DbConnectionFactory(f"sqlite:///{tmp_path / 'library.db'}")
    DatabaseInitializer(factory).initialize()
    yield factory
    factory.dispose()


@pytest.fixture()
def service(connections):
    return BookService(connections)


@pytest.fixture()
def overrides(connections):
    app.dependency_overrides[get_connection_factory] = lambda: connections
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
async def client(overrides):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport,
        base_url="http://testserver",
        headers={"Authorization": API_KEY},
    ) as client:
        yield client


@pytest.fixture()
async def anonymous_client(overrides):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


def make_book(isbn: str = "123-4567890123", title: str = "The testing integration book", **fields) -> Book:
    values = {
        "isbn": isbn,
        "title": title,
        "author": "Mateusz",
        "short_description": "Please work",
        "page_count": 420,
        "release_date": date(2023, 1, 1),
    }
    values.update(fields)
    return Book(**values)
