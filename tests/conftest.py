"""
Test configuration and fixtures for the URL shortener.

Every test gets its own SQLite file under tmp_path, so tests are isolated
and concurrent sessions behave like they do against a real database file.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from shortener.core.setting import Settings
from shortener.db.session import Database
from shortener.main import create_app
from shortener.services.identity_store import IdentityStore


@pytest.fixture
def database_path(tmp_path) -> Path:
    return tmp_path / "test.db"


@pytest.fixture
def database_url(database_path) -> str:
    return f"sqlite+aiosqlite:///{database_path}"


@pytest.fixture
def write_lock(database_path):
    """
    Context manager holding the SQLite write lock from an outside
    connection, the way a long-running writer would.
    """
    @contextmanager
    def hold():
        holder = sqlite3.connect(database_path, isolation_level=None)
        try:
            holder.execute("BEGIN IMMEDIATE")
            yield
            holder.execute("ROLLBACK")
        finally:
            holder.close()

    return hold


@pytest_asyncio.fixture
async def database(database_url):
    """Fresh schema, disposed after the test."""
    db = Database(database_url, timeout=10.0)
    await db.create_all()
    try:
        yield db
    finally:
        await db.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.session() as db_session:
        yield db_session


@pytest_asyncio.fixture
async def alice(session):
    """A registered user."""
    return await IdentityStore(session).register("alice")


@pytest.fixture
def client(database_url):
    """
    Test client for an application bound to the per-test database.
    Entering the client runs the startup event (tables are created there).
    """
    app = create_app(Settings(DATABASE_URL=database_url, AUTO_CREATE_TABLES=True))
    with TestClient(app) as test_client:
        yield test_client
