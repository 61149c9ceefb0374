"""
SQLite Database Adapter

This module implements the DatabaseAdapter interface for SQLite.
All SQLite-specific configuration and behavior is encapsulated here.

Key characteristics:
- File-based (single .db file)
- No server required
- Single writer at a time: concurrent writers wait on the database lock
  for up to `timeout` seconds, after which the driver raises
  OperationalError ("database is locked")
"""

from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from shortener.db.interface import DatabaseAdapter


class SQLiteAdapter(DatabaseAdapter):
    """
    SQLite database adapter implementation.

    Connections run in WAL mode so readers never block the writer, and
    every connection waits on a busy database instead of failing at once.
    """

    def __init__(self, timeout: float = 5.0):
        self.timeout = timeout

    def create_engine(self, database_url: str, **kwargs) -> AsyncEngine:
        """
        Create SQLite async engine with appropriate configuration.

        SQLite-specific configuration:
        - NullPool: one connection per session, closed when the session ends
        - check_same_thread=False: Required for async SQLite operations
        - timeout: seconds to wait for the write lock

        Args:
            database_url: SQLite connection string (sqlite+aiosqlite:///...)
            **kwargs: Additional engine options (merged with SQLite defaults)

        Returns:
            Configured AsyncEngine for SQLite
        """
        engine_kwargs = self.get_engine_kwargs()
        engine_kwargs.update(kwargs)

        engine = create_async_engine(
            database_url,
            poolclass=self.get_pool_class(),
            connect_args=self.get_connect_args(),
            **engine_kwargs
        )

        @event.listens_for(engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            self.configure_connection(dbapi_connection)

        return engine

    def get_pool_class(self) -> type[NullPool]:
        return NullPool

    def get_connect_args(self) -> dict[str, Any]:
        return {
            "check_same_thread": False,
            "timeout": self.timeout,
        }

    def get_engine_kwargs(self) -> dict[str, Any]:
        return {
            "echo": False  # Set to True only for SQL debugging in development
        }

    def configure_connection(self, dbapi_connection: Any) -> None:
        """
        Enable WAL journaling, the busy timeout and foreign key checks.
        """
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute(f"PRAGMA busy_timeout={int(self.timeout * 1000)}")
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()

    def get_dialect_name(self) -> str:
        return "sqlite"


def get_database_adapter(timeout: float = 5.0) -> DatabaseAdapter:
    """
    Factory function to get the database adapter.

    Returns SQLiteAdapter by default. To switch to PostgreSQL, create a
    PostgreSQLAdapter class and update this function.

    Args:
        timeout: Seconds a store call may wait on a locked database

    Returns:
        DatabaseAdapter instance
    """
    return SQLiteAdapter(timeout=timeout)
