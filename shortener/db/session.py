"""
Database Session Management

This module handles async database connections using SQLAlchemy's async engine.
Uses a database abstraction layer to support different database backends.

The store is an explicit handle rather than module state: the application
opens one `Database` at startup, keeps it on `app.state.database`, and
disposes it at shutdown. Request handlers get a session through the
`get_session` dependency.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel

from shortener.db import models  # noqa: F401  (registers tables on SQLModel.metadata)
from shortener.db.interface import DatabaseAdapter
from shortener.db.sqlite_adapter import get_database_adapter

logger = logging.getLogger(__name__)


class Database:
    """
    Handle on the durable store: one engine and its session factory.
    """

    def __init__(
        self,
        database_url: str,
        timeout: float = 5.0,
        adapter: Optional[DatabaseAdapter] = None
    ):
        self.database_url = database_url
        self.adapter = adapter or get_database_adapter(timeout=timeout)
        self.engine: AsyncEngine = self.adapter.create_engine(database_url)

        # expire_on_commit=False keeps ORM objects readable after commit
        self.session_maker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_all(self) -> None:
        """Create any missing tables."""
        async with self.engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.create_all)
        logger.info("Database schema ready (%s)", self.adapter.get_dialect_name())

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Open a session; commit on success, roll back on exception.
        """
        async with self.session_maker() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("Database connections closed")


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency function for FastAPI to get database session.

    Usage in FastAPI:
        @router.get("/endpoint")
        async def endpoint(session: AsyncSession = Depends(get_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
