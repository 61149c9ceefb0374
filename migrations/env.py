"""
Alembic Environment Configuration

This file configures Alembic to work with our async SQLModel/SQLAlchemy setup.
It handles:
- Database connection from settings
- Model imports for autogenerate
- Sync engine creation for migrations (Alembic uses sync drivers)
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import create_engine, pool
from sqlalchemy.engine import Connection
from sqlmodel import SQLModel

from shortener.core.setting import settings
from shortener.db import models  # noqa: F401  (registers tables on SQLModel.metadata)

# this is the Alembic Config object
config = context.config


def sync_database_url(database_url: str) -> str:
    """
    Convert the application's async URL to the sync driver Alembic uses.

    - sqlite+aiosqlite:///absolute/path -> sqlite:///absolute/path
    - sqlite+aiosqlite:///./relative.db -> sqlite:///./relative.db
    """
    if database_url.startswith("sqlite+aiosqlite://"):
        return database_url.replace("sqlite+aiosqlite://", "sqlite://", 1)
    return database_url


database_url = sync_database_url(settings.DATABASE_URL)
config.set_main_option("sqlalchemy.url", database_url)

# Interpret the config file for Python logging.
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = SQLModel.metadata


def run_migrations_offline() -> None:
    """Run migrations in 'offline' mode.

    Emits the SQL to the script output instead of executing it, so no
    DBAPI is needed.
    """
    context.configure(
        url=database_url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection: Connection) -> None:
    """Run migrations with a connection."""
    context.configure(
        connection=connection,
        target_metadata=target_metadata,
        render_as_batch=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Run migrations in 'online' mode."""
    connectable = create_engine(database_url, poolclass=pool.NullPool)

    with connectable.connect() as connection:
        do_run_migrations(connection)

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
