"""
Database module with abstraction layer.

This module provides:
- DatabaseAdapter interface: Abstract base class for database implementations
- SQLiteAdapter: SQLite-specific implementation (default)
- Database: the explicit store handle (engine + session factory)
"""

from shortener.db.interface import DatabaseAdapter
from shortener.db.session import Database, get_session

__all__ = [
    "Database",
    "DatabaseAdapter",
    "get_session",
]
