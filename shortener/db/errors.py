"""
Translation of driver errors into the service error taxonomy.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import DBAPIError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)

# SQLite reports an expired busy_timeout as "database is locked"
TRANSIENT_MESSAGES = ("database is locked", "database table is locked", "busy", "timeout", "timed out")


def is_transient(error: SQLAlchemyError) -> bool:
    """True when retrying the same call may succeed."""
    if isinstance(error, DBAPIError) and error.connection_invalidated:
        return True
    if isinstance(error, OperationalError):
        message = str(error.orig).lower()
        return any(marker in message for marker in TRANSIENT_MESSAGES)
    return False


@asynccontextmanager
async def store_errors(session: AsyncSession, action: str) -> AsyncIterator[None]:
    """
    Roll back and re-raise store failures as StoreUnavailableError.

    Lock timeouts and dropped connections are marked retriable; anything
    else coming out of SQLAlchemy (missing tables, constraint errors that
    callers did not handle) is not. Exceptions that are not store errors
    pass through untouched.
    """
    try:
        yield
    except SQLAlchemyError as e:
        await session.rollback()
        retriable = is_transient(e)
        if retriable:
            logger.warning(f"Store unavailable while trying to {action}: {e}")
        else:
            logger.error(f"Store error while trying to {action}: {e}", exc_info=True)
        raise StoreUnavailableError(f"Failed to {action}", original_error=e, retriable=retriable)
