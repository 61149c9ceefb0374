"""
Redirect Service

This service handles URL redirection logic.

Design Decisions:
- The visit is counted synchronously and committed before the target URL
  is handed back, so a crash after the response cannot undercount
- Unknown codes raise ShortCodeNotFoundError and change nothing
"""

from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import ShortCodeNotFoundError
from shortener.services.url_catalog import UrlCatalog


class RedirectService:
    """
    Service for handling URL redirections.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.catalog = UrlCatalog(session)

    async def resolve(self, short_code: str) -> str:
        """
        Record a visit and return the original URL for redirection.

        Raises:
            ShortCodeNotFoundError: If the short code does not exist
            StoreUnavailableError: If the database fails
        """
        record = await self.catalog.record_visit(short_code)
        if record is None:
            raise ShortCodeNotFoundError(short_code)
        return record.original_url
