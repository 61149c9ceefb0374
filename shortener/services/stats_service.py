"""
Statistics Service

This service handles retrieving statistics for short URLs.

Unlike a redirect, reading statistics never counts as a visit.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import ShortCodeNotFoundError
from shortener.db.models import UrlRecord
from shortener.services.url_catalog import UrlCatalog


class StatsService:
    """
    Service for retrieving URL statistics.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.catalog = UrlCatalog(session)

    async def get_stats(self, short_code: str) -> UrlRecord:
        """
        Get the record for a short URL, including its visit timestamps.

        Raises:
            ShortCodeNotFoundError: If the short code does not exist
        """
        record = await self.catalog.find_by_code(short_code)
        if record is None:
            raise ShortCodeNotFoundError(short_code)
        return record
