"""
Popularity Ranking

Ranked, read-only view of URL records by click count. Kept apart from the
catalog so the ranking policy (default size, insertion-order tie-break)
lives in one place.
"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.setting import settings
from shortener.db.models import UrlRecord
from shortener.services.url_catalog import UrlCatalog


class PopularityRanker:

    def __init__(self, session: AsyncSession, default_limit: Optional[int] = None):
        self.catalog = UrlCatalog(session)
        self.default_limit = default_limit or settings.POPULAR_LIMIT

    async def top_urls(self, limit: Optional[int] = None) -> List[UrlRecord]:
        """Most clicked records first, at most `limit` (default 10)."""
        return await self.catalog.top_by_clicks(self.default_limit if limit is None else limit)
