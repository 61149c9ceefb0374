"""
Owner Lookup Service

Answers "who created this short code?" by composing a catalog lookup with
a reverse user lookup. The owner's API credential is never part of the
answer.
"""

from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import ShortCodeNotFoundError, UserNotFoundError
from shortener.services.identity_store import IdentityStore
from shortener.services.url_catalog import UrlCatalog


@dataclass(frozen=True)
class OwnerInfo:
    user_id: int
    display_name: str
    short_code: str
    url_created_at: datetime


class OwnerLookupService:

    def __init__(self, session: AsyncSession):
        self.catalog = UrlCatalog(session)
        self.identity = IdentityStore(session)

    async def get_owner(self, short_code: str) -> OwnerInfo:
        """
        Raises:
            ShortCodeNotFoundError: If the short code does not exist
            UserNotFoundError: If the owning user no longer resolves
        """
        record = await self.catalog.find_by_code(short_code)
        if record is None:
            raise ShortCodeNotFoundError(short_code)

        user = await self.identity.get_user(record.owner_id)
        if user is None:
            raise UserNotFoundError(record.owner_id)

        return OwnerInfo(
            user_id=user.id,
            display_name=user.display_name,
            short_code=record.short_code,
            url_created_at=record.created_at,
        )
