"""
URL Shortening Service

This service handles the shorten flow:
- Validating the submitted URL
- Deriving candidate codes from the URL and the owner's credential
- Storing the record, or returning the one already stored

Design Decisions:
- The URL is hashed exactly as submitted, so re-submitting the same string
  with the same credential always maps to the same code
- A stored record under the candidate code is only reused when it holds
  the same URL for the same owner; anything else is a genuine hash
  collision and the next salted candidate is tried
- An insert race (ConflictError) is retried once for the same candidate
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import ConflictError
from shortener.core.setting import settings
from shortener.core.validators import require_original_url
from shortener.db.models import UrlRecord, User
from shortener.services.code_deriver import CodeDeriver
from shortener.services.url_catalog import UrlCatalog

logger = logging.getLogger(__name__)


class URLShorteningService:
    """
    Core business logic for URL shortening.

    Separated from API layer for testability and maintainability.
    """

    def __init__(
        self,
        session: AsyncSession,
        deriver: Optional[CodeDeriver] = None,
        catalog: Optional[UrlCatalog] = None
    ):
        """
        Args:
            session: Database session
            deriver: Code derivation policy (configured defaults if omitted)
            catalog: URL catalog bound to the same session
        """
        self.session = session
        self.deriver = deriver or CodeDeriver()
        self.catalog = catalog or UrlCatalog(session)

    async def shorten(self, original_url: Optional[str], owner: User) -> UrlRecord:
        """
        Create a short URL or return the existing one for this URL and owner.

        Args:
            original_url: The long URL to shorten
            owner: The authenticated user

        Returns:
            UrlRecord holding the short code

        Raises:
            ValidationError: If the URL is missing or malformed
            ConflictError: If no candidate code is free of collisions
            StoreUnavailableError: If the database fails
        """
        original_url = require_original_url(original_url, settings.MAX_URL_LENGTH)

        # Read once: a rollback during a retry expires ORM instances
        owner_id, api_token = owner.id, owner.api_token

        for attempt, short_code in enumerate(self.deriver.candidates(original_url, api_token)):
            record = await self._create_or_get_with_retry(original_url, short_code, owner_id)

            if record.original_url == original_url and record.owner_id == owner_id:
                return record

            logger.warning(
                f"Hash collision on short code {short_code} (attempt {attempt}): "
                f"held by record {record.id}, trying next candidate"
            )

        raise ConflictError(
            f"No free short code after {self.deriver.max_attempts} candidates"
        )

    async def _create_or_get_with_retry(
        self,
        original_url: str,
        short_code: str,
        owner_id: int
    ) -> UrlRecord:
        try:
            return await self.catalog.create_or_get(original_url, short_code, owner_id)
        except ConflictError:
            logger.info(f"Insert race on short code {short_code}, retrying lookup")
            return await self.catalog.create_or_get(original_url, short_code, owner_id)
