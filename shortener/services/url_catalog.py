"""
URL Catalog

Durable mapping from short code to URL record.

Design Decisions:
- Uniqueness of short_code is enforced by the unique index; a losing
  concurrent insert gets IntegrityError, reported as ConflictError
- Visits use a database-level increment (UPDATE ... SET click_count =
  click_count + 1) and insert the visit row in the same transaction, so
  click_count always equals the number of visit rows and concurrent
  visits cannot lose updates
- Every read is a single statement joining the record with its visits,
  so a returned snapshot is internally consistent
"""

import logging
from typing import List, Optional

from sqlalchemy import Select, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from shortener.core.exceptions import ConflictError
from shortener.db.errors import store_errors
from shortener.db.models import CredentialUsage, ShortURL, UrlRecord, UrlVisit

logger = logging.getLogger(__name__)


def _record_statement() -> Select:
    return (
        select(
            ShortURL.id,
            ShortURL.original_url,
            ShortURL.short_code,
            ShortURL.click_count,
            ShortURL.created_at,
            ShortURL.owner_id,
            UrlVisit.visited_at,
        )
        .outerjoin(UrlVisit, UrlVisit.short_url_id == ShortURL.id)
    )


def _collect_records(rows) -> List[UrlRecord]:
    """Fold (record columns..., visited_at) rows into UrlRecords, keeping row order."""
    records: dict[int, UrlRecord] = {}
    for row in rows:
        record = records.get(row.id)
        if record is None:
            record = UrlRecord(
                id=row.id,
                original_url=row.original_url,
                short_code=row.short_code,
                click_count=row.click_count,
                created_at=row.created_at,
                owner_id=row.owner_id,
            )
            records[row.id] = record
        if row.visited_at is not None:
            record.visit_timestamps.append(row.visited_at)
    return list(records.values())


class UrlCatalog:
    """
    Store operations on short URL records.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_code(self, short_code: str) -> Optional[UrlRecord]:
        """
        Retrieve the record for a short code.

        Returns:
            UrlRecord if found, None otherwise
        """
        async with store_errors(self.session, "look up short code"):
            return await self._fetch(short_code)

    async def _fetch(self, short_code: str) -> Optional[UrlRecord]:
        statement = (
            _record_statement()
            .where(ShortURL.short_code == short_code)
            .order_by(UrlVisit.id)
        )
        result = await self.session.execute(statement)
        records = _collect_records(result.all())
        return records[0] if records else None

    async def create_or_get(
        self,
        original_url: str,
        short_code: str,
        owner_id: int
    ) -> UrlRecord:
        """
        Return the record stored under short_code, creating it if absent.

        An existing record is returned unchanged, whatever URL it holds;
        callers compare original_url to tell re-submission from collision.
        Creating a record also appends to the owner's credential history.

        Raises:
            ConflictError: If a concurrent insert took the code first
            StoreUnavailableError: If the database fails
        """
        existing = await self.find_by_code(short_code)
        if existing:
            return existing

        short_url = ShortURL(
            original_url=original_url,
            short_code=short_code,
            click_count=0,
            owner_id=owner_id
        )

        async with store_errors(self.session, "create short URL"):
            try:
                self.session.add(short_url)
                self.session.add(CredentialUsage(user_id=owner_id))
                await self.session.flush()
                await self.session.commit()
            except IntegrityError as e:
                await self.session.rollback()
                raise ConflictError(
                    f"Short code '{short_code}' was taken by a concurrent insert",
                    original_error=e
                )

        logger.info(f"Created short code {short_code} for owner {owner_id}")
        return UrlRecord.from_row(short_url, [])

    async def record_visit(self, short_code: str) -> Optional[UrlRecord]:
        """
        Count one visit: increment click_count and append a visit timestamp.

        Both writes are committed together before this returns. An unknown
        code changes nothing.

        Returns:
            The updated UrlRecord, or None if the code does not exist
        """
        async with store_errors(self.session, "record visit"):
            statement = (
                update(ShortURL)
                .where(ShortURL.short_code == short_code)
                .values(click_count=ShortURL.click_count + 1)
                .returning(ShortURL.id)
                .execution_options(synchronize_session=False)
            )
            result = await self.session.execute(statement)
            short_url_id = result.scalar_one_or_none()

            if short_url_id is None:
                await self.session.rollback()
                return None

            self.session.add(UrlVisit(short_url_id=short_url_id))
            await self.session.flush()

            # Read back inside the write transaction so the snapshot
            # reflects exactly this visit.
            record = await self._fetch(short_code)
            await self.session.commit()

        return record

    async def top_by_clicks(self, limit: int) -> List[UrlRecord]:
        """
        Records with the most clicks, most clicked first.

        Ties keep insertion order (lower id first).
        """
        if limit <= 0:
            return []

        top_ids = (
            select(ShortURL.id)
            .order_by(ShortURL.click_count.desc(), ShortURL.id)
            .limit(limit)
            .subquery()
        )
        statement = (
            _record_statement()
            .join(top_ids, top_ids.c.id == ShortURL.id)
            .order_by(ShortURL.click_count.desc(), ShortURL.id, UrlVisit.id)
        )

        async with store_errors(self.session, "rank short URLs"):
            result = await self.session.execute(statement)
            return _collect_records(result.all())
