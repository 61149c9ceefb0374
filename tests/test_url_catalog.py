"""
Tests for the URL catalog: idempotent creation, atomic visits and ranking.
"""

import asyncio

import pytest
from sqlalchemy import func, select

from shortener.core.exceptions import ConflictError
from shortener.db.models import ShortURL, UrlVisit
from shortener.services.url_catalog import UrlCatalog


async def count_rows(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestCreateOrGet:

    @pytest.mark.asyncio
    async def test_creates_record_with_zero_clicks(self, session, alice):
        record = await UrlCatalog(session).create_or_get("https://example.com/a", "0a1b2c3d", alice.id)

        assert record.short_code == "0a1b2c3d"
        assert record.original_url == "https://example.com/a"
        assert record.owner_id == alice.id
        assert record.click_count == 0
        assert record.visit_timestamps == []
        assert record.created_at is not None

    @pytest.mark.asyncio
    async def test_is_idempotent(self, session, alice):
        catalog = UrlCatalog(session)

        first = await catalog.create_or_get("https://example.com/a", "0a1b2c3d", alice.id)
        await catalog.record_visit("0a1b2c3d")
        second = await catalog.create_or_get("https://example.com/a", "0a1b2c3d", alice.id)

        assert second.id == first.id
        assert second.click_count == 1
        assert await count_rows(session, ShortURL) == 1

    @pytest.mark.asyncio
    async def test_existing_code_returned_unchanged_for_other_url(self, session, alice):
        catalog = UrlCatalog(session)

        await catalog.create_or_get("https://example.com/a", "0a1b2c3d", alice.id)
        record = await catalog.create_or_get("https://example.com/other", "0a1b2c3d", alice.id)

        assert record.original_url == "https://example.com/a"

    @pytest.mark.asyncio
    async def test_lost_insert_race_raises_conflict(self, database, alice):
        async with database.session() as rival_session:
            await UrlCatalog(rival_session).create_or_get("https://example.com/a", "0a1b2c3d", alice.id)

        class StaleCatalog(UrlCatalog):
            async def find_by_code(self, short_code):
                return None

        async with database.session() as session:
            with pytest.raises(ConflictError):
                await StaleCatalog(session).create_or_get("https://example.com/a", "0a1b2c3d", alice.id)

            assert await count_rows(session, ShortURL) == 1


class TestRecordVisit:

    @pytest.mark.asyncio
    async def test_increments_and_appends_timestamp(self, session, alice):
        catalog = UrlCatalog(session)
        await catalog.create_or_get("https://example.com/a", "0a1b2c3d", alice.id)

        first = await catalog.record_visit("0a1b2c3d")
        second = await catalog.record_visit("0a1b2c3d")

        assert first.click_count == 1
        assert len(first.visit_timestamps) == 1
        assert second.click_count == 2
        assert len(second.visit_timestamps) == 2
        assert second.visit_timestamps[0] <= second.visit_timestamps[1]

    @pytest.mark.asyncio
    async def test_unknown_code_is_not_found_and_mutates_nothing(self, session, alice):
        catalog = UrlCatalog(session)
        await catalog.create_or_get("https://example.com/a", "0a1b2c3d", alice.id)

        assert await catalog.record_visit("ffffffff") is None

        record = await catalog.find_by_code("0a1b2c3d")
        assert record.click_count == 0
        assert await count_rows(session, UrlVisit) == 0

    @pytest.mark.asyncio
    async def test_concurrent_visits_are_not_lost(self, database, alice):
        async with database.session() as session:
            await UrlCatalog(session).create_or_get("https://example.com/a", "0a1b2c3d", alice.id)

        visits = 25

        async def visit():
            async with database.session() as visit_session:
                return await UrlCatalog(visit_session).record_visit("0a1b2c3d")

        results = await asyncio.gather(*(visit() for _ in range(visits)))

        assert all(result is not None for result in results)
        assert sorted(result.click_count for result in results) == list(range(1, visits + 1))

        async with database.session() as session:
            record = await UrlCatalog(session).find_by_code("0a1b2c3d")

        assert record.click_count == visits
        assert len(record.visit_timestamps) == visits


class TestTopByClicks:

    async def _seed(self, catalog, owner_id, clicks):
        codes = []
        for index, count in enumerate(clicks):
            code = f"{index:08x}"
            await catalog.create_or_get(f"https://example.com/{index}", code, owner_id)
            for _ in range(count):
                await catalog.record_visit(code)
            codes.append(code)
        return codes

    @pytest.mark.asyncio
    async def test_ties_keep_insertion_order(self, session, alice):
        catalog = UrlCatalog(session)
        codes = await self._seed(catalog, alice.id, [5, 3, 5, 1])

        top = await catalog.top_by_clicks(3)

        assert [record.short_code for record in top] == [codes[0], codes[2], codes[1]]
        assert [record.click_count for record in top] == [5, 5, 3]
        assert all(len(record.visit_timestamps) == record.click_count for record in top)

    @pytest.mark.asyncio
    async def test_limit_larger_than_catalog(self, session, alice):
        catalog = UrlCatalog(session)
        await self._seed(catalog, alice.id, [0, 2])

        top = await catalog.top_by_clicks(10)
        assert [record.click_count for record in top] == [2, 0]

    @pytest.mark.asyncio
    async def test_non_positive_limit(self, session, alice):
        catalog = UrlCatalog(session)
        await self._seed(catalog, alice.id, [1])

        assert await catalog.top_by_clicks(0) == []
