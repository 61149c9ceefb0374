"""
Tests for the service layer: shortening, collisions, redirects, ranking,
owner lookup and statistics.
"""

import pytest
from sqlalchemy import func, select

from shortener.core.exceptions import (
    ConflictError,
    InvalidURLError,
    ShortCodeNotFoundError,
    ValidationError,
)
from shortener.db.models import ShortURL, UrlVisit
from shortener.services.code_deriver import CodeDeriver, derive_short_code
from shortener.services.identity_store import IdentityStore
from shortener.services.owner_service import OwnerLookupService
from shortener.services.popularity_service import PopularityRanker
from shortener.services.redirect_service import RedirectService
from shortener.services.stats_service import StatsService
from shortener.services.url_catalog import UrlCatalog
from shortener.services.url_service import URLShorteningService

URL = "https://example.com/a"


async def count_rows(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


class TestShorten:

    @pytest.mark.asyncio
    async def test_code_is_reference_derivation(self, session, alice):
        record = await URLShorteningService(session).shorten(URL, alice)

        assert record.short_code == derive_short_code(URL, alice.api_token)
        assert record.original_url == URL
        assert record.owner_id == alice.id
        assert record.click_count == 0

    @pytest.mark.asyncio
    async def test_resubmission_returns_existing_code(self, session, alice):
        service = URLShorteningService(session)

        first = await service.shorten(URL, alice)
        second = await service.shorten(URL, alice)

        assert second.id == first.id
        assert second.short_code == first.short_code
        assert await count_rows(session, ShortURL) == 1

    @pytest.mark.asyncio
    async def test_same_url_different_users_get_different_codes(self, session, alice):
        bob = await IdentityStore(session).register("bob")
        service = URLShorteningService(session)

        alice_record = await service.shorten(URL, alice)
        bob_record = await service.shorten(URL, bob)

        assert alice_record.short_code != bob_record.short_code
        assert await count_rows(session, ShortURL) == 2

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad_url", [None, "", "   "])
    async def test_missing_url(self, session, alice, bad_url):
        with pytest.raises(ValidationError):
            await URLShorteningService(session).shorten(bad_url, alice)

    @pytest.mark.asyncio
    async def test_malformed_url(self, session, alice):
        with pytest.raises(InvalidURLError):
            await URLShorteningService(session).shorten("not-a-url", alice)
        assert await count_rows(session, ShortURL) == 0


class TestCollisions:

    @pytest.mark.asyncio
    async def test_hash_collision_moves_to_salted_candidate(self, session, alice):
        catalog = UrlCatalog(session)
        reference_code = derive_short_code(URL, alice.api_token)
        await catalog.create_or_get("https://example.com/squatter", reference_code, alice.id)

        service = URLShorteningService(session)
        record = await service.shorten(URL, alice)

        assert record.short_code == derive_short_code(URL, alice.api_token, attempt=1)
        assert record.original_url == URL

        squatter = await catalog.find_by_code(reference_code)
        assert squatter.original_url == "https://example.com/squatter"

        again = await service.shorten(URL, alice)
        assert again.id == record.id

    @pytest.mark.asyncio
    async def test_exhausted_candidates_raise_conflict(self, session, alice):
        deriver = CodeDeriver(max_attempts=2)
        catalog = UrlCatalog(session)
        for index, code in enumerate(deriver.candidates(URL, alice.api_token)):
            await catalog.create_or_get(f"https://example.com/squatter{index}", code, alice.id)

        with pytest.raises(ConflictError):
            await URLShorteningService(session, deriver=deriver).shorten(URL, alice)

    @pytest.mark.asyncio
    async def test_insert_race_is_retried_once(self, database, session, alice):
        alice_id = alice.id
        code = derive_short_code(URL, alice.api_token)

        class RacingCatalog(UrlCatalog):
            lookups = 0

            async def find_by_code(self, short_code):
                self.lookups += 1
                if self.lookups == 1:
                    # A concurrent request stores the same code in between
                    async with database.session() as rival_session:
                        await UrlCatalog(rival_session).create_or_get(URL, short_code, alice_id)
                    return None
                return await super().find_by_code(short_code)

        catalog = RacingCatalog(session)
        record = await URLShorteningService(session, catalog=catalog).shorten(URL, alice)

        assert record.short_code == code
        assert record.owner_id == alice_id
        assert catalog.lookups == 2
        assert await count_rows(session, ShortURL) == 1


class TestRedirect:

    @pytest.mark.asyncio
    async def test_resolve_records_visit_before_returning(self, session, alice):
        record = await URLShorteningService(session).shorten(URL, alice)

        target = await RedirectService(session).resolve(record.short_code)

        assert target == URL
        stored = await UrlCatalog(session).find_by_code(record.short_code)
        assert stored.click_count == 1
        assert len(stored.visit_timestamps) == 1

    @pytest.mark.asyncio
    async def test_unknown_code(self, session, alice):
        await URLShorteningService(session).shorten(URL, alice)

        with pytest.raises(ShortCodeNotFoundError):
            await RedirectService(session).resolve("ffffffff")

        assert await count_rows(session, UrlVisit) == 0


class TestPopularity:

    @pytest.mark.asyncio
    async def test_default_limit_is_ten(self, session, alice):
        service = URLShorteningService(session)
        for index in range(12):
            await service.shorten(f"https://example.com/{index}", alice)

        ranker = PopularityRanker(session)
        assert len(await ranker.top_urls()) == 10
        assert len(await ranker.top_urls(3)) == 3

    @pytest.mark.asyncio
    async def test_most_clicked_first(self, session, alice):
        service = URLShorteningService(session)
        redirect = RedirectService(session)
        quiet = await service.shorten("https://example.com/quiet", alice)
        busy = await service.shorten("https://example.com/busy", alice)
        for _ in range(3):
            await redirect.resolve(busy.short_code)

        top = await PopularityRanker(session).top_urls()

        assert [record.short_code for record in top] == [busy.short_code, quiet.short_code]


class TestOwnerAndStats:

    @pytest.mark.asyncio
    async def test_owner_lookup(self, session, alice):
        record = await URLShorteningService(session).shorten(URL, alice)

        owner = await OwnerLookupService(session).get_owner(record.short_code)

        assert owner.user_id == alice.id
        assert owner.display_name == "alice"
        assert owner.short_code == record.short_code

    @pytest.mark.asyncio
    async def test_owner_lookup_unknown_code(self, session, alice):
        with pytest.raises(ShortCodeNotFoundError):
            await OwnerLookupService(session).get_owner("ffffffff")

    @pytest.mark.asyncio
    async def test_stats_do_not_count_as_visits(self, session, alice):
        record = await URLShorteningService(session).shorten(URL, alice)
        stats = StatsService(session)

        await stats.get_stats(record.short_code)
        result = await stats.get_stats(record.short_code)

        assert result.click_count == 0
        assert result.visit_timestamps == []

    @pytest.mark.asyncio
    async def test_stats_unknown_code(self, session, alice):
        with pytest.raises(ShortCodeNotFoundError):
            await StatsService(session).get_stats("ffffffff")
