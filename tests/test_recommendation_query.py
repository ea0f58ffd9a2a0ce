"""Tests for the recommendation query builder and executor."""

import math
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from cinecrib.db.database import begin_read_snapshot
from cinecrib.exceptions import StorageError
from cinecrib.models.content import Content, ContentType
from cinecrib.models.schemas import RecommendationRequest
from cinecrib.services.recommendations import (
    FilterSpec,
    RecommendationQuery,
    build_count_query,
    build_filter_conditions,
    build_page_query,
)


def spec_from(**fields) -> FilterSpec:
    return FilterSpec.from_request(RecommendationRequest(**fields))


async def recommend(db: AsyncSession, **fields):
    return await RecommendationQuery(db).execute(spec_from(**fields))


def uids(page) -> list[str]:
    return [item.uid for item in page.items]


class TestScenarios:
    """End-to-end filter scenarios against small catalogs."""

    @pytest.mark.asyncio
    async def test_kind_rating_and_genre(self, db_session, catalog):
        """A movie rated 8.8 matches; a 9.0 series is excluded by kind."""
        catalog.content("movie_match", imdb_rating=8.8, rotten_tomatoes_score=80, genres=["genre_scifi"])
        catalog.content(
            "series_other",
            content_type=ContentType.TV_SHOW,
            imdb_rating=9.0,
            rotten_tomatoes_score=80,
            genres=["genre_scifi"],
        )
        await catalog.commit()

        page = await recommend(
            db_session, preferred_content_type="movie", min_rating=8.5, genre_uids=["genre_scifi"]
        )

        assert page.total_results == 1
        assert uids(page) == ["movie_match"]

    @pytest.mark.asyncio
    async def test_excluded_only_service(self, db_session, catalog):
        """Everything available only on the excluded service leaves nothing."""
        catalog.content("a", services=["service_x"])
        catalog.content("b", services=["service_x"])
        await catalog.commit()

        page = await recommend(db_session, excluded_service_uids=["service_x"])

        assert page.total_results == 0
        assert page.items == []

    @pytest.mark.asyncio
    async def test_short_duration(self, db_session, catalog):
        catalog.content("short_movie", duration_minutes=45)
        catalog.content("feature_movie", duration_minutes=90)
        await catalog.commit()

        page = await recommend(db_session, preferred_duration_category="short")

        assert uids(page) == ["short_movie"]

    @pytest.mark.asyncio
    async def test_contradictory_genres(self, db_session, catalog):
        catalog.content("a", genres=["genre_g1"])
        catalog.content("b", genres=["genre_g1", "genre_g2"])
        catalog.content("c", genres=["genre_g2"])
        await catalog.commit()

        page = await recommend(db_session, genre_uids=["genre_g1"], excluded_genre_uids=["genre_g1"])

        assert page.total_results == 0
        assert page.items == []


class TestPredicates:
    """Each filter criterion on its own."""

    @pytest.mark.asyncio
    async def test_no_filters_returns_everything(self, db_session, demo_catalog):
        page = await recommend(db_session)
        assert page.total_results == 3

    @pytest.mark.asyncio
    async def test_series_only(self, db_session, demo_catalog):
        page = await recommend(db_session, preferred_content_type="tv_show")
        assert uids(page) == ["content_the_office"]

    @pytest.mark.asyncio
    async def test_year_range_inclusive(self, db_session, catalog):
        catalog.content("y2009", release_year=2009)
        catalog.content("y2010", release_year=2010)
        catalog.content("y2012", release_year=2012)
        catalog.content("y2013", release_year=2013)
        catalog.content("no_year", release_year=None)
        await catalog.commit()

        page = await recommend(db_session, min_release_year=2010, max_release_year=2012)

        assert sorted(uids(page)) == ["y2010", "y2012"]

    @pytest.mark.asyncio
    async def test_rating_floor_is_or_across_scales(self, db_session, catalog):
        catalog.content("critic_only", imdb_rating=9.1, rotten_tomatoes_score=5)
        catalog.content("audience_only", imdb_rating=2.0, rotten_tomatoes_score=60)
        catalog.content("neither", imdb_rating=3.0, rotten_tomatoes_score=4)
        catalog.content("unrated")
        await catalog.commit()

        page = await recommend(db_session, min_rating=9.0)

        assert sorted(uids(page)) == ["audience_only", "critic_only"]

    @pytest.mark.asyncio
    async def test_zero_rating_floor_keeps_unrated(self, db_session, catalog):
        catalog.content("unrated")
        await catalog.commit()

        page = await recommend(db_session, min_rating=0)

        assert uids(page) == ["unrated"]

    @pytest.mark.asyncio
    async def test_parental_ratings(self, db_session, demo_catalog):
        page = await recommend(db_session, parental_rating_filter_json='["PG", "TV-14"]')
        assert sorted(uids(page)) == ["content_coco", "content_the_office"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "bucket, expected",
        [
            ("short", ["movie_59", "series_1"]),
            ("medium", ["movie_60", "movie_120", "series_2", "series_4"]),
            ("long", ["movie_121", "series_5"]),
        ],
    )
    async def test_duration_buckets(self, db_session, catalog, bucket, expected):
        for minutes in (59, 60, 120, 121):
            catalog.content(f"movie_{minutes}", duration_minutes=minutes)
        for seasons in (1, 2, 4, 5):
            catalog.content(
                f"series_{seasons}", content_type=ContentType.TV_SHOW, number_of_seasons=seasons
            )
        catalog.content("movie_unknown_runtime", duration_minutes=None, number_of_seasons=None)
        await catalog.commit()

        page = await recommend(db_session, preferred_duration_category=bucket)

        assert sorted(uids(page)) == sorted(expected)

    @pytest.mark.asyncio
    async def test_included_genres_any_of(self, db_session, demo_catalog):
        page = await recommend(db_session, genre_uids=["genre_comedy", "genre_scifi"])
        assert sorted(uids(page)) == ["content_inception", "content_the_office"]

    @pytest.mark.asyncio
    async def test_excluded_genres_drop_any_match(self, db_session, demo_catalog):
        page = await recommend(db_session, excluded_genre_uids=["genre_scifi"])
        assert sorted(uids(page)) == ["content_coco", "content_the_office"]

    @pytest.mark.asyncio
    async def test_services_use_availability_not_genres(self, db_session, demo_catalog):
        page = await recommend(db_session, streaming_service_uids=["service_netflix"])
        assert sorted(uids(page)) == ["content_coco", "content_inception"]

        page = await recommend(db_session, excluded_service_uids=["service_netflix"])
        assert uids(page) == ["content_the_office"]

    @pytest.mark.asyncio
    async def test_unknown_identifiers_match_nothing(self, db_session, demo_catalog):
        page = await recommend(db_session, genre_uids=["genre_does_not_exist"])
        assert page.total_results == 0

    @pytest.mark.asyncio
    async def test_mood_does_not_filter(self, db_session, demo_catalog):
        page = await recommend(db_session, mood_uid="mood_funny")
        assert page.total_results == 3


class TestJoinSemantics:
    """Items without genre or availability rows."""

    @pytest.mark.asyncio
    async def test_inclusion_drops_items_without_rows(self, db_session, catalog):
        catalog.content("tagged", genres=["genre_drama"], services=["service_netflix"])
        catalog.content("bare")
        await catalog.commit()

        by_genre = await recommend(db_session, genre_uids=["genre_drama"])
        by_service = await recommend(db_session, streaming_service_uids=["service_netflix"])

        assert uids(by_genre) == ["tagged"]
        assert uids(by_service) == ["tagged"]

    @pytest.mark.asyncio
    async def test_exclusion_keeps_items_without_rows(self, db_session, catalog):
        catalog.content("tagged", genres=["genre_drama"], services=["service_netflix"])
        catalog.content("bare")
        await catalog.commit()

        by_genre = await recommend(db_session, excluded_genre_uids=["genre_drama"])
        by_service = await recommend(db_session, excluded_service_uids=["service_netflix"])

        assert uids(by_genre) == ["bare"]
        assert uids(by_service) == ["bare"]

    @pytest.mark.asyncio
    async def test_multi_genre_item_not_duplicated(self, db_session, catalog):
        catalog.content(
            "multi",
            genres=["genre_a", "genre_b", "genre_c"],
            services=["service_x", "service_y"],
        )
        await catalog.commit()

        page = await recommend(
            db_session,
            genre_uids=["genre_a", "genre_b"],
            streaming_service_uids=["service_x", "service_y"],
        )

        assert page.total_results == 1
        assert uids(page) == ["multi"]


class TestResultAssembly:
    """Ordering, aggregation and pagination."""

    @pytest.mark.asyncio
    async def test_sort_order(self, db_session, catalog):
        catalog.content("b_tie", imdb_rating=7.0, rotten_tomatoes_score=90)
        catalog.content("a_tie", imdb_rating=7.0, rotten_tomatoes_score=90)
        catalog.content("critic_breaks_tie", imdb_rating=8.0, rotten_tomatoes_score=90)
        catalog.content("top", imdb_rating=5.0, rotten_tomatoes_score=99)
        catalog.content("unscored", imdb_rating=9.9)
        await catalog.commit()

        page = await recommend(db_session)

        assert uids(page) == ["top", "critic_breaks_tie", "a_tie", "b_tie", "unscored"]

    @pytest.mark.asyncio
    async def test_item_aggregates_genres_and_services(self, db_session, demo_catalog):
        page = await recommend(db_session, genre_uids=["genre_scifi"])
        item = page.items[0]

        assert item.uid == "content_inception"
        assert item.content_type == ContentType.MOVIE
        assert item.imdb_rating == 8.8
        assert item.main_cast == ["Lead Actor", "Supporting Actor"]
        assert [genre.name for genre in item.genres] == ["Drama", "Science Fiction"]
        assert [service.name for service in item.available_on_services] == ["Hulu", "Netflix"]
        netflix = item.available_on_services[1]
        assert netflix.service_uid == "service_netflix"
        assert netflix.watch_link == "https://watch.example/service_netflix/content_inception"
        assert netflix.logo_url == "https://logos.example/service_netflix.png"

    @pytest.mark.asyncio
    async def test_pages_cover_every_match_once(self, db_session, catalog):
        for i in range(11):
            # Heavy ties so only the uid tie-break keeps pages stable
            catalog.content(f"item_{i:02d}", imdb_rating=7.0, rotten_tomatoes_score=80 + i % 3)
        catalog.content("filtered_out", content_type=ContentType.TV_SHOW)
        await catalog.commit()

        first = await recommend(db_session, preferred_content_type="movie", page_size=4)
        pages = [first]
        for page_number in range(2, math.ceil(first.total_results / 4) + 1):
            pages.append(
                await recommend(
                    db_session, preferred_content_type="movie", page=page_number, page_size=4
                )
            )

        seen = [uid for page in pages for uid in uids(page)]
        assert first.total_results == 11
        assert first.total_pages == 3
        assert len(seen) == len(set(seen)) == 11
        assert all(page.total_results == 11 for page in pages)

    @pytest.mark.asyncio
    async def test_page_past_end(self, db_session, demo_catalog):
        page = await recommend(db_session, page=5, page_size=100)

        assert page.items == []
        assert page.total_results == 3
        assert page.page == 5
        assert page.page_size == 100

    @pytest.mark.asyncio
    async def test_repeated_calls_identical(self, db_session, demo_catalog):
        first = await recommend(db_session, min_rating=1, page_size=2)
        second = await recommend(db_session, min_rating=1, page_size=2)

        assert first == second

    @pytest.mark.asyncio
    async def test_total_matches_unpaginated_count(self, db_session, demo_catalog):
        spec = spec_from(streaming_service_uids=["service_hulu"], page_size=1)
        page = await RecommendationQuery(db_session).execute(spec)

        matching = select(Content.uid).where(*build_filter_conditions(spec))
        rows = await db_session.execute(select(func.count()).select_from(matching.subquery()))
        assert page.total_results == rows.scalar_one() == 2
        assert len(page.items) == 1


class TestParameterBinding:
    """Caller values never appear in SQL text."""

    def test_values_are_bound(self):
        label = "PG'; DROP TABLE content; --"
        spec = spec_from(
            parental_rating_filter_json=[label],
            genre_uids=["genre_drama"],
            min_rating=7.5,
        )

        for statement in (build_count_query(spec), build_page_query(spec)):
            sql = str(statement)
            assert label not in sql
            assert "genre_drama" not in sql
            assert "7.5" not in sql
            assert label in str(statement.compile().params)

    @pytest.mark.asyncio
    async def test_hostile_label_is_data(self, db_session, demo_catalog):
        page = await recommend(db_session, parental_rating_filter_json=["PG'; DELETE FROM content; --"])
        assert page.total_results == 0

        count = await db_session.execute(select(func.count()).select_from(Content))
        assert count.scalar_one() == 3


class TestStorageFailures:
    """Database errors surface as StorageError, never as partial results."""

    def _session(self, execute: AsyncMock) -> MagicMock:
        db = MagicMock(spec=AsyncSession)
        db.in_transaction.return_value = False
        db.get_bind.return_value.dialect.name = "sqlite"
        db.connection = AsyncMock()
        db.execute = execute
        return db

    @pytest.mark.asyncio
    async def test_count_failure(self):
        error = OperationalError("SELECT", {}, ConnectionError("connection lost"))
        db = self._session(AsyncMock(side_effect=error))

        with pytest.raises(StorageError) as exc_info:
            await RecommendationQuery(db).execute(spec_from())

        assert exc_info.value.__cause__ is error

    @pytest.mark.asyncio
    async def test_page_failure_after_count(self):
        count_result = MagicMock()
        count_result.scalar_one.return_value = 5
        error = OperationalError("SELECT", {}, TimeoutError("timed out"))
        db = self._session(AsyncMock(side_effect=[count_result, error]))

        with pytest.raises(StorageError):
            await RecommendationQuery(db).execute(spec_from())

    @pytest.mark.asyncio
    async def test_empty_count_skips_page_query(self):
        count_result = MagicMock()
        count_result.scalar_one.return_value = 0
        execute = AsyncMock(return_value=count_result)
        db = self._session(execute)

        page = await RecommendationQuery(db).execute(spec_from())

        assert page.total_results == 0
        assert page.items == []
        assert execute.await_count == 1

    @pytest.mark.asyncio
    async def test_snapshot_opened_before_queries(self):
        count_result = MagicMock()
        count_result.scalar_one.return_value = 0
        db = self._session(AsyncMock(return_value=count_result))

        await RecommendationQuery(db).execute(spec_from())

        db.connection.assert_awaited_once()


class TestReadSnapshot:
    """Count and page share one transaction opened before either query."""

    def _session(self, dialect: str, in_transaction: bool = False) -> MagicMock:
        db = MagicMock(spec=AsyncSession)
        db.in_transaction.return_value = in_transaction
        db.get_bind.return_value.dialect.name = dialect
        db.new = set()
        db.dirty = set()
        db.deleted = set()
        db.commit = AsyncMock()
        db.connection = AsyncMock()
        return db

    @pytest.mark.asyncio
    async def test_postgresql_uses_repeatable_read(self):
        db = self._session("postgresql")

        await begin_read_snapshot(db)

        db.connection.assert_awaited_once_with(
            execution_options={"isolation_level": "REPEATABLE READ"}
        )
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_sqlite_keeps_default_isolation(self):
        db = self._session("sqlite")

        await begin_read_snapshot(db)

        db.connection.assert_awaited_once_with()

    @pytest.mark.asyncio
    async def test_open_read_only_transaction_restarted(self):
        db = self._session("postgresql", in_transaction=True)

        await begin_read_snapshot(db)

        db.commit.assert_awaited_once()
        db.connection.assert_awaited_once_with(
            execution_options={"isolation_level": "REPEATABLE READ"}
        )

    @pytest.mark.asyncio
    async def test_transaction_with_pending_writes_left_alone(self):
        db = self._session("postgresql", in_transaction=True)
        db.new = {object()}

        await begin_read_snapshot(db)

        db.commit.assert_not_awaited()
        db.connection.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_execute_on_postgresql_opens_snapshot_first(self):
        db = self._session("postgresql")
        calls: list[str] = []
        count_result = MagicMock()
        count_result.scalar_one.return_value = 0

        async def connection(**kwargs):
            calls.append("connection")

        async def execute(statement):
            calls.append("execute")
            return count_result

        db.connection = AsyncMock(side_effect=connection)
        db.execute = AsyncMock(side_effect=execute)

        await RecommendationQuery(db).execute(spec_from())

        assert calls == ["connection", "execute"]
        db.connection.assert_awaited_once_with(
            execution_options={"isolation_level": "REPEATABLE READ"}
        )
