"""Recommendation query builder and executor.

A ``FilterSpec`` becomes one list of SQL conditions, shared by the count query
and the page query so ``total_results`` always describes the rows a client
can page through. Genre and service membership are correlated EXISTS
subqueries rather than joins: content rows are never multiplied, inclusion
drops items without any matching row, and exclusion keeps items that have no
genre/availability rows at all.

Every value is a bound parameter (lists use expanding IN parameters).
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from sqlalchemy import ColumnElement, Select, and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cinecrib.constants import (
    MEDIUM_MOVIE_MAX_MINUTES,
    MEDIUM_SERIES_MAX_SEASONS,
    MEDIUM_SERIES_MIN_SEASONS,
    SHORT_MOVIE_MAX_MINUTES,
    SHORT_SERIES_SEASONS,
)
from cinecrib.db.database import begin_read_snapshot
from cinecrib.exceptions import StorageError
from cinecrib.models.content import (
    Content,
    ContentStreamingAvailability,
    ContentType,
    DurationCategory,
    content_genres,
)
from cinecrib.models.schemas import ContentItem
from cinecrib.services.recommendations.filters import FilterSpec

logger = logging.getLogger(__name__)

_is_movie = Content.content_type == ContentType.MOVIE
_is_series = Content.content_type == ContentType.TV_SHOW


@dataclass(frozen=True)
class RecommendationPage:
    """One page of recommendations and the total number of matches."""

    items: list[ContentItem]
    total_results: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return (self.total_results + self.page_size - 1) // self.page_size


def _duration_condition(category: DurationCategory) -> ColumnElement[bool] | None:
    """Runtime bucket for movies, season-count bucket for series."""
    if category == DurationCategory.SHORT:
        return or_(
            and_(_is_movie, Content.duration_minutes < SHORT_MOVIE_MAX_MINUTES),
            and_(_is_series, Content.number_of_seasons == SHORT_SERIES_SEASONS),
        )
    if category == DurationCategory.MEDIUM:
        return or_(
            and_(
                _is_movie,
                Content.duration_minutes.between(SHORT_MOVIE_MAX_MINUTES, MEDIUM_MOVIE_MAX_MINUTES),
            ),
            and_(
                _is_series,
                Content.number_of_seasons.between(
                    MEDIUM_SERIES_MIN_SEASONS, MEDIUM_SERIES_MAX_SEASONS
                ),
            ),
        )
    if category == DurationCategory.LONG:
        return or_(
            and_(_is_movie, Content.duration_minutes > MEDIUM_MOVIE_MAX_MINUTES),
            and_(_is_series, Content.number_of_seasons > MEDIUM_SERIES_MAX_SEASONS),
        )
    return None


def _has_genre_in(genre_uids: Sequence[str]) -> ColumnElement[bool]:
    return (
        select(content_genres.c.content_uid)
        .where(
            content_genres.c.content_uid == Content.uid,
            content_genres.c.genre_uid.in_(genre_uids),
        )
        .exists()
    )


def _available_on(service_uids: Sequence[str]) -> ColumnElement[bool]:
    return (
        select(ContentStreamingAvailability.content_uid)
        .where(
            ContentStreamingAvailability.content_uid == Content.uid,
            ContentStreamingAvailability.service_uid.in_(service_uids),
        )
        .exists()
    )


def build_filter_conditions(spec: FilterSpec) -> list[ColumnElement[bool]]:
    """Translate a FilterSpec into conditions to be AND-ed together."""
    conditions: list[ColumnElement[bool]] = [
        Content.release_year.between(spec.min_release_year, spec.max_release_year)
    ]

    if spec.content_type is not None:
        conditions.append(Content.content_type == spec.content_type)

    if spec.min_rating > 0:
        conditions.append(
            or_(
                Content.imdb_rating >= spec.min_rating,
                Content.rotten_tomatoes_score >= spec.min_rating,
            )
        )

    if spec.parental_ratings:
        conditions.append(Content.parental_rating.in_(spec.parental_ratings))

    duration = _duration_condition(spec.duration_category)
    if duration is not None:
        conditions.append(duration)

    if spec.genre_uids:
        conditions.append(_has_genre_in(spec.genre_uids))
    if spec.excluded_genre_uids:
        conditions.append(~_has_genre_in(spec.excluded_genre_uids))

    if spec.service_uids:
        conditions.append(_available_on(spec.service_uids))
    if spec.excluded_service_uids:
        conditions.append(~_available_on(spec.excluded_service_uids))

    return conditions


def build_count_query(spec: FilterSpec) -> Select:
    """COUNT(DISTINCT content.uid) over the filtered catalog."""
    return select(func.count(func.distinct(Content.uid))).where(*build_filter_conditions(spec))


def build_page_query(spec: FilterSpec) -> Select:
    """Filtered, sorted and paginated content rows with genres and services loaded.

    Audience score first, critic rating second, uid as the deterministic
    tie-break so pages never overlap.
    """
    return (
        select(Content)
        .options(
            selectinload(Content.genres),
            selectinload(Content.availability).selectinload(ContentStreamingAvailability.service),
        )
        .where(*build_filter_conditions(spec))
        .order_by(
            Content.rotten_tomatoes_score.desc().nullslast(),
            Content.imdb_rating.desc().nullslast(),
            Content.uid.asc(),
        )
        .offset(spec.offset)
        .limit(spec.page_size)
    )


class RecommendationQuery:
    """Runs the count and page queries for a FilterSpec on one session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def execute(self, spec: FilterSpec) -> RecommendationPage:
        """Count and fetch one page inside a single read transaction.

        Raises:
            StorageError: if either query fails. Nothing partial is returned.
        """
        try:
            await begin_read_snapshot(self.db)

            count_result = await self.db.execute(build_count_query(spec))
            total = count_result.scalar_one()

            rows: Sequence[Content] = []
            if spec.offset < total:
                page_result = await self.db.execute(build_page_query(spec))
                rows = page_result.scalars().all()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Recommendation query failed: {e}")
            raise StorageError("Content store unavailable, please retry later") from e

        logger.debug(
            f"Recommendations page={spec.page} size={spec.page_size}: "
            f"{len(rows)} of {total} matches"
        )

        return RecommendationPage(
            items=[ContentItem.from_content(content) for content in rows],
            total_results=total,
            page=spec.page,
            page_size=spec.page_size,
        )
