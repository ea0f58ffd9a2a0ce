"""CRUD operations for catalog content and lookup lists."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cinecrib.exceptions import NotFoundError
from cinecrib.models.content import Content, ContentStreamingAvailability, Genre, Mood, StreamingService
from cinecrib.models.schemas import GenreRead, MoodRead, StreamingServiceRead
from cinecrib.models.user import WatchlistEntry


async def get_content(db: AsyncSession, content_uid: str) -> Content:
    """Get one content item with genres and availability loaded.

    Raises:
        NotFoundError: if no such content exists.
    """
    result = await db.execute(
        select(Content)
        .options(
            selectinload(Content.genres),
            selectinload(Content.availability).selectinload(ContentStreamingAvailability.service),
        )
        .where(Content.uid == content_uid)
    )
    content = result.scalar_one_or_none()
    if content is None:
        raise NotFoundError("Content not found")
    return content


async def content_exists(db: AsyncSession, content_uid: str) -> bool:
    result = await db.execute(select(Content.uid).where(Content.uid == content_uid))
    return result.scalar_one_or_none() is not None


async def is_on_watchlist(db: AsyncSession, user_uid: str, content_uid: str) -> bool:
    """Check whether the user has saved this content."""
    result = await db.execute(
        select(
            select(WatchlistEntry.uid)
            .where(
                WatchlistEntry.user_uid == user_uid,
                WatchlistEntry.content_uid == content_uid,
            )
            .exists()
        )
    )
    return bool(result.scalar())


# Lookup lists return plain dicts so they can be cached as JSON


async def list_genres(db: AsyncSession) -> list[dict[str, Any]]:
    """All genres sorted by name."""
    result = await db.execute(select(Genre).order_by(Genre.name))
    return [GenreRead.model_validate(genre).model_dump() for genre in result.scalars()]


async def list_active_streaming_services(db: AsyncSession) -> list[dict[str, Any]]:
    """Active streaming services sorted by name."""
    result = await db.execute(
        select(StreamingService)
        .where(StreamingService.is_active.is_(True))
        .order_by(StreamingService.name)
    )
    return [
        StreamingServiceRead.model_validate(service).model_dump()
        for service in result.scalars()
    ]


async def list_moods(db: AsyncSession) -> list[dict[str, Any]]:
    """All moods sorted by name."""
    result = await db.execute(select(Mood).order_by(Mood.name))
    return [MoodRead.model_validate(mood).model_dump() for mood in result.scalars()]
