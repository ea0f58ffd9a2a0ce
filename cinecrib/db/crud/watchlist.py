"""CRUD operations for the watchlist."""

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cinecrib.db.crud.content import content_exists, is_on_watchlist
from cinecrib.exceptions import ConflictError, NotFoundError, ValidationError
from cinecrib.models.content import Content, ContentStreamingAvailability
from cinecrib.models.schemas import WatchlistItem
from cinecrib.models.user import WatchlistEntry


async def get_watchlist(db: AsyncSession, user_uid: str) -> list[WatchlistItem]:
    """Get a user's watchlist, most recently added first."""
    result = await db.execute(
        select(WatchlistEntry)
        .options(
            selectinload(WatchlistEntry.content).selectinload(Content.genres),
            selectinload(WatchlistEntry.content)
            .selectinload(Content.availability)
            .selectinload(ContentStreamingAvailability.service),
        )
        .where(WatchlistEntry.user_uid == user_uid)
        .order_by(WatchlistEntry.added_at.desc(), WatchlistEntry.uid)
    )
    return [
        WatchlistItem.from_content(entry.content, added_at=entry.added_at)
        for entry in result.scalars()
    ]


async def add_to_watchlist(
    db: AsyncSession, user_uid: str, content_uid: str | None
) -> WatchlistEntry:
    """Save a content item to the user's watchlist.

    Raises:
        ValidationError: if content_uid is missing.
        NotFoundError: if the content does not exist.
        ConflictError: if it is already on the watchlist.
    """
    if not content_uid:
        raise ValidationError("content_uid is required")

    if not await content_exists(db, content_uid):
        raise NotFoundError("Content not found")

    if await is_on_watchlist(db, user_uid, content_uid):
        raise ConflictError("Content already in watchlist")

    entry = WatchlistEntry(user_uid=user_uid, content_uid=content_uid)
    db.add(entry)
    try:
        await db.flush()
    except IntegrityError as e:
        await db.rollback()
        raise ConflictError("Content already in watchlist") from e
    return entry


async def remove_from_watchlist(db: AsyncSession, user_uid: str, content_uid: str) -> None:
    """Remove a content item from the user's watchlist.

    Raises:
        NotFoundError: if it was not on the watchlist.
    """
    result = await db.execute(
        delete(WatchlistEntry).where(
            WatchlistEntry.user_uid == user_uid,
            WatchlistEntry.content_uid == content_uid,
        )
    )
    if result.rowcount == 0:
        raise NotFoundError("Content not found in watchlist")
