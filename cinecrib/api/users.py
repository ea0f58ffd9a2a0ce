"""Endpoints for the logged-in user: saved preferences and watchlist."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cinecrib.auth import get_current_user
from cinecrib.db import get_db
from cinecrib.db.crud import (
    add_to_watchlist,
    get_preferences,
    get_watchlist,
    remove_from_watchlist,
    update_preferences,
)
from cinecrib.models.schemas import (
    MessageResponse,
    PreferencesResponse,
    PreferencesUpdate,
    WatchlistAddRequest,
    WatchlistResponse,
)
from cinecrib.models.user import User

router = APIRouter()


@router.get("/preferences", response_model=PreferencesResponse)
async def read_preferences(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> PreferencesResponse:
    """Get saved default filters."""
    preferences = await get_preferences(db, user.uid)
    await db.commit()
    return PreferencesResponse(preferences=preferences)


@router.put("/preferences", response_model=MessageResponse)
async def write_preferences(
    data: PreferencesUpdate,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Replace saved default filters."""
    await update_preferences(db, user.uid, data)
    await db.commit()
    return MessageResponse(message="Preferences updated successfully")


@router.get("/watchlist", response_model=WatchlistResponse)
async def read_watchlist(
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> WatchlistResponse:
    """Get the watchlist, newest first."""
    return WatchlistResponse(watchlist=await get_watchlist(db, user.uid))


@router.post("/watchlist", response_model=MessageResponse, status_code=201)
async def add_watchlist_entry(
    data: WatchlistAddRequest,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Add content to the watchlist."""
    await add_to_watchlist(db, user.uid, data.content_uid)
    await db.commit()
    return MessageResponse(message="Content added to watchlist successfully")


@router.delete("/watchlist/{content_uid}", response_model=MessageResponse)
async def remove_watchlist_entry(
    content_uid: str,
    user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> MessageResponse:
    """Remove content from the watchlist."""
    await remove_from_watchlist(db, user.uid, content_uid)
    await db.commit()
    return MessageResponse(message="Content removed from watchlist successfully")
