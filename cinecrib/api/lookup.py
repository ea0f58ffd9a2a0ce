"""Lookup lists for the preference screen (cached in Redis when available)."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cinecrib.db import get_db
from cinecrib.db.crud import list_active_streaming_services, list_genres, list_moods
from cinecrib.utils.cache import get_or_load_lookup

router = APIRouter()


@router.get("/streaming_services")
async def streaming_services(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, Any]:
    """Active streaming services sorted by name."""
    services = await get_or_load_lookup(
        "streaming_services", lambda: list_active_streaming_services(db)
    )
    return {"success": True, "streaming_services": services}


@router.get("/genres")
async def genres(db: Annotated[AsyncSession, Depends(get_db)]) -> dict[str, Any]:
    """All genres sorted by name."""
    return {"success": True, "genres": await get_or_load_lookup("genres", lambda: list_genres(db))}


@router.get("/moods")
async def moods(db: Annotated[AsyncSession, Depends(get_db)]) -> dict[str, Any]:
    """All moods sorted by name."""
    return {"success": True, "moods": await get_or_load_lookup("moods", lambda: list_moods(db))}
