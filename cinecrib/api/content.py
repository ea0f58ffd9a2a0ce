"""Content detail API endpoint."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cinecrib.auth import get_optional_user
from cinecrib.db import get_db
from cinecrib.db.crud import get_content, is_on_watchlist
from cinecrib.models.schemas import ContentItem
from cinecrib.models.user import User

router = APIRouter()


@router.get("/{content_uid}")
async def read_content(
    content_uid: str,
    user: Annotated[User | None, Depends(get_optional_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> dict[str, Any]:
    """Get one content item.

    ``is_on_watchlist`` is only included for logged-in callers.
    """
    content = await get_content(db, content_uid)
    payload = ContentItem.from_content(content).model_dump(mode="json")

    if user is not None:
        payload["is_on_watchlist"] = await is_on_watchlist(db, user.uid, content_uid)

    return {"success": True, "content": payload}
