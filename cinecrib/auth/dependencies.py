"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cinecrib.db import get_db
from cinecrib.models.user import User

SESSION_USER_KEY = "user_uid"


async def get_optional_user(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User | None:
    """Get current user from session if logged in."""
    user_uid = request.session.get(SESSION_USER_KEY)
    if not user_uid:
        return None

    result = await db.execute(select(User).where(User.uid == user_uid))
    user = result.scalar_one_or_none()

    # If user_uid in session but user doesn't exist in DB, clear stale session
    if not user:
        request.session.clear()

    return user


async def get_current_user(
    user: Annotated[User | None, Depends(get_optional_user)],
) -> User:
    """Get current user, raising 401 if not authenticated."""
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return user
