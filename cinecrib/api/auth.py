"""Authentication API endpoints.

Sessions are cookie based: a successful signup or login stores the user uid
in the signed session cookie, logout clears it.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from cinecrib.auth import get_current_user
from cinecrib.auth.dependencies import SESSION_USER_KEY
from cinecrib.db import get_db
from cinecrib.db.crud import authenticate_user, create_user
from cinecrib.models.schemas import (
    AuthResponse,
    Credentials,
    MeResponse,
    MessageResponse,
    UserRead,
)
from cinecrib.models.user import User

router = APIRouter()
logger = logging.getLogger(__name__)


def _start_session(request: Request, user: User) -> None:
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.uid


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(
    data: Credentials,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """Register a new user and log them in."""
    user = await create_user(db, data.email, data.password)
    await db.commit()

    _start_session(request, user)
    logger.info(f"New user registered: {user.uid}")

    return AuthResponse(message="User registered successfully", user=UserRead.model_validate(user))


@router.post("/login", response_model=AuthResponse)
async def login(
    data: Credentials,
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuthResponse:
    """Log in with email and password."""
    user = await authenticate_user(db, data.email, data.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid email or password")
    await db.commit()

    _start_session(request, user)

    return AuthResponse(message="Login successful", user=UserRead.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request) -> MessageResponse:
    """Clear the session."""
    request.session.clear()
    return MessageResponse(message="Logged out")


@router.get("/me", response_model=MeResponse)
async def me(user: Annotated[User, Depends(get_current_user)]) -> MeResponse:
    """Get the logged-in user's profile."""
    return MeResponse(user=UserRead.model_validate(user))
