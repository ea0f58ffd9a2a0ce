"""CRUD operations for user accounts."""

import re

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cinecrib.auth.passwords import hash_password, verify_password
from cinecrib.constants import MIN_PASSWORD_LENGTH
from cinecrib.exceptions import ConflictError, ValidationError
from cinecrib.models.base import utcnow
from cinecrib.models.user import User, UserSettings

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_credentials(email: str | None, password: str | None) -> tuple[str, str]:
    """Check presence and shape of signup credentials.

    Raises:
        ValidationError: on a missing field, malformed email or short password.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    email = normalize_email(email)
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Email address is not valid")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    return email, password


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    """Get a user by email (case-insensitive on input)."""
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def create_user(db: AsyncSession, email: str | None, password: str | None) -> User:
    """Register a user together with default recommendation settings.

    Raises:
        ValidationError: if the credentials are missing or malformed.
        ConflictError: if the email is already registered.
    """
    email, password = validate_credentials(email, password)

    if await get_user_by_email(db, email) is not None:
        raise ConflictError("User with this email already exists")

    user = User(email=email, password_hash=hash_password(password))
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as e:
        # Lost a race against a concurrent signup with the same email
        await db.rollback()
        raise ConflictError("User with this email already exists") from e

    db.add(UserSettings(user_uid=user.uid))
    await db.flush()
    await db.refresh(user)
    return user


async def authenticate_user(
    db: AsyncSession, email: str | None, password: str | None
) -> User | None:
    """Return the user when the credentials match, else None.

    Raises:
        ValidationError: if either credential is missing.
    """
    if not email or not password:
        raise ValidationError("Email and password are required")

    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None

    user.updated_at = utcnow()
    await db.flush()
    return user
