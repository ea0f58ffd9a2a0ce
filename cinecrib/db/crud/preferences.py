"""CRUD operations for saved recommendation preferences.

An update replaces the settings row and all four link tables. The statements
run in the request's transaction, so a failure part-way leaves the previous
preferences untouched.
"""

import json
from collections.abc import Sequence

from sqlalchemy import Table, delete, func, insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from cinecrib.constants import (
    DEFAULT_MIN_RELEASE_YEAR,
    MAX_RATING_FLOOR,
    MAX_RELEASE_YEAR,
    MIN_RATING_FLOOR,
    MIN_RELEASE_YEAR,
)
from cinecrib.exceptions import ValidationError
from cinecrib.models.content import ContentType, DurationCategory, Genre, Mood, StreamingService
from cinecrib.models.schemas import (
    GenreRead,
    PreferencesRead,
    PreferencesUpdate,
    StreamingServiceRead,
)
from cinecrib.models.user import (
    UserSettings,
    user_default_genres,
    user_default_streaming_services,
    user_excluded_genres,
    user_excluded_streaming_services,
)
from cinecrib.services.recommendations.filters import (
    current_year,
    normalize_content_type,
    parse_parental_ratings,
    validate_uid,
    validate_uids,
)
from cinecrib.utils.logging import LogContext, get_logger

logger = get_logger(__name__)

# Stored wire value of the preferred content type
CONTENT_TYPE_SETTING: dict[ContentType | None, str] = {
    None: "both",
    ContentType.MOVIE: "movie",
    ContentType.TV_SHOW: "tv_show",
}


async def get_or_create_settings(db: AsyncSession, user_uid: str) -> UserSettings:
    """Get the user's settings row, creating the defaults on first access."""
    settings = await db.get(UserSettings, user_uid)
    if settings is None:
        settings = UserSettings(user_uid=user_uid)
        db.add(settings)
        await db.flush()
    return settings


async def _linked_genres(db: AsyncSession, table: Table, user_uid: str) -> list[GenreRead]:
    result = await db.execute(
        select(Genre)
        .join(table, table.c.genre_uid == Genre.uid)
        .where(table.c.user_uid == user_uid)
        .order_by(Genre.name)
    )
    return [GenreRead.model_validate(genre) for genre in result.scalars()]


async def _linked_services(
    db: AsyncSession, table: Table, user_uid: str
) -> list[StreamingServiceRead]:
    result = await db.execute(
        select(StreamingService)
        .join(table, table.c.service_uid == StreamingService.uid)
        .where(table.c.user_uid == user_uid)
        .order_by(StreamingService.name)
    )
    return [StreamingServiceRead.model_validate(service) for service in result.scalars()]


async def get_preferences(db: AsyncSession, user_uid: str) -> PreferencesRead:
    """Load saved preferences with mood, genres and services resolved."""
    settings = await get_or_create_settings(db, user_uid)

    mood = None
    if settings.default_mood_uid:
        mood = await db.get(Mood, settings.default_mood_uid)

    return PreferencesRead(
        default_mood_uid=settings.default_mood_uid,
        default_mood_name=mood.name if mood else None,
        default_mood_icon=mood.icon_emoji if mood else None,
        min_release_year=settings.min_release_year,
        max_release_year=settings.max_release_year,
        preferred_duration_category=settings.preferred_duration_category,
        min_rating=settings.min_rating,
        preferred_content_type=settings.preferred_content_type,
        parental_rating_filter_json=json.dumps(list(settings.parental_ratings or [])),
        selected_streaming_services=await _linked_services(
            db, user_default_streaming_services, user_uid
        ),
        selected_genres=await _linked_genres(db, user_default_genres, user_uid),
        excluded_genres=await _linked_genres(db, user_excluded_genres, user_uid),
        excluded_streaming_services=await _linked_services(
            db, user_excluded_streaming_services, user_uid
        ),
    )


async def _require_known(
    db: AsyncSession, model: type[Genre] | type[StreamingService], uids: Sequence[str], field: str
) -> None:
    if not uids:
        return
    result = await db.execute(select(func.count()).select_from(model).where(model.uid.in_(uids)))
    if result.scalar_one() != len(uids):
        raise ValidationError(f"{field} contains unknown identifiers")


async def _replace_links(
    db: AsyncSession, table: Table, column: str, user_uid: str, uids: Sequence[str]
) -> None:
    await db.execute(delete(table).where(table.c.user_uid == user_uid))
    if uids:
        await db.execute(insert(table), [{"user_uid": user_uid, column: uid} for uid in uids])


def _validated_update(data: PreferencesUpdate) -> dict:
    """Normalize an update body; raises ValidationError on any bad field."""
    try:
        min_year = (
            data.min_release_year
            if data.min_release_year is not None
            else DEFAULT_MIN_RELEASE_YEAR
        )
        max_year = data.max_release_year if data.max_release_year is not None else current_year()
        for field, year in (("min_release_year", min_year), ("max_release_year", max_year)):
            if not MIN_RELEASE_YEAR <= year <= MAX_RELEASE_YEAR:
                raise ValueError(
                    f"{field} must be between {MIN_RELEASE_YEAR} and {MAX_RELEASE_YEAR}"
                )
        if min_year > max_year:
            raise ValueError("min_release_year must not exceed max_release_year")

        min_rating = data.min_rating if data.min_rating is not None else MIN_RATING_FLOOR
        if not MIN_RATING_FLOOR <= min_rating <= MAX_RATING_FLOOR:
            raise ValueError(
                f"min_rating must be between {MIN_RATING_FLOOR} and {MAX_RATING_FLOOR}"
            )

        duration = (data.preferred_duration_category or DurationCategory.ANY.value).strip().lower()
        try:
            duration_category = DurationCategory(duration)
        except ValueError as e:
            raise ValueError(f"unknown preferred_duration_category {duration!r}") from e

        return {
            "default_mood_uid": (
                validate_uid(data.default_mood_uid) if data.default_mood_uid else None
            ),
            "min_release_year": min_year,
            "max_release_year": max_year,
            "preferred_duration_category": duration_category,
            "min_rating": min_rating,
            "preferred_content_type": CONTENT_TYPE_SETTING[
                normalize_content_type(data.preferred_content_type)
            ],
            "parental_ratings": list(parse_parental_ratings(data.parental_rating_filter_json)),
            "selected_service_uids": validate_uids(data.selected_service_uids),
            "selected_genre_uids": validate_uids(data.selected_genre_uids),
            "excluded_genre_uids": validate_uids(data.excluded_genre_uids),
            "excluded_service_uids": validate_uids(data.excluded_service_uids),
        }
    except ValueError as e:
        raise ValidationError(str(e)) from e


async def update_preferences(
    db: AsyncSession, user_uid: str, data: PreferencesUpdate
) -> UserSettings:
    """Replace the user's saved preferences and link tables.

    Raises:
        ValidationError: on malformed values or identifiers that do not exist.
    """
    values = _validated_update(data)

    if values["default_mood_uid"] and await db.get(Mood, values["default_mood_uid"]) is None:
        raise ValidationError("default_mood_uid does not exist")
    await _require_known(db, StreamingService, values["selected_service_uids"], "selected_service_uids")
    await _require_known(db, Genre, values["selected_genre_uids"], "selected_genre_uids")
    await _require_known(db, Genre, values["excluded_genre_uids"], "excluded_genre_uids")
    await _require_known(db, StreamingService, values["excluded_service_uids"], "excluded_service_uids")

    settings = await get_or_create_settings(db, user_uid)
    settings.default_mood_uid = values["default_mood_uid"]
    settings.min_release_year = values["min_release_year"]
    settings.max_release_year = values["max_release_year"]
    settings.preferred_duration_category = values["preferred_duration_category"]
    settings.min_rating = values["min_rating"]
    settings.preferred_content_type = values["preferred_content_type"]
    settings.parental_ratings = values["parental_ratings"]

    await _replace_links(
        db, user_default_streaming_services, "service_uid", user_uid, values["selected_service_uids"]
    )
    await _replace_links(db, user_default_genres, "genre_uid", user_uid, values["selected_genre_uids"])
    await _replace_links(db, user_excluded_genres, "genre_uid", user_uid, values["excluded_genre_uids"])
    await _replace_links(
        db, user_excluded_streaming_services, "service_uid", user_uid, values["excluded_service_uids"]
    )
    await db.flush()

    LogContext(logger, user=user_uid).info("Preferences updated")
    return settings
