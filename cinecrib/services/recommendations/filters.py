"""Recommendation filter specification.

Turns the raw request body into a frozen, validated ``FilterSpec``. Nothing
here touches the database; the query layer can trust every field.
"""

import json
import re
from collections.abc import Iterable
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from cinecrib.constants import (
    DEFAULT_MIN_RELEASE_YEAR,
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    MAX_RATING_FLOOR,
    MAX_RELEASE_YEAR,
    MAX_UID_LENGTH,
    MIN_PAGE_SIZE,
    MIN_RATING_FLOOR,
    MIN_RELEASE_YEAR,
)
from cinecrib.exceptions import ValidationError
from cinecrib.models.content import ContentType, DurationCategory
from cinecrib.models.schemas import RecommendationRequest

UID_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:-]*$")

# Wire values for the content type filter; None means "any"
CONTENT_TYPE_ALIASES: dict[str, ContentType | None] = {
    "both": None,
    "any": None,
    "movie": ContentType.MOVIE,
    "tv_show": ContentType.TV_SHOW,
    "series": ContentType.TV_SHOW,
}


def current_year() -> int:
    return datetime.now(UTC).year


def _dedupe(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def validate_uid(value: object) -> str:
    """Return the identifier if well formed, else raise ValueError."""
    if not isinstance(value, str):
        raise ValueError(f"identifier must be a string, got {type(value).__name__}")
    if not value or len(value) > MAX_UID_LENGTH or not UID_PATTERN.match(value):
        raise ValueError(f"malformed identifier {value!r}")
    return value


def validate_uids(values: Iterable[object] | None) -> tuple[str, ...]:
    """Validate a collection of identifiers, dropping duplicates."""
    if values is None:
        return ()
    if isinstance(values, str):
        raise ValueError("expected a list of identifiers")
    return _dedupe(validate_uid(value) for value in values)


def normalize_content_type(value: str | None) -> ContentType | None:
    """Map a wire content type ("both", "movie", "tv_show", ...) to a filter value."""
    if value is None:
        return None
    key = value.strip().lower()
    if key not in CONTENT_TYPE_ALIASES:
        allowed = ", ".join(CONTENT_TYPE_ALIASES)
        raise ValueError(f"preferred_content_type must be one of: {allowed}")
    return CONTENT_TYPE_ALIASES[key]


def parse_parental_ratings(value: str | list[str] | None) -> tuple[str, ...]:
    """Decode the parental rating filter (JSON array string or list)."""
    if value is None or value == "":
        return ()

    decoded: object = value
    if isinstance(value, str):
        try:
            decoded = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValueError("parental_rating_filter_json must be a JSON array of strings") from e

    if not isinstance(decoded, list) or not all(
        isinstance(label, str) and label.strip() for label in decoded
    ):
        raise ValueError("parental_rating_filter_json must be a JSON array of strings")

    return _dedupe(label.strip() for label in decoded)


def _format_errors(exc: PydanticValidationError) -> str:
    messages = []
    for error in exc.errors():
        msg = error["msg"].removeprefix("Value error, ")
        field = ".".join(str(part) for part in error["loc"])
        messages.append(f"{field}: {msg}" if field else msg)
    return "; ".join(messages)


class FilterSpec(BaseModel):
    """Validated recommendation filters plus pagination."""

    model_config = ConfigDict(frozen=True)

    # Accepted for the client's benefit, not used as a filter
    mood_uid: str | None = None

    content_type: ContentType | None = None
    min_release_year: int = Field(
        DEFAULT_MIN_RELEASE_YEAR, ge=MIN_RELEASE_YEAR, le=MAX_RELEASE_YEAR
    )
    max_release_year: int = Field(
        default_factory=current_year, ge=MIN_RELEASE_YEAR, le=MAX_RELEASE_YEAR
    )
    min_rating: float = Field(MIN_RATING_FLOOR, ge=MIN_RATING_FLOOR, le=MAX_RATING_FLOOR)
    duration_category: DurationCategory = DurationCategory.ANY
    parental_ratings: tuple[str, ...] = ()

    genre_uids: tuple[str, ...] = ()
    excluded_genre_uids: tuple[str, ...] = ()
    service_uids: tuple[str, ...] = ()
    excluded_service_uids: tuple[str, ...] = ()

    page: int = Field(1, ge=1)
    page_size: int = Field(DEFAULT_PAGE_SIZE, ge=MIN_PAGE_SIZE, le=MAX_PAGE_SIZE)

    @field_validator(
        "genre_uids",
        "excluded_genre_uids",
        "service_uids",
        "excluded_service_uids",
        mode="before",
    )
    @classmethod
    def check_uids(cls, v: Iterable[object] | None) -> tuple[str, ...]:
        return validate_uids(v)

    @field_validator("mood_uid")
    @classmethod
    def check_mood_uid(cls, v: str | None) -> str | None:
        return None if v is None else validate_uid(v)

    @field_validator("duration_category", mode="before")
    @classmethod
    def normalize_duration(cls, v: object) -> object:
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("parental_ratings", mode="before")
    @classmethod
    def check_parental_ratings(cls, v: str | list[str] | None) -> tuple[str, ...]:
        return parse_parental_ratings(list(v) if isinstance(v, tuple) else v)

    @model_validator(mode="after")
    def check_year_range(self) -> "FilterSpec":
        if self.min_release_year > self.max_release_year:
            raise ValueError("min_release_year must not exceed max_release_year")
        return self

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def from_request(cls, request: RecommendationRequest) -> "FilterSpec":
        """Build a FilterSpec from the raw body, applying defaults for missing fields.

        Raises:
            ValidationError: if any field is malformed or out of range.
        """
        try:
            content_type = normalize_content_type(request.preferred_content_type)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        raw = {
            "mood_uid": request.mood_uid,
            "content_type": content_type,
            "min_release_year": request.min_release_year,
            "max_release_year": request.max_release_year,
            "min_rating": request.min_rating,
            "duration_category": request.preferred_duration_category,
            "parental_ratings": request.parental_rating_filter_json,
            "genre_uids": request.genre_uids,
            "excluded_genre_uids": request.excluded_genre_uids,
            "service_uids": request.streaming_service_uids,
            "excluded_service_uids": request.excluded_service_uids,
            "page": request.page,
            "page_size": request.page_size,
        }
        try:
            return cls(**{key: value for key, value in raw.items() if value is not None})
        except PydanticValidationError as e:
            raise ValidationError(_format_errors(e)) from e
