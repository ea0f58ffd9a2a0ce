"""Pydantic schemas for API validation and serialization."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from cinecrib.models.content import Content
from cinecrib.models.content import ContentType as ContentTypeEnum
from cinecrib.models.content import DurationCategory as DurationCategoryEnum


# User schemas
class UserRead(BaseModel):
    """User read schema."""

    model_config = ConfigDict(from_attributes=True)

    uid: str
    email: str
    created_at: datetime


class Credentials(BaseModel):
    """Email/password pair for signup and login.

    Fields are optional; missing values are reported by the auth endpoints as 400s.
    """

    email: str | None = None
    password: str | None = None


class AuthResponse(BaseModel):
    """Signup/login response."""

    success: bool = True
    message: str
    user: UserRead


class MeResponse(BaseModel):
    """Current user response."""

    success: bool = True
    user: UserRead


# Lookup schemas
class GenreRead(BaseModel):
    """Genre read schema."""

    model_config = ConfigDict(from_attributes=True)

    uid: str
    name: str


class StreamingServiceRead(BaseModel):
    """Streaming service read schema."""

    model_config = ConfigDict(from_attributes=True)

    uid: str
    name: str
    logo_url: str | None = None
    base_url: str | None = None


class MoodRead(BaseModel):
    """Mood read schema."""

    model_config = ConfigDict(from_attributes=True)

    uid: str
    name: str
    icon_emoji: str | None = None


# Content schemas
class ServiceLink(BaseModel):
    """A streaming service a content item is available on."""

    service_uid: str
    name: str
    logo_url: str | None = None
    watch_link: str | None = None


class ContentItem(BaseModel):
    """Content item as returned by recommendations, watchlist and detail."""

    uid: str
    external_api_id: str
    title: str
    release_year: int | None = None
    content_type: ContentTypeEnum
    poster_url: str | None = None
    synopsis: str | None = None
    tagline: str | None = None
    duration_minutes: int | None = None
    number_of_seasons: int | None = None
    imdb_rating: float | None = None
    rotten_tomatoes_score: int | None = None
    parental_rating: str | None = None
    director: str | None = None
    main_cast: list[str] = []
    genres: list[GenreRead] = []
    available_on_services: list[ServiceLink] = []

    @classmethod
    def from_content(cls, content: Content, **extra) -> "ContentItem":
        """Build from a Content row with genres and availability loaded.

        Genres are de-duplicated and sorted by name; services are the distinct
        (service, watch_link) pairs sorted by service name then link.
        """
        genres = {genre.uid: genre for genre in content.genres}
        links: dict[tuple[str, str | None], ServiceLink] = {}
        for row in content.availability:
            key = (row.service.uid, row.watch_link)
            if key not in links:
                links[key] = ServiceLink(
                    service_uid=row.service.uid,
                    name=row.service.name,
                    logo_url=row.service.logo_url,
                    watch_link=row.watch_link,
                )

        return cls(
            uid=content.uid,
            external_api_id=content.external_api_id,
            title=content.title,
            release_year=content.release_year,
            content_type=content.content_type,
            poster_url=content.poster_url,
            synopsis=content.synopsis,
            tagline=content.tagline,
            duration_minutes=content.duration_minutes,
            number_of_seasons=content.number_of_seasons,
            imdb_rating=content.imdb_rating,
            rotten_tomatoes_score=content.rotten_tomatoes_score,
            parental_rating=content.parental_rating,
            director=content.director,
            main_cast=list(content.main_cast or []),
            genres=[
                GenreRead.model_validate(genre)
                for genre in sorted(genres.values(), key=lambda g: (g.name, g.uid))
            ],
            available_on_services=sorted(
                links.values(), key=lambda link: (link.name, link.watch_link or "")
            ),
            **extra,
        )


class WatchlistItem(ContentItem):
    """Watchlist entry."""

    added_at: datetime


# Recommendation schemas
class RecommendationRequest(BaseModel):
    """Raw recommendation filter body, validated into a FilterSpec."""

    mood_uid: str | None = None
    streaming_service_uids: list[str] | None = None
    genre_uids: list[str] | None = None
    min_release_year: int | None = None
    max_release_year: int | None = None
    preferred_duration_category: str | None = None
    min_rating: float | None = None
    preferred_content_type: str | None = None
    # JSON-encoded array of labels; a plain list is accepted too
    parental_rating_filter_json: str | list[str] | None = None
    excluded_genre_uids: list[str] | None = None
    excluded_service_uids: list[str] | None = None
    page: int | None = None
    page_size: int | None = None


class RecommendationResponse(BaseModel):
    """Paginated recommendation results."""

    success: bool = True
    recommendations: list[ContentItem]
    total_results: int
    page: int
    page_size: int


# Preference schemas
class PreferencesUpdate(BaseModel):
    """Saved default filters; omitted fields fall back to defaults."""

    default_mood_uid: str | None = None
    min_release_year: int | None = None
    max_release_year: int | None = None
    preferred_duration_category: str | None = None
    min_rating: float | None = None
    preferred_content_type: str | None = None
    parental_rating_filter_json: str | list[str] | None = None
    selected_service_uids: list[str] = []
    selected_genre_uids: list[str] = []
    excluded_genre_uids: list[str] = []
    excluded_service_uids: list[str] = []


class PreferencesRead(BaseModel):
    """Saved default filters with resolved lookup rows."""

    default_mood_uid: str | None = None
    default_mood_name: str | None = None
    default_mood_icon: str | None = None
    min_release_year: int
    max_release_year: int
    preferred_duration_category: DurationCategoryEnum
    min_rating: float
    preferred_content_type: str
    parental_rating_filter_json: str
    selected_streaming_services: list[StreamingServiceRead] = []
    selected_genres: list[GenreRead] = []
    excluded_genres: list[GenreRead] = []
    excluded_streaming_services: list[StreamingServiceRead] = []


class PreferencesResponse(BaseModel):
    """Preferences response envelope."""

    success: bool = True
    preferences: PreferencesRead


class WatchlistAddRequest(BaseModel):
    """Body for adding to the watchlist."""

    content_uid: str | None = None


class WatchlistResponse(BaseModel):
    """Watchlist response envelope."""

    success: bool = True
    watchlist: list[WatchlistItem]


class MessageResponse(BaseModel):
    """Generic success message."""

    success: bool = True
    message: str
