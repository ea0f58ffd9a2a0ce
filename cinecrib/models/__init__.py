"""SQLAlchemy models."""

from cinecrib.models.base import Base
from cinecrib.models.content import (
    Content,
    ContentStreamingAvailability,
    ContentType,
    DurationCategory,
    Genre,
    Mood,
    StreamingService,
    content_genres,
)
from cinecrib.models.user import (
    User,
    UserSettings,
    WatchlistEntry,
    user_default_genres,
    user_default_streaming_services,
    user_excluded_genres,
    user_excluded_streaming_services,
)

__all__ = [
    "Base",
    "Content",
    "ContentStreamingAvailability",
    "ContentType",
    "DurationCategory",
    "Genre",
    "Mood",
    "StreamingService",
    "content_genres",
    "User",
    "UserSettings",
    "WatchlistEntry",
    "user_default_genres",
    "user_default_streaming_services",
    "user_excluded_genres",
    "user_excluded_streaming_services",
]
