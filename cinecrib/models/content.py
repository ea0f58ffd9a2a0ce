"""Content catalog: titles, genres, streaming services and availability."""

import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cinecrib.constants import DEFAULT_AVAILABILITY_REGION
from cinecrib.models.base import Base, generate_uid, utcnow


class ContentType(str, enum.Enum):
    """Kind of content item."""

    MOVIE = "movie"
    TV_SHOW = "tv_show"


class DurationCategory(str, enum.Enum):
    """Coarse runtime bucket (minutes for movies, seasons for series)."""

    ANY = "any"
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    # Persist enum values ("tv_show"), not member names ("TV_SHOW")
    return [member.value for member in enum_cls]


# Association tables
content_genres = Table(
    "content_genres",
    Base.metadata,
    Column("content_uid", String(100), ForeignKey("content.uid", ondelete="CASCADE"), primary_key=True),
    Column("genre_uid", String(100), ForeignKey("genres.uid", ondelete="CASCADE"), primary_key=True),
)


class Genre(Base):
    """Genre reference entry."""

    __tablename__ = "genres"

    uid: Mapped[str] = mapped_column(String(100), primary_key=True, default=generate_uid)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Genre(uid={self.uid}, name={self.name})>"


class Mood(Base):
    """Mood offered on the preference screen."""

    __tablename__ = "moods"

    uid: Mapped[str] = mapped_column(String(100), primary_key=True, default=generate_uid)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    icon_emoji: Mapped[str | None] = mapped_column(String(16), nullable=True)

    def __repr__(self) -> str:
        return f"<Mood(uid={self.uid}, name={self.name})>"


class StreamingService(Base):
    """Streaming platform reference entry."""

    __tablename__ = "streaming_services"

    uid: Mapped[str] = mapped_column(String(100), primary_key=True, default=generate_uid)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    base_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<StreamingService(uid={self.uid}, name={self.name})>"


class Content(Base):
    """A movie or TV series in the catalog."""

    __tablename__ = "content"

    uid: Mapped[str] = mapped_column(String(100), primary_key=True, default=generate_uid)
    external_api_id: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    release_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    content_type: Mapped[ContentType] = mapped_column(
        Enum(ContentType, name="content_type", values_callable=enum_values),
        nullable=False,
    )
    poster_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    synopsis: Mapped[str | None] = mapped_column(Text, nullable=True)
    tagline: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Movies carry a runtime, series a season count
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True)
    number_of_seasons: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Critic aggregate 0-10 and audience aggregate 0-100
    imdb_rating: Mapped[float | None] = mapped_column(Numeric(3, 1, asdecimal=False), nullable=True)
    rotten_tomatoes_score: Mapped[int | None] = mapped_column(Integer, nullable=True)

    parental_rating: Mapped[str | None] = mapped_column(String(20), nullable=True)
    director: Mapped[str | None] = mapped_column(String(255), nullable=True)
    main_cast: Mapped[list | None] = mapped_column(JSON, nullable=True)
    last_synced_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    genres: Mapped[list[Genre]] = relationship(
        "Genre", secondary=content_genres, order_by="Genre.name", lazy="selectin"
    )
    availability: Mapped[list["ContentStreamingAvailability"]] = relationship(
        "ContentStreamingAvailability",
        back_populates="content",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_content_type_year", "content_type", "release_year"),
        Index("ix_content_ratings", "rotten_tomatoes_score", "imdb_rating"),
    )

    def __repr__(self) -> str:
        return f"<Content(uid={self.uid}, title={self.title}, type={self.content_type})>"


class ContentStreamingAvailability(Base):
    """Where a content item can be watched, per service and region."""

    __tablename__ = "content_streaming_availability"

    uid: Mapped[str] = mapped_column(String(100), primary_key=True, default=generate_uid)
    content_uid: Mapped[str] = mapped_column(
        ForeignKey("content.uid", ondelete="CASCADE"), nullable=False, index=True
    )
    service_uid: Mapped[str] = mapped_column(
        ForeignKey("streaming_services.uid", ondelete="CASCADE"), nullable=False, index=True
    )
    watch_link: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    region: Mapped[str] = mapped_column(
        String(20), default=DEFAULT_AVAILABILITY_REGION, nullable=False
    )
    last_checked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    content: Mapped[Content] = relationship("Content", back_populates="availability")
    service: Mapped[StreamingService] = relationship("StreamingService", lazy="selectin")

    __table_args__ = (
        UniqueConstraint(
            "content_uid", "service_uid", "region", name="uq_availability_content_service_region"
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ContentStreamingAvailability(content={self.content_uid}, "
            f"service={self.service_uid}, region={self.region})>"
        )
