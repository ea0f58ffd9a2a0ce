"""User accounts, saved preferences and watchlist."""

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cinecrib.constants import DEFAULT_MIN_RELEASE_YEAR
from cinecrib.models.base import Base, TimestampMixin, generate_uid, utcnow
from cinecrib.models.content import DurationCategory, enum_values

if TYPE_CHECKING:
    from cinecrib.models.content import Content


def _current_year() -> int:
    return datetime.now(UTC).year


def _user_link_table(name: str, column: str, target: str) -> Table:
    return Table(
        name,
        Base.metadata,
        Column("user_uid", String(100), ForeignKey("users.uid", ondelete="CASCADE"), primary_key=True),
        Column(column, String(100), ForeignKey(target, ondelete="CASCADE"), primary_key=True),
    )


# Association tables for saved default filters
user_default_streaming_services = _user_link_table(
    "user_default_streaming_services", "service_uid", "streaming_services.uid"
)
user_default_genres = _user_link_table("user_default_genres", "genre_uid", "genres.uid")
user_excluded_genres = _user_link_table("user_excluded_genres", "genre_uid", "genres.uid")
user_excluded_streaming_services = _user_link_table(
    "user_excluded_streaming_services", "service_uid", "streaming_services.uid"
)


class User(Base, TimestampMixin):
    """Registered user."""

    __tablename__ = "users"

    uid: Mapped[str] = mapped_column(String(100), primary_key=True, default=generate_uid)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    # lazy="select": settings and watchlist are always queried explicitly
    settings: Mapped["UserSettings | None"] = relationship(
        "UserSettings",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="select",
    )
    watchlist_entries: Mapped[list["WatchlistEntry"]] = relationship(
        "WatchlistEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<User(uid={self.uid}, email={self.email})>"


class UserSettings(Base):
    """Saved default recommendation filters (one row per user)."""

    __tablename__ = "user_settings"

    user_uid: Mapped[str] = mapped_column(
        ForeignKey("users.uid", ondelete="CASCADE"), primary_key=True
    )
    default_mood_uid: Mapped[str | None] = mapped_column(
        ForeignKey("moods.uid", ondelete="SET NULL"), nullable=True
    )
    min_release_year: Mapped[int] = mapped_column(
        Integer, default=DEFAULT_MIN_RELEASE_YEAR, nullable=False
    )
    max_release_year: Mapped[int] = mapped_column(Integer, default=_current_year, nullable=False)
    preferred_duration_category: Mapped[DurationCategory] = mapped_column(
        Enum(DurationCategory, name="duration_category", values_callable=enum_values),
        default=DurationCategory.ANY,
        nullable=False,
    )
    min_rating: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
    # "both", "movie" or "tv_show"
    preferred_content_type: Mapped[str] = mapped_column(String(10), default="both", nullable=False)
    parental_ratings: Mapped[list] = mapped_column(JSON, default=list, nullable=False)

    user: Mapped[User] = relationship("User", back_populates="settings")

    def __repr__(self) -> str:
        return f"<UserSettings(user_uid={self.user_uid})>"


class WatchlistEntry(Base):
    """A content item saved to a user's watchlist."""

    __tablename__ = "watchlist_entries"

    uid: Mapped[str] = mapped_column(String(100), primary_key=True, default=generate_uid)
    user_uid: Mapped[str] = mapped_column(ForeignKey("users.uid", ondelete="CASCADE"), nullable=False)
    content_uid: Mapped[str] = mapped_column(
        ForeignKey("content.uid", ondelete="CASCADE"), nullable=False
    )
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    # Relationships
    user: Mapped[User] = relationship("User", back_populates="watchlist_entries")
    content: Mapped["Content"] = relationship("Content")

    __table_args__ = (
        UniqueConstraint("user_uid", "content_uid", name="uq_watchlist_user_content"),
        Index("ix_watchlist_user_added", "user_uid", "added_at"),
    )

    def __repr__(self) -> str:
        return f"<WatchlistEntry(user={self.user_uid}, content={self.content_uid})>"
