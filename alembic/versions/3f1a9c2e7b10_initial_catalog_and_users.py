"""initial catalog and users

Revision ID: 3f1a9c2e7b10
Revises:
Create Date: 2026-09-28 10:12:44.518203
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2e7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

content_type = sa.Enum('movie', 'tv_show', name='content_type')
duration_category = sa.Enum('any', 'short', 'medium', 'long', name='duration_category')


def _user_link_table(name: str, column: str, target: str) -> None:
    op.create_table(
        name,
        sa.Column('user_uid', sa.String(100), sa.ForeignKey('users.uid', ondelete='CASCADE'), primary_key=True),
        sa.Column(column, sa.String(100), sa.ForeignKey(target, ondelete='CASCADE'), primary_key=True),
    )


def upgrade() -> None:
    # Reference data
    op.create_table(
        'genres',
        sa.Column('uid', sa.String(100), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
    )
    op.create_table(
        'moods',
        sa.Column('uid', sa.String(100), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('icon_emoji', sa.String(16), nullable=True),
    )
    op.create_table(
        'streaming_services',
        sa.Column('uid', sa.String(100), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False, unique=True),
        sa.Column('logo_url', sa.String(500), nullable=True),
        sa.Column('base_url', sa.String(500), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    # Catalog
    op.create_table(
        'content',
        sa.Column('uid', sa.String(100), primary_key=True),
        sa.Column('external_api_id', sa.String(100), nullable=False, unique=True),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('release_year', sa.Integer(), nullable=True),
        sa.Column('content_type', content_type, nullable=False),
        sa.Column('poster_url', sa.String(500), nullable=True),
        sa.Column('synopsis', sa.Text(), nullable=True),
        sa.Column('tagline', sa.String(500), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        sa.Column('number_of_seasons', sa.Integer(), nullable=True),
        sa.Column('imdb_rating', sa.Numeric(3, 1), nullable=True),
        sa.Column('rotten_tomatoes_score', sa.Integer(), nullable=True),
        sa.Column('parental_rating', sa.String(20), nullable=True),
        sa.Column('director', sa.String(255), nullable=True),
        sa.Column('main_cast', sa.JSON(), nullable=True),
        sa.Column('last_synced_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    # Filter columns and the recommendation sort order
    op.create_index('ix_content_type_year', 'content', ['content_type', 'release_year'])
    op.create_index('ix_content_ratings', 'content', ['rotten_tomatoes_score', 'imdb_rating'])

    op.create_table(
        'content_genres',
        sa.Column('content_uid', sa.String(100), sa.ForeignKey('content.uid', ondelete='CASCADE'), primary_key=True),
        sa.Column('genre_uid', sa.String(100), sa.ForeignKey('genres.uid', ondelete='CASCADE'), primary_key=True),
    )
    op.create_table(
        'content_streaming_availability',
        sa.Column('uid', sa.String(100), primary_key=True),
        sa.Column('content_uid', sa.String(100), sa.ForeignKey('content.uid', ondelete='CASCADE'), nullable=False),
        sa.Column('service_uid', sa.String(100), sa.ForeignKey('streaming_services.uid', ondelete='CASCADE'), nullable=False),
        sa.Column('watch_link', sa.String(1000), nullable=True),
        sa.Column('region', sa.String(20), nullable=False, server_default='GLOBAL'),
        sa.Column('last_checked_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('content_uid', 'service_uid', 'region', name='uq_availability_content_service_region'),
    )
    op.create_index('ix_content_streaming_availability_content_uid', 'content_streaming_availability', ['content_uid'])
    op.create_index('ix_content_streaming_availability_service_uid', 'content_streaming_availability', ['service_uid'])

    # Users
    op.create_table(
        'users',
        sa.Column('uid', sa.String(100), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'user_settings',
        sa.Column('user_uid', sa.String(100), sa.ForeignKey('users.uid', ondelete='CASCADE'), primary_key=True),
        sa.Column('default_mood_uid', sa.String(100), sa.ForeignKey('moods.uid', ondelete='SET NULL'), nullable=True),
        sa.Column('min_release_year', sa.Integer(), nullable=False, server_default='1900'),
        sa.Column('max_release_year', sa.Integer(), nullable=False),
        sa.Column('preferred_duration_category', duration_category, nullable=False, server_default='any'),
        sa.Column('min_rating', sa.Float(), nullable=False, server_default='0'),
        sa.Column('preferred_content_type', sa.String(10), nullable=False, server_default='both'),
        sa.Column('parental_ratings', sa.JSON(), nullable=False),
    )
    _user_link_table('user_default_streaming_services', 'service_uid', 'streaming_services.uid')
    _user_link_table('user_default_genres', 'genre_uid', 'genres.uid')
    _user_link_table('user_excluded_genres', 'genre_uid', 'genres.uid')
    _user_link_table('user_excluded_streaming_services', 'service_uid', 'streaming_services.uid')

    op.create_table(
        'watchlist_entries',
        sa.Column('uid', sa.String(100), primary_key=True),
        sa.Column('user_uid', sa.String(100), sa.ForeignKey('users.uid', ondelete='CASCADE'), nullable=False),
        sa.Column('content_uid', sa.String(100), sa.ForeignKey('content.uid', ondelete='CASCADE'), nullable=False),
        sa.Column('added_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint('user_uid', 'content_uid', name='uq_watchlist_user_content'),
    )
    op.create_index('ix_watchlist_user_added', 'watchlist_entries', ['user_uid', 'added_at'])


def downgrade() -> None:
    op.drop_index('ix_watchlist_user_added', table_name='watchlist_entries')
    op.drop_table('watchlist_entries')
    op.drop_table('user_excluded_streaming_services')
    op.drop_table('user_excluded_genres')
    op.drop_table('user_default_genres')
    op.drop_table('user_default_streaming_services')
    op.drop_table('user_settings')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
    op.drop_index('ix_content_streaming_availability_service_uid', table_name='content_streaming_availability')
    op.drop_index('ix_content_streaming_availability_content_uid', table_name='content_streaming_availability')
    op.drop_table('content_streaming_availability')
    op.drop_table('content_genres')
    op.drop_index('ix_content_ratings', table_name='content')
    op.drop_index('ix_content_type_year', table_name='content')
    op.drop_table('content')
    op.drop_table('streaming_services')
    op.drop_table('moods')
    op.drop_table('genres')
    duration_category.drop(op.get_bind(), checkfirst=True)
    content_type.drop(op.get_bind(), checkfirst=True)
