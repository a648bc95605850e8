"""Initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LIVE = "deleted_at IS NULL"


def _live_unique_index(name, table, columns, where=LIVE):
    op.create_index(
        name, table, columns, unique=True,
        sqlite_where=sa.text(where), postgresql_where=sa.text(where),
    )


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True)),
        sa.Column('deleted_at', sa.DateTime(timezone=True)),
    ]


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255)),
        sa.Column('avatar_path', sa.Text()),
        sa.Column('bio', sa.Text()),
        sa.Column('is_admin', sa.Boolean(), server_default=sa.false(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_deleted_at', 'users', ['deleted_at'])

    # Genres table
    op.create_table(
        'genres',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.String(1000)),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name'),
    )
    op.create_index('ix_genres_id', 'genres', ['id'])
    op.create_index('ix_genres_deleted_at', 'genres', ['deleted_at'])

    # Albums table
    op.create_table(
        'albums',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('artist', sa.String(255), nullable=False),
        sa.Column('genre_id', sa.Integer(), nullable=False),
        sa.Column('cover_image_path', sa.String(1000)),
        sa.Column('release_date', sa.Date()),
        sa.Column('description', sa.Text()),
        sa.Column('average_rating', sa.Float(), server_default='0', nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['genre_id'], ['genres.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_albums_id', 'albums', ['id'])
    op.create_index('ix_albums_title', 'albums', ['title'])
    op.create_index('ix_albums_artist', 'albums', ['artist'])
    op.create_index('ix_albums_deleted_at', 'albums', ['deleted_at'])

    # Tracks table
    op.create_table(
        'tracks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('album_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('duration', sa.Integer()),
        sa.Column('track_number', sa.Integer()),
        sa.Column('cover_image_path', sa.String(1000)),
        sa.Column('average_rating', sa.Float(), server_default='0', nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['album_id'], ['albums.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_tracks_id', 'tracks', ['id'])
    op.create_index('ix_tracks_album_id', 'tracks', ['album_id'])
    op.create_index('ix_tracks_title', 'tracks', ['title'])
    op.create_index('ix_tracks_deleted_at', 'tracks', ['deleted_at'])

    op.create_table(
        'track_genres',
        sa.Column('track_id', sa.Integer(), nullable=False),
        sa.Column('genre_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['track_id'], ['tracks.id']),
        sa.ForeignKeyConstraint(['genre_id'], ['genres.id']),
        sa.PrimaryKeyConstraint('track_id', 'genre_id'),
    )

    # Reviews table
    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('album_id', sa.Integer()),
        sa.Column('track_id', sa.Integer()),
        sa.Column('text', sa.Text()),
        sa.Column('rating_rhymes', sa.Integer(), nullable=False),
        sa.Column('rating_structure', sa.Integer(), nullable=False),
        sa.Column('rating_implementation', sa.Integer(), nullable=False),
        sa.Column('rating_individuality', sa.Integer(), nullable=False),
        sa.Column('atmosphere_rating', sa.Integer(), nullable=False),
        sa.Column('atmosphere_multiplier', sa.Float(), nullable=False),
        sa.Column('final_score', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(20), server_default='pending', nullable=False),
        sa.Column('moderated_by', sa.Integer()),
        sa.Column('moderated_at', sa.DateTime(timezone=True)),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['album_id'], ['albums.id']),
        sa.ForeignKeyConstraint(['track_id'], ['tracks.id']),
        sa.ForeignKeyConstraint(['moderated_by'], ['users.id']),
        sa.CheckConstraint(
            "(album_id IS NOT NULL AND track_id IS NULL) OR (album_id IS NULL AND track_id IS NOT NULL)",
            name='ck_reviews_single_target',
        ),
        sa.CheckConstraint('rating_rhymes BETWEEN 1 AND 10', name='ck_reviews_rating_rhymes'),
        sa.CheckConstraint('rating_structure BETWEEN 1 AND 10', name='ck_reviews_rating_structure'),
        sa.CheckConstraint('rating_implementation BETWEEN 1 AND 10', name='ck_reviews_rating_implementation'),
        sa.CheckConstraint('rating_individuality BETWEEN 1 AND 10', name='ck_reviews_rating_individuality'),
        sa.CheckConstraint('atmosphere_rating BETWEEN 1 AND 10', name='ck_reviews_atmosphere_rating'),
        sa.CheckConstraint(
            'atmosphere_multiplier >= 1.0 AND atmosphere_multiplier <= 1.6072',
            name='ck_reviews_atmosphere_multiplier',
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_reviews_id', 'reviews', ['id'])
    op.create_index('ix_reviews_user_id', 'reviews', ['user_id'])
    op.create_index('ix_reviews_album_id', 'reviews', ['album_id'])
    op.create_index('ix_reviews_track_id', 'reviews', ['track_id'])
    op.create_index('ix_reviews_deleted_at', 'reviews', ['deleted_at'])
    op.create_index('ix_reviews_status_created', 'reviews', ['status', 'created_at'])
    _live_unique_index(
        'uq_reviews_user_album_live', 'reviews', ['user_id', 'album_id'],
        where="deleted_at IS NULL AND album_id IS NOT NULL",
    )
    _live_unique_index(
        'uq_reviews_user_track_live', 'reviews', ['user_id', 'track_id'],
        where="deleted_at IS NULL AND track_id IS NOT NULL",
    )

    # Like tables - one live like per user and target
    for table, target_column, target_table in (
        ('album_likes', 'album_id', 'albums'),
        ('track_likes', 'track_id', 'tracks'),
        ('review_likes', 'review_id', 'reviews'),
    ):
        op.create_table(
            table,
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column(target_column, sa.Integer(), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
            sa.Column('deleted_at', sa.DateTime(timezone=True)),
            sa.ForeignKeyConstraint(['user_id'], ['users.id']),
            sa.ForeignKeyConstraint([target_column], [f'{target_table}.id']),
            sa.PrimaryKeyConstraint('id'),
        )
        op.create_index(f'ix_{table}_id', table, ['id'])
        op.create_index(f'ix_{table}_user_id', table, ['user_id'])
        op.create_index(f'ix_{table}_{target_column}', table, [target_column])
        _live_unique_index(f'uq_{table}_user_{target_column}_live', table, ['user_id', target_column])

    # Activity log
    op.create_table(
        'activity_log',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Integer()),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('entity_type', sa.String(50)),
        sa.Column('entity_id', sa.Integer()),
        sa.Column('details', sa.JSON()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_activity_log_id', 'activity_log', ['id'])
    op.create_index('ix_activity_log_action', 'activity_log', ['action'])
    op.create_index('ix_activity_log_created_at', 'activity_log', ['created_at'])


def downgrade() -> None:
    op.drop_table('activity_log')
    op.drop_table('review_likes')
    op.drop_table('track_likes')
    op.drop_table('album_likes')
    op.drop_table('reviews')
    op.drop_table('track_genres')
    op.drop_table('tracks')
    op.drop_table('albums')
    op.drop_table('genres')
    op.drop_table('users')
