"""Initial TV catalog schema

Revision ID: 001
Revises: 
Create Date: 2026-10-19

Users, series, genres, seasons, episodes and per-user rating/state.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # === USERS ===
    op.create_table(
        'users',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(256), nullable=False),
        sa.Column('email', sa.String(256), nullable=False, unique=True),
        sa.Column('password', sa.String(256), nullable=False),
        sa.Column('admin', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('created', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    # === SERIES ===
    op.create_table(
        'series',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('air_date', sa.Date),
        sa.Column('in_production', sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column('tagline', sa.Text),
        sa.Column('image', sa.String(256), nullable=False),
        sa.Column('description', sa.Text),
        sa.Column('language', sa.String(2), nullable=False),
        sa.Column('network', sa.String(128)),
        sa.Column('url', sa.String(256)),
    )

    # === GENRES ===
    op.create_table(
        'genres',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(128), nullable=False, unique=True),
    )

    op.create_table(
        'series_genres',
        sa.Column('serie_id', sa.Integer, sa.ForeignKey('series.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('genre_id', sa.Integer, sa.ForeignKey('genres.id', ondelete='CASCADE'), primary_key=True),
    )

    # === SEASONS & EPISODES ===
    op.create_table(
        'seasons',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('serie_id', sa.Integer, sa.ForeignKey('series.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('number', sa.Integer, nullable=False),
        sa.Column('air_date', sa.Date),
        sa.Column('overview', sa.Text),
        sa.Column('poster', sa.String(256), nullable=False),
        sa.UniqueConstraint('serie_id', 'number', name='uq_seasons_serie_number'),
    )
    op.create_index('ix_seasons_serie_id', 'seasons', ['serie_id'])

    op.create_table(
        'episodes',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('serie_id', sa.Integer, sa.ForeignKey('series.id', ondelete='CASCADE'), nullable=False),
        sa.Column('season_id', sa.Integer, sa.ForeignKey('seasons.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(128), nullable=False),
        sa.Column('number', sa.Integer, nullable=False),
        sa.Column('air_date', sa.Date),
        sa.Column('overview', sa.Text),
        sa.UniqueConstraint('season_id', 'number', name='uq_episodes_season_number'),
    )
    op.create_index('ix_episodes_serie_id', 'episodes', ['serie_id'])
    op.create_index('ix_episodes_season_id', 'episodes', ['season_id'])

    # === PER-USER RATING & STATE ===
    op.create_table(
        'users_series_rating',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('serie_id', sa.Integer, sa.ForeignKey('series.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rating', sa.Integer, nullable=False),
        sa.UniqueConstraint('user_id', 'serie_id', name='uq_users_series_rating_user_serie'),
        sa.CheckConstraint('rating >= 0 AND rating <= 5', name='chk_users_series_rating_range'),
    )
    op.create_index('ix_users_series_rating_user_id', 'users_series_rating', ['user_id'])
    op.create_index('ix_users_series_rating_serie_id', 'users_series_rating', ['serie_id'])

    op.create_table(
        'users_series_state',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer, sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('serie_id', sa.Integer, sa.ForeignKey('series.id', ondelete='CASCADE'), nullable=False),
        sa.Column('state', sa.String(32), nullable=False),
        sa.UniqueConstraint('user_id', 'serie_id', name='uq_users_series_state_user_serie'),
        sa.CheckConstraint(
            "state IN ('want to watch', 'watching', 'watched')", name='chk_users_series_state_value'
        ),
    )
    op.create_index('ix_users_series_state_user_id', 'users_series_state', ['user_id'])
    op.create_index('ix_users_series_state_serie_id', 'users_series_state', ['serie_id'])


def downgrade() -> None:
    op.drop_table('users_series_state')
    op.drop_table('users_series_rating')
    op.drop_table('episodes')
    op.drop_table('seasons')
    op.drop_table('series_genres')
    op.drop_table('genres')
    op.drop_table('series')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
