"""baseline_init_schema

Revision ID: 000000000000
Revises: 
Create Date: 2026-10-01 00:00:00.000000

Creates the users, library_entries, reading_sessions, shelves and ratings tables.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '000000000000'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('password_hash', sa.String(), nullable=True),  # null for Google-only accounts
        sa.Column('auth_provider', sa.String(), nullable=False, server_default='password'),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('bio', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('location', sa.String(), nullable=False, server_default=''),
        sa.Column('website', sa.String(), nullable=False, server_default=''),
        sa.Column('profile_picture', sa.String(), nullable=True),
        sa.Column('profile_visibility', sa.String(), nullable=False, server_default='public'),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('crime_thriller', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('horror', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('fantasy', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('philosophy', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table(
        'library_entries',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('google_id', sa.String(), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('author', sa.String(), nullable=False),
        sa.Column('isbn', sa.String(), nullable=False, server_default=''),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('cover_image', sa.String(), nullable=True),
        sa.Column('page_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('published_date', sa.String(), nullable=True),
        sa.Column('publisher', sa.String(), nullable=False, server_default=''),
        sa.Column('language', sa.String(), nullable=False, server_default='English'),
        sa.Column('categories', sa.JSON(), nullable=False),
        sa.Column('shelf', sa.String(), nullable=False, server_default='want-to-read'),
        sa.Column('custom_shelf_name', sa.String(), nullable=False, server_default=''),
        sa.Column('current_page', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('reading_progress', sa.Float(), nullable=False, server_default='0'),
        sa.Column('started_reading', sa.DateTime(), nullable=True),
        sa.Column('finished_reading', sa.DateTime(), nullable=True),
        sa.Column('reading_time', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('personal_notes', sa.Text(), nullable=False, server_default=''),
        sa.Column('personal_rating', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('is_private', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('goal_target_date', sa.DateTime(), nullable=True),
        sa.Column('daily_page_goal', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_library_entries_user_id'), 'library_entries', ['user_id'], unique=False)
    op.create_index(op.f('ix_library_entries_shelf'), 'library_entries', ['shelf'], unique=False)
    op.create_index('idx_library_entries_user_shelf', 'library_entries', ['user_id', 'shelf'], unique=False)
    op.create_index('idx_library_entries_user_title', 'library_entries', ['user_id', 'title'], unique=False)

    op.create_table(
        'reading_sessions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('entry_id', sa.Uuid(), nullable=False),
        sa.Column('date', sa.DateTime(), nullable=False),
        sa.Column('pages_read', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('time_spent', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        sa.ForeignKeyConstraint(['entry_id'], ['library_entries.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_reading_sessions_entry_id'), 'reading_sessions', ['entry_id'], unique=False)

    op.create_table(
        'shelves',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.String(), nullable=False, server_default=''),
        sa.Column('color', sa.String(), nullable=False, server_default='#4285f4'),
        sa.Column('icon', sa.String(), nullable=False, server_default='📚'),
        sa.Column('is_private', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('yearly_goal', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'name', name='uq_shelves_user_name')
    )
    op.create_index(op.f('ix_shelves_user_id'), 'shelves', ['user_id'], unique=False)

    op.create_table(
        'ratings',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('user_name', sa.String(), nullable=False, server_default=''),
        sa.Column('book_id', sa.String(), nullable=False),
        sa.Column('book_title', sa.String(), nullable=False),
        sa.Column('book_author', sa.String(), nullable=False),
        sa.Column('book_cover', sa.String(), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.String(length=1000), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'book_id', name='uq_ratings_user_book')
    )
    op.create_index(op.f('ix_ratings_user_id'), 'ratings', ['user_id'], unique=False)
    op.create_index(op.f('ix_ratings_book_id'), 'ratings', ['book_id'], unique=False)
    op.create_index(op.f('ix_ratings_created_at'), 'ratings', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_table('ratings')
    op.drop_table('shelves')
    op.drop_table('reading_sessions')
    op.drop_table('library_entries')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
