"""Initial schema: users, follows, books, reviews and review likes

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def table_exists(table_name: str) -> bool:
    """Check if a table exists in the database."""
    bind = op.get_bind()
    inspector = inspect(bind)
    return table_name in inspector.get_table_names()


def upgrade() -> None:
    # Tables may already exist when the app created them at startup
    if not table_exists('users'):
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('username', sa.String(30), nullable=False),
            sa.Column('email', sa.String(255), nullable=False),
            sa.Column('hashed_password', sa.String(255), nullable=False),
            sa.Column('display_name', sa.String(50), nullable=False),
            sa.Column('bio', sa.Text(), nullable=False, server_default=''),
            sa.Column('avatar', sa.String(500), nullable=False, server_default=''),
            sa.Column('favorite_genres', sa.JSON(), nullable=False),
            sa.Column('reading_goal', sa.Integer(), nullable=False, server_default='12'),
            sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('is_admin', sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column('join_date', sa.DateTime(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_users_username', 'users', ['username'], unique=True)
        op.create_index('ix_users_email', 'users', ['email'], unique=True)
        op.create_index('ix_users_is_admin', 'users', ['is_admin'])
        op.create_index('ix_users_created_at', 'users', ['created_at'])

    if not table_exists('follows'):
        op.create_table(
            'follows',
            sa.Column('follower_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
            sa.Column('followed_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
        )

    if not table_exists('books'):
        op.create_table(
            'books',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('title', sa.String(500), nullable=False),
            sa.Column('author', sa.String(255), nullable=False),
            sa.Column('isbn', sa.String(20), nullable=True),
            sa.Column('google_books_id', sa.String(50), nullable=True),
            sa.Column('description', sa.Text(), nullable=True),
            sa.Column('published_date', sa.Date(), nullable=True),
            sa.Column('page_count', sa.Integer(), nullable=True),
            sa.Column('genres', sa.JSON(), nullable=False),
            sa.Column('cover_image', sa.String(500), nullable=False, server_default=''),
            sa.Column('language', sa.String(10), nullable=False, server_default='en'),
            sa.Column('publisher', sa.String(255), nullable=True),
            sa.Column('average_rating', sa.Float(), nullable=False, server_default='0'),
            sa.Column('ratings_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
        )
        op.create_index('ix_books_title', 'books', ['title'])
        op.create_index('ix_books_author', 'books', ['author'])
        op.create_index('ix_books_isbn', 'books', ['isbn'], unique=True)
        op.create_index('ix_books_google_books_id', 'books', ['google_books_id'], unique=True)
        op.create_index('ix_books_ratings_count', 'books', ['ratings_count'])
        op.create_index('ix_books_created_at', 'books', ['created_at'])

    if not table_exists('reviews'):
        op.create_table(
            'reviews',
            sa.Column('id', sa.Integer(), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
            sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
            sa.Column('rating', sa.Integer(), nullable=False),
            sa.Column('review_text', sa.Text(), nullable=False, server_default=''),
            sa.Column('read_status', sa.String(20), nullable=False),
            sa.Column('start_date', sa.Date(), nullable=True),
            sa.Column('finish_date', sa.Date(), nullable=True),
            sa.Column('is_public', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('tags', sa.JSON(), nullable=False),
            sa.Column('created_at', sa.DateTime(), nullable=False),
            sa.Column('updated_at', sa.DateTime(), nullable=False),
            sa.UniqueConstraint('user_id', 'book_id', name='unique_user_book_review'),
            sa.CheckConstraint('rating BETWEEN 1 AND 5', name='check_review_rating_range'),
        )
        op.create_index('ix_reviews_user_id', 'reviews', ['user_id'])
        op.create_index('ix_reviews_book_id', 'reviews', ['book_id'])
        op.create_index('ix_reviews_read_status', 'reviews', ['read_status'])
        op.create_index('ix_reviews_created_at', 'reviews', ['created_at'])
        op.create_index('ix_reviews_updated_at', 'reviews', ['updated_at'])

    if not table_exists('review_likes'):
        op.create_table(
            'review_likes',
            sa.Column('review_id', sa.Integer(), sa.ForeignKey('reviews.id', ondelete='CASCADE'), primary_key=True),
            sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        )


def downgrade() -> None:
    op.drop_table('review_likes')
    op.drop_table('reviews')
    op.drop_table('books')
    op.drop_table('follows')
    op.drop_table('users')
