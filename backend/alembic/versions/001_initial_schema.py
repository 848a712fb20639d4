"""Initial book club schema

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18

"""
import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = '001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('hashed_password', sa.String(255), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_users_name', 'users', ['name'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'books',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('author', sa.String(255), nullable=False),
        sa.Column('isbn', sa.String(10)),
        sa.Column('isbn13', sa.String(13)),
        sa.Column('open_library_key', sa.String(50)),
        sa.Column('cover_url', sa.String(500)),
        sa.Column('synopsis', sa.Text()),
        sa.Column('page_count', sa.Integer()),
        sa.Column('publish_year', sa.Integer()),
        sa.Column('status', sa.String(20), nullable=False, server_default='SUGGESTION'),
        sa.Column('added_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('added_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_books_title', 'books', ['title'])
    op.create_index('ix_books_author', 'books', ['author'])
    op.create_index('ix_books_isbn13', 'books', ['isbn13'])
    op.create_index('ix_books_status', 'books', ['status'])
    op.create_index('ix_books_added_by_id', 'books', ['added_by_id'])

    op.create_table(
        'ratings',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rating', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'book_id', name='unique_user_book_rating'),
    )
    op.create_index('ix_ratings_user_id', 'ratings', ['user_id'])
    op.create_index('ix_ratings_book_id', 'ratings', ['book_id'])

    op.create_table(
        'votes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_votes_user_id', 'votes', ['user_id'], unique=True)
    op.create_index('ix_votes_book_id', 'votes', ['book_id'])

    op.create_table(
        'invite_codes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('code', sa.String(32), nullable=False),
        sa.Column('created_by_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('used_by_id', sa.Integer(), sa.ForeignKey('users.id')),
        sa.Column('used_at', sa.DateTime()),
        sa.Column('redeemed', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_invite_codes_code', 'invite_codes', ['code'], unique=True)
    op.create_index('ix_invite_codes_created_by_id', 'invite_codes', ['created_by_id'])
    op.create_index('ix_invite_codes_used_by_id', 'invite_codes', ['used_by_id'])

    op.create_table(
        'discussion_questions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL')),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('sort_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_discussion_questions_book_id', 'discussion_questions', ['book_id'])
    op.create_index('ix_discussion_questions_user_id', 'discussion_questions', ['user_id'])

    op.create_table(
        'book_notes',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('book_id', sa.Integer(), sa.ForeignKey('books.id', ondelete='CASCADE'), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('user_id', 'book_id', name='unique_user_book_note'),
    )
    op.create_index('ix_book_notes_user_id', 'book_notes', ['user_id'])
    op.create_index('ix_book_notes_book_id', 'book_notes', ['book_id'])

    op.create_table(
        'announcements',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('location', sa.String(500), nullable=False),
        sa.Column('date_time', sa.DateTime(), nullable=False),
        sa.Column('time_zone', sa.String(64), nullable=False),
        sa.Column('notes', sa.Text()),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_announcements_is_active', 'announcements', ['is_active'])

    op.create_table(
        'site_settings',
        sa.Column('key', sa.String(100), primary_key=True),
        sa.Column('value', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('site_settings')
    op.drop_table('announcements')
    op.drop_table('book_notes')
    op.drop_table('discussion_questions')
    op.drop_table('invite_codes')
    op.drop_table('votes')
    op.drop_table('ratings')
    op.drop_table('books')
    op.drop_table('users')
