"""Initial schema

Revision ID: 001_initial
Revises:
Create Date: 2025-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """
    Create initial database schema:
    - users: registered clients and their API credentials
    - credential_usages: per-user history of URL creations
    - short_urls: short code to URL mapping with click counter
    - url_visits: one row per resolved redirect
    """
    bind = op.get_bind()
    existing_tables = inspect(bind).get_table_names()

    if 'users' not in existing_tables:
        op.create_table(
            'users',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('display_name', sa.String(length=200), nullable=False),
            sa.Column('api_token', sa.String(length=64), nullable=False),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_users_api_token', 'users', ['api_token'], unique=True)

    if 'credential_usages' not in existing_tables:
        op.create_table(
            'credential_usages',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('user_id', sa.Integer(), nullable=False),
            sa.Column('used_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['user_id'], ['users.id']),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_credential_usages_user_id', 'credential_usages', ['user_id'])

    if 'short_urls' not in existing_tables:
        op.create_table(
            'short_urls',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('original_url', sa.Text(), nullable=False),
            sa.Column('short_code', sa.String(length=64), nullable=False),
            sa.Column('click_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
            sa.Column('owner_id', sa.Integer(), nullable=False),
            sa.ForeignKeyConstraint(['owner_id'], ['users.id']),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_short_urls_short_code', 'short_urls', ['short_code'], unique=True)
        op.create_index('ix_short_urls_click_count', 'short_urls', ['click_count'])
        op.create_index('ix_short_urls_created_at', 'short_urls', ['created_at'])
        op.create_index('ix_short_urls_owner_id', 'short_urls', ['owner_id'])

    if 'url_visits' not in existing_tables:
        op.create_table(
            'url_visits',
            sa.Column('id', sa.Integer(), nullable=False, autoincrement=True),
            sa.Column('short_url_id', sa.Integer(), nullable=False),
            sa.Column('visited_at', sa.DateTime(timezone=True), nullable=False),
            sa.ForeignKeyConstraint(['short_url_id'], ['short_urls.id']),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_url_visits_short_url_id', 'url_visits', ['short_url_id'])


def downgrade() -> None:
    """
    Drop all tables and indexes, children first.
    """
    op.drop_index('ix_url_visits_short_url_id', table_name='url_visits')
    op.drop_table('url_visits')

    op.drop_index('ix_short_urls_owner_id', table_name='short_urls')
    op.drop_index('ix_short_urls_created_at', table_name='short_urls')
    op.drop_index('ix_short_urls_click_count', table_name='short_urls')
    op.drop_index('ix_short_urls_short_code', table_name='short_urls')
    op.drop_table('short_urls')

    op.drop_index('ix_credential_usages_user_id', table_name='credential_usages')
    op.drop_table('credential_usages')

    op.drop_index('ix_users_api_token', table_name='users')
    op.drop_table('users')
