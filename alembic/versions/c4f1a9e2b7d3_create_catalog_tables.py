"""create_catalog_tables

Revision ID: c4f1a9e2b7d3
Revises:
Create Date: 2026-10-16 09:12:31.402117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'c4f1a9e2b7d3'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('categories',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('name_key', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('image_name', sa.String(length=255), nullable=True),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name_key'),
    )

    # services.category_id는 외래키 없음 — force 삭제가 끊어진 참조를 남길 수 있음
    op.create_table('services',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('category_id', sa.Uuid(), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('is_popular', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('image_url', sa.String(length=500), nullable=True),
        sa.Column('image_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_services_category_id', 'services', ['category_id'])
    op.create_index('ix_services_category_active_popular', 'services', ['category_id', 'is_active', 'is_popular'])

    op.create_table('category_deletions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('category_id', sa.Uuid(), nullable=False),
        sa.Column('category_name', sa.String(length=100), nullable=False),
        sa.Column('mode', sa.String(length=20), nullable=False),
        sa.Column('target_category_id', sa.Uuid(), nullable=True),
        sa.Column('step', sa.String(length=30), nullable=False),
        sa.Column('affected_services', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_category_deletions_category_id', 'category_deletions', ['category_id'])
    op.create_index('ix_category_deletions_step', 'category_deletions', ['step'])


def downgrade() -> None:
    op.drop_index('ix_category_deletions_step', table_name='category_deletions')
    op.drop_index('ix_category_deletions_category_id', table_name='category_deletions')
    op.drop_table('category_deletions')
    op.drop_index('ix_services_category_active_popular', table_name='services')
    op.drop_index('ix_services_category_id', table_name='services')
    op.drop_table('services')
    op.drop_table('categories')
