"""Catalog: shop_products table with generated search metadata

Revision ID: catalog_001
Revises:
Create Date: 2026-10-18
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = 'catalog_001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table('shop_products',
        sa.Column('id', sa.String(length=128), nullable=False),
        sa.Column('name', sa.String(length=500), nullable=True),
        sa.Column('desc', sa.Text(), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=200), nullable=True),
        sa.Column('keywords', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('season', sa.String(length=20), nullable=True),
        sa.Column('best_for', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('keywords_updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    # Context search filters on keywords/bestFor containment
    op.create_index('idx_shop_products_keywords', 'shop_products', ['keywords'], postgresql_using='gin')
    op.create_index('idx_shop_products_best_for', 'shop_products', ['best_for'], postgresql_using='gin')
    op.create_index('idx_shop_products_season', 'shop_products', ['season'])


def downgrade() -> None:
    op.drop_index('idx_shop_products_season', table_name='shop_products')
    op.drop_index('idx_shop_products_best_for', table_name='shop_products')
    op.drop_index('idx_shop_products_keywords', table_name='shop_products')
    op.drop_table('shop_products')
