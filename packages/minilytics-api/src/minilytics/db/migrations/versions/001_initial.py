"""Initial schema - sites and page_views.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Sites table
    op.create_table(
        "sites",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("site_id", sa.String(36), nullable=False),
        sa.Column("user_id", sa.String(255), nullable=False),
        sa.Column("domain", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_sites_site_id", "sites", ["site_id"], unique=True)
    op.create_index("ix_sites_user_id_created_at", "sites", ["user_id", "created_at"])

    # Page views table; site_id is a soft reference, no foreign key
    op.create_table(
        "page_views",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("domain", sa.String(255), nullable=False),
        sa.Column("path", sa.String(2048), nullable=False),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("site_id", sa.String(36), nullable=True),
        sa.Column("title", sa.String(512), nullable=True),
        sa.Column("event", sa.String(128), nullable=True),
        sa.Column("properties", sa.Text(), nullable=True),
    )
    op.create_index(
        "ix_page_views_site_id_created_at", "page_views", ["site_id", "created_at"]
    )


def downgrade() -> None:
    op.drop_index("ix_page_views_site_id_created_at", table_name="page_views")
    op.drop_table("page_views")
    op.drop_index("ix_sites_user_id_created_at", table_name="sites")
    op.drop_index("ix_sites_site_id", table_name="sites")
    op.drop_table("sites")
