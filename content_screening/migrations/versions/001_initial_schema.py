"""Initial bookmark store schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

Creates the categories, bookmarks, digest posts and scan history tables.
For databases already created with init_db(), mark this migration as
complete without running it:
    alembic stamp 001
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # link_categories table
    op.create_table(
        "link_categories",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    # bookmarks table
    op.create_table(
        "bookmarks",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("url", sa.Text(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("score", sa.Integer(), nullable=False),
        sa.Column("confidence", sa.Integer(), nullable=True, default=0),
        sa.Column("visible", sa.String(length=1), nullable=False, server_default="N"),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["category_id"], ["link_categories.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_bookmarks_visible", "bookmarks", ["visible"])
    op.create_index("idx_bookmarks_category_id", "bookmarks", ["category_id"])

    # digest_posts table
    op.create_table(
        "digest_posts",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("excerpt", sa.Text(), nullable=True),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("status", sa.Text(), nullable=False, server_default="draft"),
        sa.Column("author_id", sa.Integer(), nullable=False),
        sa.Column("category_id", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # scan_history table
    op.create_table(
        "scan_history",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("run_at", sa.Integer(), nullable=False),
        sa.Column("candidates", sa.Integer(), nullable=True, default=0),
        sa.Column("extracted", sa.Integer(), nullable=True, default=0),
        sa.Column("scored", sa.Integer(), nullable=True, default=0),
        sa.Column("created", sa.Integer(), nullable=True, default=0),
        sa.PrimaryKeyConstraint("id"),
    )


def downgrade() -> None:
    op.drop_table("scan_history")
    op.drop_table("digest_posts")
    op.drop_index("idx_bookmarks_category_id", table_name="bookmarks")
    op.drop_index("idx_bookmarks_visible", table_name="bookmarks")
    op.drop_table("bookmarks")
    op.drop_table("link_categories")
