"""Initial chat store schema

Revision ID: 001
Revises:
Create Date: 2026-10-19

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
    # user_chats table
    op.create_table(
        "user_chats",
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("chats", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("user_id"),
    )


def downgrade() -> None:
    op.drop_table("user_chats")
