"""Create schools and school_embeddings tables

Revision ID: 20261017_0001_schools_and_embeddings
Revises:
Create Date: 2026-10-17 00:01:00.000000
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "20261017_0001_schools_and_embeddings"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the schools table and its packed-vector companion table."""
    op.create_table(
        "schools",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.Text(), nullable=False),
        sa.Column("city", sa.String(length=100), nullable=False),
        sa.Column("state", sa.String(length=100), nullable=False),
        sa.Column("contact", sa.String(length=32), nullable=False),
        sa.Column("image", sa.Text(), nullable=True),
        sa.Column("email_id", sa.String(length=255), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_schools_name", "schools", ["name"])

    op.create_table(
        "school_embeddings",
        sa.Column(
            "school_id",
            sa.Integer(),
            sa.ForeignKey("schools.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column(
            "embedding",
            sa.LargeBinary(),
            nullable=False,
            comment="packed little-endian float32",
        ),
        sa.Column("dimension", sa.Integer(), nullable=False),
        sa.Column("model", sa.String(length=255), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )


def downgrade() -> None:
    """Drop school_embeddings before schools (foreign key)."""
    op.drop_table("school_embeddings")
    op.drop_index("ix_schools_name", table_name="schools")
    op.drop_table("schools")
