"""Create the fortune_cookies table.

Revision ID: 20250101_000001
Revises: None
Create Date: 2025-01-01
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "20250101_000001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create fortune_cookies (id, value)."""
    op.create_table(
        "fortune_cookies",
        sa.Column(
            "id",
            sa.BigInteger().with_variant(sa.Integer(), "sqlite"),
            primary_key=True,
            autoincrement=True,
        ),
        sa.Column("value", sa.Text(), nullable=False),
        mysql_charset="utf8mb4",
        mysql_collate="utf8mb4_unicode_ci",
    )


def downgrade() -> None:
    """Drop fortune_cookies."""
    op.drop_table("fortune_cookies")
