"""Create passwordless token records table."""

from __future__ import annotations

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_passwordless_tokens"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "passwordless_tokens",
        sa.Column("user_id", sa.Text(), primary_key=True, nullable=False),
        sa.Column("token", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("referrer", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint("token", name="uq_passwordless_tokens_token"),
    )
    op.create_index(
        "ix_passwordless_tokens_expires_at",
        "passwordless_tokens",
        ["expires_at"],
        unique=False,
    )


def downgrade() -> None:
    """Drop passwordless token records table."""

    op.drop_index("ix_passwordless_tokens_expires_at", table_name="passwordless_tokens")
    op.drop_table("passwordless_tokens")
