"""SQLAlchemy metadata definitions for passwordless token tables."""

from __future__ import annotations

import sqlalchemy as sa

metadata = sa.MetaData()

passwordless_tokens = sa.Table(
    "passwordless_tokens",
    metadata,
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
sa.Index("ix_passwordless_tokens_expires_at", passwordless_tokens.c.expires_at)
