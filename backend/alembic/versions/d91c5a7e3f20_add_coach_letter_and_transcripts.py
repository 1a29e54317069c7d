"""add coach letter to serious_plans and transcripts to coaching_contexts

Revision ID: d91c5a7e3f20
Revises: b7d2e4f1a9c3
Create Date: 2026-10-17 12:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "d91c5a7e3f20"
down_revision: str | Sequence[str] | None = "b7d2e4f1a9c3"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

LETTER_COLUMNS = [
    "coach_letter_content",
    "coach_letter_error",
    "coach_letter_started_at",
    "coach_letter_completed_at",
    "coach_letter_seen_at",
]


def upgrade() -> None:
    """Add the coach letter lifecycle columns and the transcripts column."""
    op.add_column(
        "serious_plans",
        sa.Column("coach_letter_status", sa.String(length=20), nullable=False, server_default="pending"),
    )
    op.add_column("serious_plans", sa.Column("coach_letter_content", sa.Text(), nullable=True))
    op.add_column("serious_plans", sa.Column("coach_letter_error", sa.Text(), nullable=True))
    op.add_column("serious_plans", sa.Column("coach_letter_started_at", sa.DateTime(timezone=True), nullable=True))
    op.add_column("serious_plans", sa.Column("coach_letter_completed_at", sa.DateTime(timezone=True), nullable=True))
    op.add_column("serious_plans", sa.Column("coach_letter_seen_at", sa.DateTime(timezone=True), nullable=True))
    op.add_column(
        "coaching_contexts",
        sa.Column("transcripts", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
    )


def downgrade() -> None:
    """Remove the coach letter and transcripts columns."""
    op.drop_column("coaching_contexts", "transcripts")
    for column in reversed(LETTER_COLUMNS):
        op.drop_column("serious_plans", column)
    op.drop_column("serious_plans", "coach_letter_status")
