"""create completion, coaching context and serious plan tables

Revision ID: b7d2e4f1a9c3
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b7d2e4f1a9c3"
down_revision: str | Sequence[str] | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create completion_records, coaching_contexts, serious_plans and plan_artifacts."""
    op.create_table(
        "completion_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("interview_complete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("payment_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("module1_complete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("module2_complete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("module3_complete", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("has_plan", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_completion_records_user_id"), "completion_records", ["user_id"], unique=True)

    op.create_table(
        "coaching_contexts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("client_name", sa.String(length=255), nullable=True),
        sa.Column("coaching_plan", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default="{}"),
        sa.Column("dossier", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_coaching_contexts_user_id"), "coaching_contexts", ["user_id"], unique=True)

    op.create_table(
        "serious_plans",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_serious_plans_user_id"), "serious_plans", ["user_id"], unique=True)

    op.create_table(
        "plan_artifacts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("plan_id", sa.Uuid(), nullable=False),
        sa.Column("artifact_key", sa.String(length=50), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("artifact_type", sa.String(length=50), nullable=False),
        sa.Column("importance_level", sa.String(length=20), nullable=False, server_default="recommended"),
        sa.Column("why_important", sa.Text(), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("generation_status", sa.String(length=20), nullable=False, server_default="pending"),
        sa.Column("content", sa.Text(), nullable=True),
        sa.Column("metadata", postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column("error_detail", sa.Text(), nullable=True),
        sa.Column("generation_started_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("generation_completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["plan_id"], ["serious_plans.id"]),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("plan_id", "artifact_key", name="uq_plan_artifact_key"),
    )
    op.create_index(op.f("ix_plan_artifacts_plan_id"), "plan_artifacts", ["plan_id"], unique=False)
    op.create_index(
        op.f("ix_plan_artifacts_generation_status"), "plan_artifacts", ["generation_status"], unique=False
    )


def downgrade() -> None:
    """Drop the serious plan tables."""
    op.drop_index(op.f("ix_plan_artifacts_generation_status"), table_name="plan_artifacts")
    op.drop_index(op.f("ix_plan_artifacts_plan_id"), table_name="plan_artifacts")
    op.drop_table("plan_artifacts")
    op.drop_index(op.f("ix_serious_plans_user_id"), table_name="serious_plans")
    op.drop_table("serious_plans")
    op.drop_index(op.f("ix_coaching_contexts_user_id"), table_name="coaching_contexts")
    op.drop_table("coaching_contexts")
    op.drop_index(op.f("ix_completion_records_user_id"), table_name="completion_records")
    op.drop_table("completion_records")
