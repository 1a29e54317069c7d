"""PlanArtifact model: one independently generated unit of a Serious Plan."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid

from serious_people.db.base import Base, JSONType


class PlanArtifact(Base):
    """Artifact row with its own generation lifecycle.

    pending -> generating -> complete | error. content is set only when complete.
    Transcript artifacts are copied from the coaching sessions and start complete.
    """

    __tablename__ = "plan_artifacts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    plan_id = Column(Uuid, ForeignKey("serious_plans.id"), nullable=False, index=True)
    artifact_key = Column(String(50), nullable=False)  # ArtifactKind value or transcript_*

    # Presentation
    title = Column(String(255), nullable=False)
    artifact_type = Column(String(50), nullable=False)  # snapshot, plan, script, transcript, ...
    importance_level = Column(String(20), nullable=False, default="recommended")
    why_important = Column(Text, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)

    # Generation
    generation_status = Column(String(20), nullable=False, default="pending", index=True)
    content = Column(Text, nullable=True)  # None unless complete
    artifact_metadata = Column("metadata", JSONType, nullable=True)  # kind-specific structured data
    error_detail = Column(Text, nullable=True)  # Only when status is error
    generation_started_at = Column(DateTime(timezone=True), nullable=True)
    generation_completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # One artifact per kind per plan
    __table_args__ = (UniqueConstraint("plan_id", "artifact_key", name="uq_plan_artifact_key"),)
