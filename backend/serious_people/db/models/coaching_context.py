"""CoachingContext model: interview and module output the plan generator reads."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Uuid

from serious_people.db.base import Base, JSONType


class CoachingContext(Base):
    """Upstream coaching data for one user.

    coaching_plan: {"name": str, "modules": [{name, objective, approach, outcome}],
                    "planned_artifacts": [artifact_key, ...] (optional)}
    dossier: {"interview_analysis": {...}, "module_records": [{...}]}
    transcripts: {"interview" | "module_1" | "module_2" | "module_3":
                  {"messages": [{role, content}], "summary": str | None}}
    """

    __tablename__ = "coaching_contexts"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, unique=True, index=True)

    client_name = Column(String(255), nullable=True)
    coaching_plan = Column(JSONType, nullable=False, default=dict)
    dossier = Column(JSONType, nullable=True)
    transcripts = Column(JSONType, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
