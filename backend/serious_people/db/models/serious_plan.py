"""SeriousPlan model: one graduation deliverable per user."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text, Uuid

from serious_people.db.base import Base


class SeriousPlan(Base):
    """Groups the generated artifacts and the coach letter for one user.

    Overall status is derived from artifact statuses at read time and is
    deliberately not stored here. The coach letter has its own lifecycle,
    pending -> generating -> complete | error, generated alongside the artifacts.
    """

    __tablename__ = "serious_plans"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    # Unique: at most one plan per user, enforced by the database
    user_id = Column(String(255), nullable=False, unique=True, index=True)

    # Coach letter
    coach_letter_status = Column(String(20), nullable=False, default="pending")
    coach_letter_content = Column(Text, nullable=True)  # None unless complete
    coach_letter_error = Column(Text, nullable=True)
    coach_letter_started_at = Column(DateTime(timezone=True), nullable=True)
    coach_letter_completed_at = Column(DateTime(timezone=True), nullable=True)
    coach_letter_seen_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
