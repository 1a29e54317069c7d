"""CompletionRecord model: per-user stage completion flags (journey ground truth)."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, String, Uuid

from serious_people.db.base import Base


class CompletionRecord(Base):
    """One row per user, written by upstream stage-completion events.

    Flags are monotonic: once True they are never written back to False.
    """

    __tablename__ = "completion_records"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(String(255), nullable=False, unique=True, index=True)

    interview_complete = Column(Boolean, nullable=False, default=False)
    payment_verified = Column(Boolean, nullable=False, default=False)
    module1_complete = Column(Boolean, nullable=False, default=False)
    module2_complete = Column(Boolean, nullable=False, default=False)
    module3_complete = Column(Boolean, nullable=False, default=False)
    has_plan = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
