"""Re-export all models so Base.metadata sees them."""

from serious_people.db.models.coaching_context import CoachingContext
from serious_people.db.models.completion_record import CompletionRecord
from serious_people.db.models.plan_artifact import PlanArtifact
from serious_people.db.models.serious_plan import SeriousPlan

__all__ = [
    "CoachingContext",
    "CompletionRecord",
    "PlanArtifact",
    "SeriousPlan",
]
