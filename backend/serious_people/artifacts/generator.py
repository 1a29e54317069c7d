"""ContentGenerator Protocol: the testable seam for artifact content.

The generation job only ever talks to this protocol. FakeContentGenerator
backs tests; AnthropicContentGenerator backs production.
"""

from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from serious_people.domain.horizon import PlanHorizon, determine_plan_horizon
from serious_people.schemas.artifacts import ArtifactDraft, ArtifactKind

# Label used for the coach letter in errors and logs
COACH_LETTER_KEY = "coach_letter"


@dataclass(frozen=True)
class GenerationContext:
    """Everything a generator may read about the client."""

    user_id: str
    client_name: str
    coaching_plan: dict = field(default_factory=dict)
    dossier: dict | None = None
    horizon: PlanHorizon | None = None

    @classmethod
    def from_record(cls, record) -> "GenerationContext":
        """Build from a CoachingContext row, deriving the plan horizon."""
        return cls(
            user_id=record.user_id,
            client_name=record.client_name or "the client",
            coaching_plan=record.coaching_plan or {},
            dossier=record.dossier,
            horizon=determine_plan_horizon(record.dossier),
        )


@runtime_checkable
class ContentGenerator(Protocol):
    """Produces the draft content for one artifact kind, and the coach letter."""

    async def generate(self, kind: ArtifactKind, context: GenerationContext) -> ArtifactDraft:
        """Generate one artifact.

        Args:
            kind: Artifact kind to produce
            context: Client coaching data

        Returns:
            Validated ArtifactDraft

        Raises:
            ContentGenerationError: If the draft cannot be produced
        """
        ...

    async def write_coach_letter(self, context: GenerationContext) -> str:
        """Write the short graduation note from the coach.

        Returns:
            Letter text (plain paragraphs, starting with the client's name)

        Raises:
            ContentGenerationError: If the letter cannot be produced
        """
        ...
