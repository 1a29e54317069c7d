"""FakeContentGenerator: Scenario-based test double for ContentGenerator.

Provides deterministic responses for named scenarios:
- happy_path: Every kind and the coach letter return realistic content
- llm_failure: Every kind and the coach letter raise ContentGenerationError
- partial: Kinds listed in failing_kinds raise, the rest succeed
- malformed: Returns payloads that fail draft validation and an empty letter
- slow: Like happy_path but sleeps `delay` seconds first (timeout tests)

fail_letter makes only the coach letter fail, whatever the scenario.
"""

import asyncio
from collections import Counter

from serious_people.artifacts.generator import COACH_LETTER_KEY, GenerationContext
from serious_people.core.exceptions import ContentGenerationError
from serious_people.domain.horizon import HorizonType
from serious_people.schemas.artifacts import ARTIFACT_CATALOG, ArtifactDraft, ArtifactKind, parse_draft


class FakeContentGenerator:
    """Scenario-based test double for the ContentGenerator protocol."""

    VALID_SCENARIOS = {"happy_path", "llm_failure", "partial", "malformed", "slow"}

    def __init__(
        self,
        scenario: str = "happy_path",
        failing_kinds: set[ArtifactKind] | None = None,
        delay: float = 0.0,
        fail_letter: bool = False,
    ):
        """Initialize with a named scenario.

        Args:
            scenario: One of VALID_SCENARIOS
            failing_kinds: Kinds that fail under the 'partial' scenario
            delay: Seconds to sleep before answering (any scenario)
            fail_letter: Make the coach letter fail

        Raises:
            ValueError: If scenario is not recognized
        """
        if scenario not in self.VALID_SCENARIOS:
            raise ValueError(f"Unknown scenario: {scenario}. Valid scenarios: {self.VALID_SCENARIOS}")
        self.scenario = scenario
        self.failing_kinds = set(failing_kinds or ())
        self.delay = delay
        self.fail_letter = fail_letter
        self.calls: Counter[ArtifactKind] = Counter()
        self.letter_calls = 0

    async def generate(self, kind: ArtifactKind, context: GenerationContext) -> ArtifactDraft:
        self.calls[kind] += 1

        if self.delay:
            await asyncio.sleep(self.delay)

        if self.scenario == "llm_failure":
            raise ContentGenerationError(kind.value, "Anthropic API rate limit exceeded. Retry after 60 seconds.")

        if self.scenario == "partial" and kind in self.failing_kinds:
            raise ContentGenerationError(kind.value, "Anthropic API overloaded")

        if self.scenario == "malformed":
            return parse_draft(kind, {"title": "", "content": None})

        return parse_draft(kind, self._build_payload(kind, context))

    async def write_coach_letter(self, context: GenerationContext) -> str:
        self.letter_calls += 1

        if self.delay:
            await asyncio.sleep(self.delay)

        if self.fail_letter or self.scenario == "llm_failure":
            raise ContentGenerationError(COACH_LETTER_KEY, "Anthropic API overloaded")

        if self.scenario == "malformed":
            return ""

        plan_name = context.coaching_plan.get("name", "your next move")
        return (
            f"{context.client_name},\n\n"
            f"You came in weighing {plan_name.lower()} and left with a decision you can defend.\n\n"
            "Keep the plan small and start this week. You know what to do next."
        )

    def _build_payload(self, kind: ArtifactKind, context: GenerationContext) -> dict:
        spec = ARTIFACT_CATALOG[kind]
        horizon = context.horizon.type if context.horizon else HorizonType.DAYS_90
        payload = {
            "title": spec.title,
            "type": spec.artifact_type,
            "importance_level": spec.importance.value,
            "why_important": f"{context.client_name} needs a clear {spec.title.lower()} before acting.",
            "content": f"# {spec.title}\n\nPrepared for {context.client_name} over {horizon.label}.",
        }

        if kind == ArtifactKind.ACTION_PLAN:
            payload["metadata"] = {
                "horizon": horizon.value,
                "intervals": [
                    {"label": "Week 1-2", "tasks": ["Draft the conversation with your manager"]},
                    {"label": "Week 3-4", "tasks": ["Reach out to three people in the target field"]},
                ],
            }
        elif kind == ArtifactKind.RISK_MAP:
            payload["metadata"] = {
                "risks": [
                    {
                        "name": "Counter-offer pressure",
                        "likelihood": "Med",
                        "impact": "Delays the move by a quarter",
                        "mitigation": "Decide your walk-away terms in advance",
                        "fallback": "Set a hard revisit date",
                    }
                ]
            }
        elif kind == ArtifactKind.RESOURCES:
            payload["metadata"] = {
                "resources": [
                    {
                        "title": "Designing Your Life",
                        "url": "https://designingyour.life/",
                        "why": "Structured prototyping for career options",
                    }
                ]
            }
        return payload
