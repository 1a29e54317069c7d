"""Artifact catalog and draft schemas.

Each ArtifactKind maps to an ArtifactKindSpec describing its title, type,
importance, generation guidelines and (optionally) the pydantic model its
structured metadata must satisfy. Generator output is validated against the
kind's catalog entry before it is persisted.
"""

from dataclasses import dataclass
from enum import StrEnum

from pydantic import BaseModel, Field, ValidationError

from serious_people.core.exceptions import ContentGenerationError


class ArtifactKind(StrEnum):
    """Artifact kinds a Serious Plan can contain."""

    DECISION_SNAPSHOT = "decision_snapshot"
    ACTION_PLAN = "action_plan"
    BOSS_CONVERSATION = "boss_conversation"
    PARTNER_CONVERSATION = "partner_conversation"
    SELF_NARRATIVE = "self_narrative"
    RISK_MAP = "risk_map"
    MODULE_RECAP = "module_recap"
    RESOURCES = "resources"


class ImportanceLevel(StrEnum):
    MUST_READ = "must_read"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"
    BONUS = "bonus"


# ==================== KIND-SPECIFIC METADATA ====================


class ActionInterval(BaseModel):
    label: str = Field(..., description="Interval label, e.g. 'Week 1-2'")
    tasks: list[str] = Field(default_factory=list)


class ActionPlanMetadata(BaseModel):
    horizon: str = Field(..., description="Plan horizon type, e.g. '90_days'")
    intervals: list[ActionInterval] = Field(default_factory=list)


class RiskItem(BaseModel):
    name: str
    likelihood: str = Field(..., description="High / Med / Low")
    impact: str
    mitigation: str
    fallback: str | None = None


class RiskMapMetadata(BaseModel):
    risks: list[RiskItem]


class ResourceItem(BaseModel):
    title: str
    url: str
    why: str | None = None


class ResourcesMetadata(BaseModel):
    resources: list[ResourceItem]


# ==================== CATALOG ====================


@dataclass(frozen=True)
class ArtifactKindSpec:
    """Static description of one artifact kind."""

    kind: ArtifactKind
    title: str
    artifact_type: str
    importance: ImportanceLevel
    guidelines: str  # may reference {horizon}
    metadata_model: type[BaseModel] | None = None

    def render_guidelines(self, horizon_label: str) -> str:
        return self.guidelines.format(horizon=horizon_label)


ARTIFACT_CATALOG: dict[ArtifactKind, ArtifactKindSpec] = {
    ArtifactKind.DECISION_SNAPSHOT: ArtifactKindSpec(
        kind=ArtifactKind.DECISION_SNAPSHOT,
        title="Your Decision Snapshot",
        artifact_type="snapshot",
        importance=ImportanceLevel.MUST_READ,
        guidelines=(
            "One-page decision summary including:\n"
            "- Current situation in 2-3 sentences\n"
            "- 2-4 realistic options with pros/cons for each\n"
            "- Clear recommendation with rationale\n"
            '- "If you only do one thing..." action line'
        ),
    ),
    ArtifactKind.ACTION_PLAN: ArtifactKindSpec(
        kind=ArtifactKind.ACTION_PLAN,
        title="Your Action Plan",
        artifact_type="plan",
        importance=ImportanceLevel.MUST_READ,
        guidelines=(
            "Time-boxed action plan for {horizon}:\n"
            "- Divide into logical time intervals (Week 1-2, Week 3-4, etc.)\n"
            "- 2-4 specific, actionable tasks per interval\n"
            "- Include deadlines and success criteria\n"
            "- End with a \"How to know you're on track\" section\n"
            'metadata: {{"horizon": str, "intervals": [{{"label": str, "tasks": [str]}}]}}'
        ),
        metadata_model=ActionPlanMetadata,
    ),
    ArtifactKind.BOSS_CONVERSATION: ArtifactKindSpec(
        kind=ArtifactKind.BOSS_CONVERSATION,
        title="Talking to Your Boss",
        artifact_type="script",
        importance=ImportanceLevel.RECOMMENDED,
        guidelines=(
            "Practical conversation guide:\n"
            "- Goal of the conversation\n"
            "- Opening lines (2-3 options)\n"
            "- Core message and talking points\n"
            "- Likely pushbacks and how to respond\n"
            "- Red lines / what not to say\n"
            "- Closing / next steps"
        ),
    ),
    ArtifactKind.PARTNER_CONVERSATION: ArtifactKindSpec(
        kind=ArtifactKind.PARTNER_CONVERSATION,
        title="Talking to Your Partner",
        artifact_type="script",
        importance=ImportanceLevel.RECOMMENDED,
        guidelines=(
            "Conversation guide for discussing the decision with a partner:\n"
            "- Goal and context\n"
            "- Opening approach\n"
            "- Key points to cover\n"
            "- How to address concerns about money and stability\n"
            "- Collaborative next steps"
        ),
    ),
    ArtifactKind.SELF_NARRATIVE: ArtifactKindSpec(
        kind=ArtifactKind.SELF_NARRATIVE,
        title="Your Story to Yourself",
        artifact_type="memo",
        importance=ImportanceLevel.RECOMMENDED,
        guidelines=(
            "Internal memo / personal reflection:\n"
            "- How to describe this moment to yourself\n"
            "- What you're moving toward (not just away from)\n"
            "- Core values this decision honors"
        ),
    ),
    ArtifactKind.RISK_MAP: ArtifactKindSpec(
        kind=ArtifactKind.RISK_MAP,
        title="Your Risk Map",
        artifact_type="snapshot",
        importance=ImportanceLevel.RECOMMENDED,
        guidelines=(
            "Risk assessment:\n"
            "- List 4-6 key risks\n"
            "- For each: likelihood (High/Med/Low), impact, mitigation strategy, fallback plan\n"
            "- Include both external risks and personal/emotional risks\n"
            'metadata: {{"risks": [{{"name", "likelihood", "impact", "mitigation", "fallback"}}]}}'
        ),
        metadata_model=RiskMapMetadata,
    ),
    ArtifactKind.MODULE_RECAP: ArtifactKindSpec(
        kind=ArtifactKind.MODULE_RECAP,
        title="Your Coaching Recap",
        artifact_type="recap",
        importance=ImportanceLevel.RECOMMENDED,
        guidelines=(
            "Summary of the coaching journey:\n"
            "- For each module: key topics, decisions made, major insights\n"
            "- Overall arc of the conversation"
        ),
    ),
    ArtifactKind.RESOURCES: ArtifactKindSpec(
        kind=ArtifactKind.RESOURCES,
        title="Curated Resources",
        artifact_type="resources",
        importance=ImportanceLevel.OPTIONAL,
        guidelines=(
            "5-8 credible, relevant resources formatted as markdown links:\n"
            "- [Resource Name](URL) - why THIS client needs it\n"
            "- Only include URLs you are confident exist\n"
            'metadata: {{"resources": [{{"title", "url", "why"}}]}}'
        ),
        metadata_model=ResourcesMetadata,
    ),
}


def resolve_catalog(keys: list[str]) -> list[ArtifactKindSpec]:
    """Turn a list of artifact keys into catalog specs, preserving order.

    Raises:
        ValueError: On unknown or duplicate keys
    """
    specs: list[ArtifactKindSpec] = []
    seen: set[ArtifactKind] = set()
    for key in keys:
        try:
            kind = ArtifactKind(key)
        except ValueError as exc:
            raise ValueError(f"Unknown artifact kind: {key}") from exc
        if kind in seen:
            raise ValueError(f"Duplicate artifact kind: {key}")
        seen.add(kind)
        specs.append(ARTIFACT_CATALOG[kind])
    if not specs:
        raise ValueError("Artifact catalog cannot be empty")
    return specs


# ==================== GENERATOR OUTPUT ====================


class ArtifactDraft(BaseModel):
    """Validated generator output for one artifact."""

    title: str = Field(..., min_length=1)
    type: str | None = None
    importance_level: ImportanceLevel | None = None
    why_important: str | None = None
    content: str = Field(..., min_length=1, description="Markdown body")
    metadata: dict | None = None


def parse_draft(kind: ArtifactKind, payload: dict) -> ArtifactDraft:
    """Validate raw generator output against the kind's expected shape.

    Raises:
        ContentGenerationError: If the payload does not match
    """
    try:
        draft = ArtifactDraft.model_validate(payload)
        spec = ARTIFACT_CATALOG[kind]
        if spec.metadata_model is not None and draft.metadata is not None:
            draft.metadata = spec.metadata_model.model_validate(draft.metadata).model_dump()
        elif spec.metadata_model is None:
            draft.metadata = None
    except ValidationError as exc:
        raise ContentGenerationError(kind.value, f"invalid draft: {exc.error_count()} validation error(s)") from exc

    if not draft.content.strip():
        raise ContentGenerationError(kind.value, "empty content")
    return draft
