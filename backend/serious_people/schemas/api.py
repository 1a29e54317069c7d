"""Request / response models for the HTTP API (camelCase on the wire)."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from serious_people.domain.journey import CompletionState, JourneyPosition
from serious_people.services.letter_service import CoachLetterView
from serious_people.services.plan_service import PlanView


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ==================== JOURNEY ====================


class CompletionStateResponse(CamelModel):
    interview_complete: bool
    payment_verified: bool
    module1_complete: bool
    module2_complete: bool
    module3_complete: bool
    has_plan: bool


class JourneyResponse(CamelModel):
    step: str
    current_path: str
    state: CompletionStateResponse

    @classmethod
    def build(cls, position: JourneyPosition, state: CompletionState) -> "JourneyResponse":
        return cls(
            step=position.step.value,
            current_path=position.path,
            state=CompletionStateResponse(**state.as_dict()),
        )


# ==================== SERIOUS PLAN ====================


class PlanCreatedResponse(CamelModel):
    plan_id: uuid.UUID
    created: bool


class EnsureArtifactsRequest(CamelModel):
    user_id: str = Field(..., min_length=1)
    force_regenerate: bool = False


class EnsureArtifactsResponse(CamelModel):
    user_id: str
    plan_id: uuid.UUID
    created: bool
    artifact_keys: list[str]


class ArtifactResponse(CamelModel):
    id: uuid.UUID
    artifact_key: str
    title: str
    artifact_type: str
    importance_level: str
    why_important: str | None = None
    display_order: int
    generation_status: str
    content: str | None = None
    metadata: dict | None = None
    error: str | None = None

    @classmethod
    def from_row(cls, artifact) -> "ArtifactResponse":
        return cls(
            id=artifact.id,
            artifact_key=artifact.artifact_key,
            title=artifact.title,
            artifact_type=artifact.artifact_type,
            importance_level=artifact.importance_level,
            why_important=artifact.why_important,
            display_order=artifact.display_order,
            generation_status=artifact.generation_status,
            content=artifact.content,
            metadata=artifact.artifact_metadata,
            error=artifact.error_detail,
        )


class PlanResponse(CamelModel):
    id: uuid.UUID
    status: str
    coach_letter_status: str
    created_at: datetime
    artifacts: list[ArtifactResponse]

    @classmethod
    def from_view(cls, view: PlanView) -> "PlanResponse":
        return cls(
            id=view.plan.id,
            status=view.status.value,
            coach_letter_status=view.plan.coach_letter_status,
            created_at=view.plan.created_at,
            artifacts=[ArtifactResponse.from_row(a) for a in view.artifacts],
        )


class CoachLetterResponse(CamelModel):
    status: str
    content: str | None = None
    seen_at: datetime | None = None

    @classmethod
    def from_view(cls, view: CoachLetterView) -> "CoachLetterResponse":
        return cls(status=view.status, content=view.content, seen_at=view.seen_at)
