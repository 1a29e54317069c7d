"""Serious Plan API routes: creation, aggregate read, coach letter, admin repair
and per-artifact retry.

Generation never runs inside the request: routes return as soon as the plan
and its pending artifacts exist and schedule the job as a background task.
Domain errors propagate to the app's SeriousPeopleError handler, which maps
them to HTTP responses.
"""

from uuid import UUID

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends

from serious_people.api.deps import get_artifact_job, get_letter_service, get_plan_aggregator, require_step
from serious_people.core.auth import AuthUser, require_admin
from serious_people.core.exceptions import PlanNotFoundError
from serious_people.domain.journey import JourneyStep
from serious_people.domain.plan_status import GenerationStatus
from serious_people.schemas.api import (
    ArtifactResponse,
    CoachLetterResponse,
    EnsureArtifactsRequest,
    EnsureArtifactsResponse,
    PlanCreatedResponse,
    PlanResponse,
)
from serious_people.services.artifact_job import ArtifactGenerationJob
from serious_people.services.letter_service import CoachLetterService
from serious_people.services.plan_service import PlanAggregator

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post("", response_model=PlanCreatedResponse)
async def create_plan(
    background_tasks: BackgroundTasks,
    user: AuthUser = Depends(require_step(JourneyStep.GRADUATION)),
    job: ArtifactGenerationJob = Depends(get_artifact_job),
) -> PlanCreatedResponse:
    """Create the caller's plan (idempotent) and start generating its artifacts and coach letter."""
    result = await job.ensure_artifacts(user.user_id)

    if result.letter_pending:
        background_tasks.add_task(job.generate_coach_letter, result.plan_id)
    if result.pending_artifact_ids:
        background_tasks.add_task(job.generate_many, result.pending_artifact_ids)

    logger.info(
        "plan_ensure_requested",
        user_id=user.user_id,
        plan_id=str(result.plan_id),
        created=result.created,
        scheduled=len(result.pending_artifact_ids),
        letter_scheduled=result.letter_pending,
    )
    return PlanCreatedResponse(plan_id=result.plan_id, created=result.created)


@router.get("/latest", response_model=PlanResponse)
async def get_latest_plan(
    user: AuthUser = Depends(require_step(JourneyStep.GRADUATION)),
    aggregator: PlanAggregator = Depends(get_plan_aggregator),
) -> PlanResponse:
    """Return the caller's plan with every artifact and the derived status."""
    view = await aggregator.get_plan(user.user_id)
    if view is None:
        raise PlanNotFoundError(user.user_id)
    return PlanResponse.from_view(view)


@router.get("/letter", response_model=CoachLetterResponse)
async def get_coach_letter(
    user: AuthUser = Depends(require_step(JourneyStep.GRADUATION)),
    letters: CoachLetterService = Depends(get_letter_service),
) -> CoachLetterResponse:
    """Return the coach letter; clients poll until its status is terminal."""
    return CoachLetterResponse.from_view(await letters.get_letter(user.user_id))


@router.post("/letter/seen", response_model=CoachLetterResponse)
async def mark_coach_letter_seen(
    user: AuthUser = Depends(require_step(JourneyStep.GRADUATION)),
    letters: CoachLetterService = Depends(get_letter_service),
) -> CoachLetterResponse:
    """Record that the user has read the letter (first time wins)."""
    return CoachLetterResponse.from_view(await letters.mark_seen(user.user_id))


@router.post("/ensure-artifacts", response_model=EnsureArtifactsResponse)
async def ensure_artifacts(
    request: EnsureArtifactsRequest,
    background_tasks: BackgroundTasks,
    admin: AuthUser = Depends(require_admin),
    job: ArtifactGenerationJob = Depends(get_artifact_job),
) -> EnsureArtifactsResponse:
    """Admin repair: create or fix a user's plan and reschedule pending artifacts."""
    result = await job.ensure_artifacts(request.user_id, force_regenerate=request.force_regenerate)

    if result.letter_pending:
        background_tasks.add_task(job.generate_coach_letter, result.plan_id)
    if result.pending_artifact_ids:
        background_tasks.add_task(job.generate_many, result.pending_artifact_ids)

    logger.info(
        "plan_repair_requested",
        admin_id=admin.user_id,
        user_id=request.user_id,
        force_regenerate=request.force_regenerate,
        scheduled=len(result.pending_artifact_ids),
    )
    return EnsureArtifactsResponse(
        user_id=request.user_id,
        plan_id=result.plan_id,
        created=result.created,
        artifact_keys=result.artifact_keys,
    )


@router.post("/artifacts/{artifact_id}/regenerate", response_model=ArtifactResponse)
async def regenerate_artifact(
    artifact_id: UUID,
    background_tasks: BackgroundTasks,
    user: AuthUser = Depends(require_step(JourneyStep.SERIOUS_PLAN)),
    job: ArtifactGenerationJob = Depends(get_artifact_job),
) -> ArtifactResponse:
    """Reset one finished artifact to pending and generate it again."""
    artifact = await job.regenerate_artifact(user.user_id, artifact_id)

    if artifact.generation_status == GenerationStatus.PENDING.value:
        background_tasks.add_task(job.generate, artifact.id)
    return ArtifactResponse.from_row(artifact)
