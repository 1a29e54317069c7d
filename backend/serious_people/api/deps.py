"""Shared FastAPI dependencies: journey gate, services and error translation."""

from fastapi import Depends, HTTPException

from serious_people.artifacts.generator import ContentGenerator
from serious_people.artifacts.generator_real import AnthropicContentGenerator
from serious_people.core.auth import AuthUser, require_auth
from serious_people.core.config import get_settings
from serious_people.core.exceptions import (
    ArtifactCatalogError,
    ArtifactNotFoundError,
    ArtifactStateError,
    ContextNotReadyError,
    PlanBusyError,
    PlanNotFoundError,
    SeriousPeopleError,
)
from serious_people.core.locking import PlanLock
from serious_people.db.base import get_session_factory
from serious_people.domain.journey import JourneyStep, gate
from serious_people.services.artifact_job import ArtifactGenerationJob
from serious_people.services.completion_service import CompletionService
from serious_people.services.letter_service import CoachLetterService
from serious_people.services.plan_service import PlanAggregator


def get_generator() -> ContentGenerator:
    """Dependency that provides the content generator.

    Override this dependency in tests via app.dependency_overrides.
    """
    return AnthropicContentGenerator()


def get_completion_service() -> CompletionService:
    return CompletionService(get_session_factory())


def get_plan_aggregator() -> PlanAggregator:
    return PlanAggregator(get_session_factory())


def get_letter_service() -> CoachLetterService:
    return CoachLetterService(get_session_factory())


def get_artifact_job(generator: ContentGenerator = Depends(get_generator)) -> ArtifactGenerationJob:
    settings = get_settings()
    return ArtifactGenerationJob(
        session_factory=get_session_factory(),
        generator=generator,
        lock=PlanLock(ttl=settings.plan_lock_ttl_seconds),
        settings=settings,
    )


def require_step(step: JourneyStep):
    """Dependency factory: allow the request only if the user has reached ``step``.

    Usage::

        @router.get("/latest")
        async def latest(user: AuthUser = Depends(require_step(JourneyStep.GRADUATION))):
            ...
    """

    async def _journey_gate(
        user: AuthUser = Depends(require_auth),
        completion: CompletionService = Depends(get_completion_service),
    ) -> AuthUser:
        state = await completion.get_state(user.user_id)
        decision = gate(step, state)
        if not decision.allowed:
            raise HTTPException(
                status_code=403,
                detail={
                    "code": "journey_gate",
                    "requiredStep": step.value,
                    "currentStep": decision.current_step.value,
                    "currentPath": decision.redirect_path,
                },
            )
        return user

    return _journey_gate


def to_http_exception(exc: SeriousPeopleError) -> HTTPException:
    """Translate a domain exception into the matching HTTP error."""
    settings = get_settings()

    if isinstance(exc, ContextNotReadyError):
        return HTTPException(
            status_code=409,
            detail={"code": "context_not_ready", "message": str(exc), "retryable": True},
            headers={"Retry-After": str(settings.context_retry_after_seconds)},
        )
    if isinstance(exc, PlanBusyError):
        return HTTPException(
            status_code=409,
            detail={"code": "plan_busy", "message": str(exc), "retryable": True},
            headers={"Retry-After": "1"},
        )
    if isinstance(exc, ArtifactStateError):
        return HTTPException(
            status_code=409,
            detail={"code": "artifact_busy", "message": str(exc), "retryable": False},
        )
    if isinstance(exc, (PlanNotFoundError, ArtifactNotFoundError)):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ArtifactCatalogError):
        return HTTPException(status_code=422, detail={"code": "invalid_catalog", "message": str(exc)})

    return HTTPException(status_code=500, detail="Internal server error")
