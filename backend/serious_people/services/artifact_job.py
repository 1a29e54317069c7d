"""ArtifactGenerationJob: creates a user's Serious Plan and drives each artifact,
and the plan's coach letter, through pending -> generating -> complete | error.

Architecture:
- ensure_artifacts runs under the per-user PlanLock; unique constraints on
  serious_plans.user_id and (plan_id, artifact_key) back it up
- Plan, placeholder artifacts, transcript artifacts (already complete) and the
  has_plan flag commit in one transaction
- Every status change is an UPDATE ... WHERE status = :expected compare-and-set;
  the loser sees rowcount == 0 and backs off. Finishing also matches the claim's
  started_at, so only the attempt that owns the row can write its result
- Generation calls run concurrently under a semaphore, each wrapped in
  asyncio.wait_for so nothing can stay in "generating" on timeout
- Per-artifact failures are recorded on the row and never cancel siblings
"""

import asyncio
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import structlog
from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from serious_people.artifacts.generator import COACH_LETTER_KEY, ContentGenerator, GenerationContext
from serious_people.artifacts.transcripts import TRANSCRIPT_TYPE, TranscriptSeed, build_transcript_seeds
from serious_people.core.config import Settings, get_settings
from serious_people.core.exceptions import (
    ArtifactCatalogError,
    ArtifactNotFoundError,
    ArtifactStateError,
    ContentGenerationError,
    ContextNotReadyError,
)
from serious_people.core.locking import PlanLock
from serious_people.db.models.coaching_context import CoachingContext
from serious_people.db.models.plan_artifact import PlanArtifact
from serious_people.db.models.serious_plan import SeriousPlan
from serious_people.domain.plan_status import GenerationStatus
from serious_people.schemas.artifacts import ArtifactKind, ArtifactKindSpec, resolve_catalog
from serious_people.services.completion_service import set_has_plan

logger = structlog.get_logger(__name__)

TERMINAL_VALUES = [GenerationStatus.COMPLETE.value, GenerationStatus.ERROR.value]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class EnsureResult:
    """Outcome of ensure_artifacts."""

    plan_id: uuid.UUID
    created: bool
    artifact_keys: list[str] = field(default_factory=list)
    # Every artifact left in "pending" after the call; safe to schedule because
    # generate() claims rows with compare-and-set
    pending_artifact_ids: list[uuid.UUID] = field(default_factory=list)
    letter_pending: bool = False


class ArtifactGenerationJob:
    """Plan creation, repair, per-artifact generation and the coach letter."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        generator: ContentGenerator,
        lock: PlanLock | None = None,
        settings: Settings | None = None,
    ):
        """Initialize with injected collaborators.

        Args:
            session_factory: SQLAlchemy async session factory
            generator: ContentGenerator (FakeContentGenerator in tests)
            lock: Per-user plan lock (defaults to one on the shared Redis client)
            settings: Settings override (defaults to get_settings())
        """
        self.session_factory = session_factory
        self.generator = generator
        self.settings = settings or get_settings()
        self.lock = lock or PlanLock(ttl=self.settings.plan_lock_ttl_seconds)

    # ==================== PLAN CREATION / REPAIR ====================

    async def ensure_artifacts(self, user_id: str, force_regenerate: bool = False) -> EnsureResult:
        """Make sure the user has a plan with one artifact per catalog kind.

        Args:
            user_id: Plan owner
            force_regenerate: Reset every terminal generated artifact, and the
                coach letter, back to pending

        Returns:
            EnsureResult with the plan id and what is waiting for generation

        Raises:
            ContextNotReadyError: Coaching context has not been written yet
            ArtifactCatalogError: Planned artifact list names an unknown kind
            PlanBusyError: Another request held the plan lock for too long
        """
        async with self.lock.hold(user_id, wait_timeout=self.settings.plan_lock_wait_seconds):
            try:
                return await self._ensure_locked(user_id, force_regenerate)
            except IntegrityError:
                # A writer outside the lock (e.g. lock expiry) won the insert
                logger.info("plan_create_race_resolved", user_id=user_id)
                return await self._ensure_locked(user_id, force_regenerate)

    async def _ensure_locked(self, user_id: str, force_regenerate: bool) -> EnsureResult:
        async with self.session_factory() as session:
            result = await session.execute(select(CoachingContext).where(CoachingContext.user_id == user_id))
            context = result.scalar_one_or_none()
            if context is None:
                raise ContextNotReadyError(user_id)

            specs = self._catalog_for(user_id, context)

            result = await session.execute(select(SeriousPlan).where(SeriousPlan.user_id == user_id))
            plan = result.scalar_one_or_none()
            created = plan is None

            if plan is None:
                plan = SeriousPlan(id=uuid.uuid4(), user_id=user_id, coach_letter_status=GenerationStatus.PENDING.value)
                session.add(plan)
                await session.flush()
                for order, spec in enumerate(specs):
                    session.add(_placeholder(plan.id, spec, order))
                for seed in build_transcript_seeds(context.transcripts, context.dossier):
                    session.add(_transcript(plan.id, seed))
                await set_has_plan(session, user_id)
            else:
                await self._repair(session, plan.id, specs, force_regenerate)

            await session.commit()

            artifacts = await _load_artifacts(session, plan.id)
            letter_status = await session.scalar(
                select(SeriousPlan.coach_letter_status).where(SeriousPlan.id == plan.id)
            )

        pending_ids = [a.id for a in artifacts if a.generation_status == GenerationStatus.PENDING.value]
        if created:
            logger.info("plan_created", user_id=user_id, plan_id=str(plan.id), artifact_count=len(artifacts))
        return EnsureResult(
            plan_id=plan.id,
            created=created,
            artifact_keys=[a.artifact_key for a in artifacts],
            pending_artifact_ids=pending_ids,
            letter_pending=letter_status == GenerationStatus.PENDING.value,
        )

    def _catalog_for(self, user_id: str, context: CoachingContext) -> list[ArtifactKindSpec]:
        keys = (context.coaching_plan or {}).get("planned_artifacts") or self.settings.plan_artifact_keys
        try:
            return resolve_catalog(list(keys))
        except ValueError as exc:
            raise ArtifactCatalogError(user_id, str(exc)) from exc

    async def _repair(
        self,
        session: AsyncSession,
        plan_id: uuid.UUID,
        specs: list[ArtifactKindSpec],
        force_regenerate: bool,
    ) -> None:
        """Reset crashed rows, fill in missing kinds and optionally force a rerun."""
        cutoff = self._watchdog_cutoff()
        result = await session.execute(
            update(PlanArtifact)
            .where(
                PlanArtifact.plan_id == plan_id,
                PlanArtifact.generation_status == GenerationStatus.GENERATING.value,
                or_(
                    PlanArtifact.generation_started_at.is_(None),
                    PlanArtifact.generation_started_at < cutoff,
                ),
            )
            .values({
                PlanArtifact.generation_status: GenerationStatus.PENDING.value,
                PlanArtifact.generation_started_at: None,
            })
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.warning("stale_generation_reset", plan_id=str(plan_id), count=result.rowcount)

        result = await session.execute(
            update(SeriousPlan)
            .where(
                SeriousPlan.id == plan_id,
                SeriousPlan.coach_letter_status == GenerationStatus.GENERATING.value,
                or_(
                    SeriousPlan.coach_letter_started_at.is_(None),
                    SeriousPlan.coach_letter_started_at < cutoff,
                ),
            )
            .values({
                SeriousPlan.coach_letter_status: GenerationStatus.PENDING.value,
                SeriousPlan.coach_letter_started_at: None,
            })
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.warning("stale_coach_letter_reset", plan_id=str(plan_id))

        result = await session.execute(select(PlanArtifact.artifact_key).where(PlanArtifact.plan_id == plan_id))
        existing = set(result.scalars().all())
        missing = [spec for spec in specs if spec.kind.value not in existing]
        if missing:
            # Appended after the generated artifacts already in the plan
            last_order = await session.scalar(
                select(func.max(PlanArtifact.display_order)).where(
                    PlanArtifact.plan_id == plan_id,
                    PlanArtifact.artifact_type != TRANSCRIPT_TYPE,
                )
            )
            next_order = -1 if last_order is None else last_order
            for offset, spec in enumerate(missing, start=1):
                session.add(_placeholder(plan_id, spec, next_order + offset))
                logger.info("missing_artifact_added", plan_id=str(plan_id), artifact_key=spec.kind.value)

        if force_regenerate:
            result = await session.execute(
                update(PlanArtifact)
                .where(
                    PlanArtifact.plan_id == plan_id,
                    PlanArtifact.artifact_type != TRANSCRIPT_TYPE,
                    PlanArtifact.generation_status.in_(TERMINAL_VALUES),
                )
                .values(_reset_values())
                .execution_options(synchronize_session=False)
            )
            letter = await session.execute(
                update(SeriousPlan)
                .where(SeriousPlan.id == plan_id, SeriousPlan.coach_letter_status.in_(TERMINAL_VALUES))
                .values(_letter_reset_values())
                .execution_options(synchronize_session=False)
            )
            logger.info(
                "plan_force_regenerate",
                plan_id=str(plan_id),
                reset_count=result.rowcount,
                letter_reset=bool(letter.rowcount),
            )

        await session.flush()

    def _watchdog_cutoff(self) -> datetime:
        return _utcnow() - timedelta(seconds=self.settings.generation_watchdog_seconds)

    # ==================== GENERATION ====================

    async def generate(self, artifact_id: uuid.UUID) -> GenerationStatus | None:
        """Generate one artifact if it is still pending.

        Returns:
            The terminal status written, or None if another worker owns the row
        """
        started_at = _utcnow()
        async with self.session_factory() as session:
            claimed = await _compare_and_set(
                session,
                artifact_id,
                expected=GenerationStatus.PENDING,
                values={
                    PlanArtifact.generation_status: GenerationStatus.GENERATING.value,
                    PlanArtifact.generation_started_at: started_at,
                    PlanArtifact.error_detail: None,
                },
            )
            if not claimed:
                logger.debug("artifact_claim_lost", artifact_id=str(artifact_id))
                return None

            result = await session.execute(
                select(PlanArtifact.artifact_key, SeriousPlan.user_id)
                .join(SeriousPlan, SeriousPlan.id == PlanArtifact.plan_id)
                .where(PlanArtifact.id == artifact_id)
            )
            artifact_key, user_id = result.one()
            context_row = await _load_context(session, user_id)

        log = logger.bind(artifact_id=str(artifact_id), artifact_key=artifact_key, user_id=user_id)
        draft, error = await self._call_generator(
            lambda context: self.generator.generate(ArtifactKind(artifact_key), context),
            context_row,
            user_id,
            log,
        )

        if error is not None:
            values = _error_values(error)
        else:
            values = {
                PlanArtifact.generation_status: GenerationStatus.COMPLETE.value,
                PlanArtifact.title: draft.title,
                PlanArtifact.content: draft.content,
                PlanArtifact.artifact_metadata: draft.metadata,
                PlanArtifact.error_detail: None,
                PlanArtifact.generation_completed_at: _utcnow(),
            }
            if draft.why_important:
                values[PlanArtifact.why_important] = draft.why_important

        async with self.session_factory() as session:
            written = await _compare_and_set(
                session,
                artifact_id,
                expected=GenerationStatus.GENERATING,
                values=values,
                started_at=started_at,
            )

        status = GenerationStatus(values[PlanArtifact.generation_status])
        if not written:
            # Watchdog reset the row while we were working; the newer attempt owns it
            log.warning("artifact_result_discarded", status=status.value)
            return None

        log.info("artifact_generation_finished", status=status.value)
        return status

    async def generate_coach_letter(self, plan_id: uuid.UUID) -> GenerationStatus | None:
        """Write the plan's coach letter if it is still pending.

        Returns:
            The terminal status written, or None if another worker owns the letter
        """
        started_at = _utcnow()
        async with self.session_factory() as session:
            claimed = await _letter_compare_and_set(
                session,
                plan_id,
                expected=GenerationStatus.PENDING,
                values={
                    SeriousPlan.coach_letter_status: GenerationStatus.GENERATING.value,
                    SeriousPlan.coach_letter_started_at: started_at,
                    SeriousPlan.coach_letter_error: None,
                },
            )
            if not claimed:
                logger.debug("coach_letter_claim_lost", plan_id=str(plan_id))
                return None

            user_id = await session.scalar(select(SeriousPlan.user_id).where(SeriousPlan.id == plan_id))
            context_row = await _load_context(session, user_id)

        log = logger.bind(plan_id=str(plan_id), artifact_key=COACH_LETTER_KEY, user_id=user_id)
        letter, error = await self._call_generator(self._write_letter, context_row, user_id, log)

        if error is not None:
            values = {
                SeriousPlan.coach_letter_status: GenerationStatus.ERROR.value,
                SeriousPlan.coach_letter_content: None,
                SeriousPlan.coach_letter_error: error,
                SeriousPlan.coach_letter_completed_at: _utcnow(),
            }
        else:
            values = {
                SeriousPlan.coach_letter_status: GenerationStatus.COMPLETE.value,
                SeriousPlan.coach_letter_content: letter,
                SeriousPlan.coach_letter_error: None,
                SeriousPlan.coach_letter_completed_at: _utcnow(),
            }

        async with self.session_factory() as session:
            written = await _letter_compare_and_set(
                session,
                plan_id,
                expected=GenerationStatus.GENERATING,
                values=values,
                started_at=started_at,
            )

        status = GenerationStatus(values[SeriousPlan.coach_letter_status])
        if not written:
            log.warning("coach_letter_result_discarded", status=status.value)
            return None

        log.info("coach_letter_generation_finished", status=status.value)
        return status

    async def _write_letter(self, context: GenerationContext) -> str:
        letter = (await self.generator.write_coach_letter(context)).strip()
        if not letter:
            raise ContentGenerationError(COACH_LETTER_KEY, "letter was empty")
        return letter

    async def _call_generator(
        self,
        call: Callable[[GenerationContext], Awaitable[Any]],
        context_row: CoachingContext | None,
        user_id: str,
        log,
    ) -> tuple[Any, str | None]:
        """Run one generator call under the timeout.

        Returns:
            (result, None) on success, (None, error_detail) on any failure
        """
        timeout = self.settings.generation_timeout_seconds
        try:
            if context_row is None:
                raise ContextNotReadyError(user_id)
            context = GenerationContext.from_record(context_row)
            return await asyncio.wait_for(call(context), timeout=timeout), None
        except asyncio.TimeoutError:
            log.warning("generation_timeout", timeout_seconds=timeout)
            return None, f"Generation timed out after {timeout:g}s"
        except (ContentGenerationError, ContextNotReadyError) as exc:
            log.warning("generation_failed", error=str(exc), error_type=type(exc).__name__)
            return None, str(exc)
        except Exception as exc:
            log.exception("generation_crashed", error_type=type(exc).__name__)
            return None, f"{type(exc).__name__}: {exc}"

    async def generate_many(self, artifact_ids: list[uuid.UUID]) -> dict[uuid.UUID, GenerationStatus | None]:
        """Generate artifacts concurrently, bounded by max_concurrent_generations.

        One artifact's failure never cancels its siblings.
        """
        semaphore = asyncio.Semaphore(self.settings.max_concurrent_generations)

        async def _bounded(artifact_id: uuid.UUID) -> GenerationStatus | None:
            async with semaphore:
                return await self.generate(artifact_id)

        results = await asyncio.gather(*(_bounded(a) for a in artifact_ids), return_exceptions=True)

        outcome: dict[uuid.UUID, GenerationStatus | None] = {}
        for artifact_id, result in zip(artifact_ids, results):
            if isinstance(result, BaseException):
                logger.error(
                    "artifact_generation_task_failed",
                    artifact_id=str(artifact_id),
                    error=str(result),
                    error_type=type(result).__name__,
                )
                outcome[artifact_id] = None
            else:
                outcome[artifact_id] = result
        return outcome

    async def run_pending(self, plan_id: uuid.UUID) -> dict[uuid.UUID, GenerationStatus | None]:
        """Generate every artifact of the plan that is currently pending."""
        async with self.session_factory() as session:
            result = await session.execute(
                select(PlanArtifact.id)
                .where(
                    PlanArtifact.plan_id == plan_id,
                    PlanArtifact.generation_status == GenerationStatus.PENDING.value,
                )
                .order_by(PlanArtifact.display_order, PlanArtifact.artifact_key)
            )
            ids = list(result.scalars().all())
        return await self.generate_many(ids)

    # ==================== PER-ARTIFACT RETRY / WATCHDOG ====================

    async def regenerate_artifact(self, user_id: str, artifact_id: uuid.UUID) -> PlanArtifact:
        """Reset one of the user's terminal artifacts to pending.

        Transcript artifacts are copies, not generated, and are returned unchanged.

        Raises:
            ArtifactNotFoundError: Artifact missing or owned by someone else
            ArtifactStateError: Artifact is currently generating
        """
        async with self.session_factory() as session:
            artifact = await _get_owned_artifact(session, user_id, artifact_id)
            if artifact.artifact_type == TRANSCRIPT_TYPE:
                return artifact
            status = GenerationStatus(artifact.generation_status)

            if status == GenerationStatus.GENERATING:
                raise ArtifactStateError(artifact_id, status.value, "regenerate")

            if status.is_terminal:
                reset = await _compare_and_set(session, artifact_id, expected=status, values=_reset_values())
                if not reset:
                    session.expire_all()
                    current = await _get_owned_artifact(session, user_id, artifact_id)
                    if current.generation_status == GenerationStatus.GENERATING.value:
                        raise ArtifactStateError(artifact_id, current.generation_status, "regenerate")
                logger.info("artifact_regenerate_requested", user_id=user_id, artifact_id=str(artifact_id))

            session.expire_all()
            return await _get_owned_artifact(session, user_id, artifact_id)

    async def find_stale_generating(self, plan_id: uuid.UUID | None = None) -> list[PlanArtifact]:
        """Artifacts stuck in generating longer than the watchdog threshold."""
        cutoff = self._watchdog_cutoff()
        stmt = select(PlanArtifact).where(
            PlanArtifact.generation_status == GenerationStatus.GENERATING.value,
            or_(
                PlanArtifact.generation_started_at.is_(None),
                PlanArtifact.generation_started_at < cutoff,
            ),
        )
        if plan_id is not None:
            stmt = stmt.where(PlanArtifact.plan_id == plan_id)

        async with self.session_factory() as session:
            result = await session.execute(stmt.order_by(PlanArtifact.generation_started_at))
            return list(result.scalars().all())


# ==================== HELPERS ====================


def _placeholder(plan_id: uuid.UUID, spec: ArtifactKindSpec, order: int) -> PlanArtifact:
    return PlanArtifact(
        id=uuid.uuid4(),
        plan_id=plan_id,
        artifact_key=spec.kind.value,
        title=spec.title,
        artifact_type=spec.artifact_type,
        importance_level=spec.importance.value,
        display_order=order,
        generation_status=GenerationStatus.PENDING.value,
    )


def _transcript(plan_id: uuid.UUID, seed: TranscriptSeed) -> PlanArtifact:
    now = _utcnow()
    return PlanArtifact(
        id=uuid.uuid4(),
        plan_id=plan_id,
        artifact_key=seed.artifact_key,
        title=seed.title,
        artifact_type=TRANSCRIPT_TYPE,
        importance_level="optional",
        why_important=seed.why_important,
        display_order=seed.display_order,
        generation_status=GenerationStatus.COMPLETE.value,
        content=seed.content,
        artifact_metadata=seed.metadata,
        generation_started_at=now,
        generation_completed_at=now,
    )


def _reset_values() -> dict:
    return {
        PlanArtifact.generation_status: GenerationStatus.PENDING.value,
        PlanArtifact.content: None,
        PlanArtifact.artifact_metadata: None,
        PlanArtifact.error_detail: None,
        PlanArtifact.generation_started_at: None,
        PlanArtifact.generation_completed_at: None,
    }


def _error_values(detail: str) -> dict:
    return {
        PlanArtifact.generation_status: GenerationStatus.ERROR.value,
        PlanArtifact.content: None,
        PlanArtifact.artifact_metadata: None,
        PlanArtifact.error_detail: detail,
        PlanArtifact.generation_completed_at: _utcnow(),
    }


def _letter_reset_values() -> dict:
    return {
        SeriousPlan.coach_letter_status: GenerationStatus.PENDING.value,
        SeriousPlan.coach_letter_content: None,
        SeriousPlan.coach_letter_error: None,
        SeriousPlan.coach_letter_started_at: None,
        SeriousPlan.coach_letter_completed_at: None,
        SeriousPlan.coach_letter_seen_at: None,
    }


async def _compare_and_set(
    session: AsyncSession,
    artifact_id: uuid.UUID,
    expected: GenerationStatus,
    values: dict,
    started_at: datetime | None = None,
) -> bool:
    """UPDATE the row only if it is still in ``expected``; commit and report success.

    With ``started_at`` the row must also still carry that claim.
    """
    stmt = update(PlanArtifact).where(
        PlanArtifact.id == artifact_id,
        PlanArtifact.generation_status == expected.value,
    )
    if started_at is not None:
        stmt = stmt.where(PlanArtifact.generation_started_at == started_at)
    result = await session.execute(stmt.values(values).execution_options(synchronize_session=False))
    await session.commit()
    return result.rowcount == 1


async def _letter_compare_and_set(
    session: AsyncSession,
    plan_id: uuid.UUID,
    expected: GenerationStatus,
    values: dict,
    started_at: datetime | None = None,
) -> bool:
    """Same as _compare_and_set, for the plan's coach letter."""
    stmt = update(SeriousPlan).where(
        SeriousPlan.id == plan_id,
        SeriousPlan.coach_letter_status == expected.value,
    )
    if started_at is not None:
        stmt = stmt.where(SeriousPlan.coach_letter_started_at == started_at)
    result = await session.execute(stmt.values(values).execution_options(synchronize_session=False))
    await session.commit()
    return result.rowcount == 1


async def _load_context(session: AsyncSession, user_id: str) -> CoachingContext | None:
    result = await session.execute(select(CoachingContext).where(CoachingContext.user_id == user_id))
    return result.scalar_one_or_none()


async def _load_artifacts(session: AsyncSession, plan_id: uuid.UUID) -> list[PlanArtifact]:
    result = await session.execute(
        select(PlanArtifact)
        .where(PlanArtifact.plan_id == plan_id)
        .order_by(PlanArtifact.display_order, PlanArtifact.artifact_key)
    )
    return list(result.scalars().all())


async def _get_owned_artifact(session: AsyncSession, user_id: str, artifact_id: uuid.UUID) -> PlanArtifact:
    result = await session.execute(
        select(PlanArtifact)
        .join(SeriousPlan, SeriousPlan.id == PlanArtifact.plan_id)
        .where(PlanArtifact.id == artifact_id, SeriousPlan.user_id == user_id)
    )
    artifact = result.scalar_one_or_none()
    if artifact is None:
        raise ArtifactNotFoundError(artifact_id)
    return artifact
