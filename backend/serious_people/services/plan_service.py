"""PlanAggregator: read-side view of a user's Serious Plan.

Overall plan status is never stored; it is derived on every read from the
generated artifacts. Transcript artifacts are always complete and do not count
towards it. Artifacts are always returned in (display_order, artifact_key)
order so repeated reads without an intervening write are identical.
"""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from serious_people.artifacts.transcripts import TRANSCRIPT_TYPE
from serious_people.db.models.plan_artifact import PlanArtifact
from serious_people.db.models.serious_plan import SeriousPlan
from serious_people.domain.plan_status import PlanStatus, derive_plan_status


@dataclass(frozen=True)
class PlanView:
    plan: SeriousPlan
    artifacts: list[PlanArtifact]
    status: PlanStatus


class PlanAggregator:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_plan(self, user_id: str) -> PlanView | None:
        """Return the user's plan with its artifacts, or None if no plan exists."""
        async with self.session_factory() as session:
            result = await session.execute(select(SeriousPlan).where(SeriousPlan.user_id == user_id))
            plan = result.scalar_one_or_none()
            if plan is None:
                return None

            result = await session.execute(
                select(PlanArtifact)
                .where(PlanArtifact.plan_id == plan.id)
                .order_by(PlanArtifact.display_order, PlanArtifact.artifact_key)
            )
            artifacts = list(result.scalars().all())

        status = derive_plan_status(a.generation_status for a in artifacts if a.artifact_type != TRANSCRIPT_TYPE)
        return PlanView(plan=plan, artifacts=artifacts, status=status)
