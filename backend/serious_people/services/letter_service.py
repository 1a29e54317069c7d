"""CoachLetterService: the graduation letter page reads the letter and marks it seen."""

from dataclasses import dataclass
from datetime import datetime, timezone

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from serious_people.core.exceptions import PlanNotFoundError
from serious_people.db.models.serious_plan import SeriousPlan

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CoachLetterView:
    status: str
    content: str | None
    seen_at: datetime | None

    @classmethod
    def from_plan(cls, plan: SeriousPlan) -> "CoachLetterView":
        return cls(
            status=plan.coach_letter_status,
            content=plan.coach_letter_content,
            seen_at=plan.coach_letter_seen_at,
        )


class CoachLetterService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_letter(self, user_id: str) -> CoachLetterView:
        """Raises PlanNotFoundError when the user has no plan yet."""
        async with self.session_factory() as session:
            return CoachLetterView.from_plan(await _get_plan(session, user_id))

    async def mark_seen(self, user_id: str) -> CoachLetterView:
        """Record the first time the user saw the letter; later calls keep that time."""
        async with self.session_factory() as session:
            plan = await _get_plan(session, user_id)
            if plan.coach_letter_seen_at is None:
                await session.execute(
                    update(SeriousPlan)
                    .where(SeriousPlan.id == plan.id, SeriousPlan.coach_letter_seen_at.is_(None))
                    .values(coach_letter_seen_at=datetime.now(timezone.utc))
                    .execution_options(synchronize_session=False)
                )
                await session.commit()
                logger.info("coach_letter_seen", user_id=user_id, plan_id=str(plan.id))
                session.expire_all()
                plan = await _get_plan(session, user_id)
            return CoachLetterView.from_plan(plan)


async def _get_plan(session: AsyncSession, user_id: str) -> SeriousPlan:
    result = await session.execute(select(SeriousPlan).where(SeriousPlan.user_id == user_id))
    plan = result.scalar_one_or_none()
    if plan is None:
        raise PlanNotFoundError(user_id)
    return plan
