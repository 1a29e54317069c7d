"""CoachingContextService: reads and stores the upstream coaching data."""

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.attributes import flag_modified

from serious_people.db.models.coaching_context import CoachingContext

logger = structlog.get_logger(__name__)


class CoachingContextService:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get(self, user_id: str) -> CoachingContext | None:
        async with self.session_factory() as session:
            result = await session.execute(select(CoachingContext).where(CoachingContext.user_id == user_id))
            return result.scalar_one_or_none()

    async def upsert(
        self,
        user_id: str,
        coaching_plan: dict,
        client_name: str | None = None,
        dossier: dict | None = None,
        transcripts: dict | None = None,
    ) -> CoachingContext:
        """Create or replace the user's coaching context."""
        async with self.session_factory() as session:
            result = await session.execute(select(CoachingContext).where(CoachingContext.user_id == user_id))
            context = result.scalar_one_or_none()

            if context is None:
                context = CoachingContext(
                    user_id=user_id,
                    client_name=client_name,
                    coaching_plan=coaching_plan,
                    dossier=dossier,
                    transcripts=transcripts,
                )
                session.add(context)
            else:
                context.client_name = client_name
                context.coaching_plan = coaching_plan
                context.dossier = dossier
                context.transcripts = transcripts
                flag_modified(context, "coaching_plan")
                flag_modified(context, "dossier")
                flag_modified(context, "transcripts")

            await session.commit()
            await session.refresh(context)

        logger.info("coaching_context_saved", user_id=user_id)
        return context
