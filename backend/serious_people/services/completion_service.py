"""CompletionService: reads and advances per-user stage completion flags.

Flags are monotonic. mark_complete only ever sets a flag to True, so replays of
upstream completion events are harmless.
"""

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from serious_people.db.models.completion_record import CompletionRecord
from serious_people.domain.journey import CompletionState, JourneyPosition, resolve

logger = structlog.get_logger(__name__)


class CompletionService:
    """Completion flag store plus journey resolution for one user at a time."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def get_state(self, user_id: str) -> CompletionState:
        """Return the user's flags; a user with no record has every flag False."""
        async with self.session_factory() as session:
            result = await session.execute(select(CompletionRecord).where(CompletionRecord.user_id == user_id))
            record = result.scalar_one_or_none()
            if record is None:
                return CompletionState()
            return CompletionState.from_record(record)

    async def get_or_create(self, user_id: str) -> CompletionState:
        """Return the user's flags, creating an all-False record on first contact."""
        async with self.session_factory() as session:
            result = await session.execute(select(CompletionRecord).where(CompletionRecord.user_id == user_id))
            record = result.scalar_one_or_none()
            if record is not None:
                return CompletionState.from_record(record)

            session.add(CompletionRecord(user_id=user_id))
            try:
                await session.commit()
            except IntegrityError:
                # A concurrent first request created it
                await session.rollback()
            else:
                logger.info("completion_record_created", user_id=user_id)

        return await self.get_state(user_id)

    async def get_position(self, user_id: str, create: bool = False) -> tuple[JourneyPosition, CompletionState]:
        state = await (self.get_or_create(user_id) if create else self.get_state(user_id))
        return resolve(state), state

    async def mark_complete(self, user_id: str, flag: str) -> CompletionState:
        """Set one completion flag to True, creating the record if needed.

        Raises:
            ValueError: If flag is not a known completion flag
        """
        if flag not in CompletionState.flag_names():
            raise ValueError(f"Unknown completion flag: {flag}")

        stmt = update(CompletionRecord).where(CompletionRecord.user_id == user_id).values({flag: True})
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            if result.rowcount == 0:
                session.add(CompletionRecord(user_id=user_id, **{flag: True}))
            try:
                await session.commit()
            except IntegrityError:
                # A concurrent writer created the record first
                await session.rollback()
                await session.execute(stmt)
                await session.commit()

        logger.info("completion_flag_set", user_id=user_id, flag=flag)
        return await self.get_state(user_id)


async def set_has_plan(session: AsyncSession, user_id: str) -> None:
    """Set has_plan inside the caller's transaction (no commit)."""
    result = await session.execute(
        update(CompletionRecord).where(CompletionRecord.user_id == user_id).values(has_plan=True)
    )
    if result.rowcount == 0:
        session.add(CompletionRecord(user_id=user_id, has_plan=True))
