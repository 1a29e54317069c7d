"""Tests for CoachLetterService: reading the letter and marking it seen."""

import pytest

from serious_people.core.exceptions import PlanNotFoundError
from serious_people.services.letter_service import CoachLetterService

pytestmark = pytest.mark.integration


async def test_no_plan(session_factory):
    with pytest.raises(PlanNotFoundError):
        await CoachLetterService(session_factory).get_letter("nobody")


async def test_pending_until_generated(make_job, seed_user, session_factory):
    user_id = await seed_user("user-1")
    job = make_job()
    created = await job.ensure_artifacts(user_id)
    letters = CoachLetterService(session_factory)

    before = await letters.get_letter(user_id)
    await job.generate_coach_letter(created.plan_id)
    after = await letters.get_letter(user_id)

    assert before.status == "pending"
    assert before.content is None
    assert after.status == "complete"
    assert after.content.startswith("Jordan,")


async def test_mark_seen_keeps_first_time(make_job, seed_user, session_factory):
    user_id = await seed_user("user-1")
    await make_job().ensure_artifacts(user_id)
    letters = CoachLetterService(session_factory)

    first = await letters.mark_seen(user_id)
    second = await letters.mark_seen(user_id)

    assert first.seen_at is not None
    assert second.seen_at == first.seen_at
