"""Tests for PlanAggregator: derived status and refresh determinism."""

import pytest

from serious_people.artifacts.generator_fake import FakeContentGenerator
from serious_people.domain.plan_status import PlanStatus
from serious_people.schemas.api import PlanResponse
from serious_people.schemas.artifacts import ArtifactKind
from serious_people.services.plan_service import PlanAggregator

pytestmark = pytest.mark.integration


async def test_no_plan_returns_none(session_factory):
    assert await PlanAggregator(session_factory).get_plan("nobody") is None


async def test_new_plan_is_generating(make_job, seed_user, session_factory):
    user_id = await seed_user("user-1")
    await make_job().ensure_artifacts(user_id)

    view = await PlanAggregator(session_factory).get_plan(user_id)

    assert view.status == PlanStatus.GENERATING
    assert len(view.artifacts) == 5


async def test_ready_with_five_complete(make_job, seed_user, session_factory):
    user_id = await seed_user("user-1")
    job = make_job()
    created = await job.ensure_artifacts(user_id)
    await job.run_pending(created.plan_id)

    view = await PlanAggregator(session_factory).get_plan(user_id)

    assert view.status == PlanStatus.READY
    assert [a.generation_status for a in view.artifacts] == ["complete"] * 5


async def test_partial_failure_is_ready(make_job, seed_user, session_factory):
    user_id = await seed_user("user-1")
    job = make_job(generator=FakeContentGenerator("partial", failing_kinds={ArtifactKind.RESOURCES}))
    created = await job.ensure_artifacts(user_id)
    await job.run_pending(created.plan_id)

    view = await PlanAggregator(session_factory).get_plan(user_id)

    assert view.status == PlanStatus.READY
    errored = [a for a in view.artifacts if a.generation_status == "error"]
    assert [a.artifact_key for a in errored] == ["resources"]


async def test_all_failed_is_error(make_job, seed_user, session_factory):
    user_id = await seed_user("user-1")
    job = make_job(generator=FakeContentGenerator("llm_failure"))
    created = await job.ensure_artifacts(user_id)
    await job.run_pending(created.plan_id)

    view = await PlanAggregator(session_factory).get_plan(user_id)
    assert view.status == PlanStatus.ERROR


async def test_refresh_is_byte_identical(make_job, seed_user, session_factory):
    """Repeated reads with no intervening write serialise identically."""
    user_id = await seed_user("user-1")
    job = make_job()
    created = await job.ensure_artifacts(user_id)
    await job.run_pending(created.plan_id)
    aggregator = PlanAggregator(session_factory)

    first = PlanResponse.from_view(await aggregator.get_plan(user_id)).model_dump_json(by_alias=True)
    second = PlanResponse.from_view(await aggregator.get_plan(user_id)).model_dump_json(by_alias=True)

    assert first == second


async def test_artifacts_ordered_by_display_order(make_job, seed_user, session_factory):
    user_id = await seed_user("user-1", planned_artifacts=["resources", "decision_snapshot", "risk_map"])
    await make_job().ensure_artifacts(user_id)

    view = await PlanAggregator(session_factory).get_plan(user_id)

    assert [a.artifact_key for a in view.artifacts] == ["resources", "decision_snapshot", "risk_map"]


async def test_transcripts_do_not_mask_total_failure(make_job, seed_user, session_factory, sample_transcripts):
    user_id = await seed_user("user-1", transcripts=sample_transcripts)
    job = make_job(generator=FakeContentGenerator("llm_failure"))
    created = await job.ensure_artifacts(user_id)
    await job.run_pending(created.plan_id)

    view = await PlanAggregator(session_factory).get_plan(user_id)

    assert view.status == PlanStatus.ERROR
    assert [a.artifact_key for a in view.artifacts][-2:] == ["transcript_interview", "transcript_module_1"]


async def test_transcripts_alone_do_not_settle_new_plan(make_job, seed_user, session_factory, sample_transcripts):
    user_id = await seed_user("user-1", transcripts=sample_transcripts)
    await make_job().ensure_artifacts(user_id)

    view = await PlanAggregator(session_factory).get_plan(user_id)

    assert view.status == PlanStatus.GENERATING
