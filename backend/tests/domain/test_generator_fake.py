"""Tests for the FakeContentGenerator scenarios."""

import asyncio

import pytest

from serious_people.artifacts.generator import ContentGenerator, GenerationContext
from serious_people.artifacts.generator_fake import FakeContentGenerator
from serious_people.core.exceptions import ContentGenerationError
from serious_people.domain.horizon import HorizonType, PlanHorizon
from serious_people.schemas.artifacts import ArtifactKind

pytestmark = pytest.mark.unit


@pytest.fixture
def context() -> GenerationContext:
    return GenerationContext(
        user_id="user-1",
        client_name="Jordan",
        horizon=PlanHorizon(HorizonType.DAYS_60, "visa"),
    )


def test_satisfies_protocol():
    assert isinstance(FakeContentGenerator(), ContentGenerator)


def test_unknown_scenario_rejected():
    with pytest.raises(ValueError, match="Unknown scenario"):
        FakeContentGenerator(scenario="sunny_day")


async def test_happy_path_every_kind(context):
    generator = FakeContentGenerator()
    for kind in ArtifactKind:
        draft = await generator.generate(kind, context)
        assert draft.content
        assert "Jordan" in draft.content
    assert sum(generator.calls.values()) == len(ArtifactKind)


async def test_action_plan_metadata_uses_horizon(context):
    draft = await FakeContentGenerator().generate(ArtifactKind.ACTION_PLAN, context)
    assert draft.metadata["horizon"] == "60_days"
    assert draft.metadata["intervals"]


async def test_llm_failure(context):
    with pytest.raises(ContentGenerationError):
        await FakeContentGenerator(scenario="llm_failure").generate(ArtifactKind.RISK_MAP, context)


async def test_partial_only_fails_listed_kinds(context):
    generator = FakeContentGenerator(scenario="partial", failing_kinds={ArtifactKind.RISK_MAP})
    with pytest.raises(ContentGenerationError):
        await generator.generate(ArtifactKind.RISK_MAP, context)
    draft = await generator.generate(ArtifactKind.RESOURCES, context)
    assert draft.metadata["resources"]


async def test_malformed_fails_validation(context):
    with pytest.raises(ContentGenerationError):
        await FakeContentGenerator(scenario="malformed").generate(ArtifactKind.MODULE_RECAP, context)


async def test_slow_scenario_can_be_timed_out(context):
    generator = FakeContentGenerator(scenario="slow", delay=5.0)
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(generator.generate(ArtifactKind.MODULE_RECAP, context), timeout=0.05)


async def test_coach_letter_starts_with_client_name(context):
    generator = FakeContentGenerator()
    letter = await generator.write_coach_letter(context)
    assert letter.startswith("Jordan,\n")
    assert generator.letter_calls == 1


async def test_coach_letter_failures(context):
    with pytest.raises(ContentGenerationError, match="coach_letter"):
        await FakeContentGenerator(fail_letter=True).write_coach_letter(context)
    with pytest.raises(ContentGenerationError):
        await FakeContentGenerator("llm_failure").write_coach_letter(context)
    assert await FakeContentGenerator("malformed").write_coach_letter(context) == ""


async def test_fail_letter_leaves_artifacts_alone(context):
    draft = await FakeContentGenerator(fail_letter=True).generate(ArtifactKind.ACTION_PLAN, context)
    assert draft.content
