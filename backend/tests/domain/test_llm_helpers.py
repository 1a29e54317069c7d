"""Tests for LLM helper utilities and the Anthropic-backed generator."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from serious_people.artifacts.generator import GenerationContext
from serious_people.artifacts.generator_real import AnthropicContentGenerator
from serious_people.artifacts.llm_helpers import parse_json_object, response_text, strip_json_fences
from serious_people.artifacts.prompts import build_artifact_prompt, format_dossier
from serious_people.core.config import Settings
from serious_people.core.exceptions import ContentGenerationError
from serious_people.domain.horizon import HorizonType, PlanHorizon
from serious_people.schemas.artifacts import ARTIFACT_CATALOG, ArtifactKind

pytestmark = pytest.mark.unit


class TestStripJsonFences:
    def test_no_fences(self):
        assert strip_json_fences('{"key": "value"}') == '{"key": "value"}'

    def test_json_fence(self):
        assert strip_json_fences('```json\n{"key": "value"}\n```') == '{"key": "value"}'

    def test_fence_with_whitespace(self):
        assert strip_json_fences('  ```json\n{"key": "value"}\n```  ') == '{"key": "value"}'


class TestParseJsonObject:
    def test_fenced_json(self):
        assert parse_json_object('```json\n{"key": "value"}\n```') == {"key": "value"}

    def test_preamble_dropped(self):
        assert parse_json_object('Here is the artifact:\n{"key": "value"}') == {"key": "value"}

    def test_array_left_alone(self):
        assert parse_json_object("[1, 2]") == [1, 2]

    def test_invalid_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            parse_json_object("not json at all")


def test_response_text_joins_text_blocks():
    response = MagicMock()
    response.content = [MagicMock(text='{"a": '), MagicMock(text="1}")]
    assert response_text(response) == '{"a": 1}'


def _context() -> GenerationContext:
    return GenerationContext(
        user_id="user-1",
        client_name="Jordan",
        coaching_plan={"name": "Career pivot"},
        dossier={
            "interview_analysis": {"situation": "Exploring options", "key_facts": ["Ten years in sales"]},
            "module_records": [{"module_number": 1, "module_name": "Job Autopsy", "summary": "Boss is the issue"}],
        },
        horizon=PlanHorizon(HorizonType.MONTHS_6, "exploring"),
    )


class TestPrompts:
    def test_prompt_includes_client_and_horizon(self):
        system, messages = build_artifact_prompt(ARTIFACT_CATALOG[ArtifactKind.ACTION_PLAN], _context())
        content = messages[0]["content"]
        assert "Return ONLY valid JSON" in system
        assert "Jordan" in content
        assert "6 months" in content
        assert "action_plan" in content
        assert '"metadata"' in content

    def test_prompt_without_metadata_model(self):
        _, messages = build_artifact_prompt(ARTIFACT_CATALOG[ArtifactKind.MODULE_RECAP], _context())
        assert '"metadata"' not in messages[0]["content"]

    def test_format_dossier(self):
        text = format_dossier(_context().dossier)
        assert "Ten years in sales" in text
        assert "Module 1 (Job Autopsy): Boss is the issue" in text

    def test_format_dossier_empty(self):
        assert format_dossier(None) == ""


def _mock_client(text: str) -> MagicMock:
    response = MagicMock()
    response.content = [MagicMock(text=text)]
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=response)
    return client


class TestAnthropicContentGenerator:
    async def test_parses_fenced_draft(self):
        payload = {"title": "Recap", "type": "recap", "importance_level": "recommended", "content": "# Recap"}
        client = _mock_client(f"```json\n{json.dumps(payload)}\n```")
        generator = AnthropicContentGenerator(settings=Settings(content_model="test-model"), client=client)

        draft = await generator.generate(ArtifactKind.MODULE_RECAP, _context())

        assert draft.title == "Recap"
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["messages"][0]["role"] == "user"

    async def test_invalid_json_is_generation_error(self):
        generator = AnthropicContentGenerator(settings=Settings(), client=_mock_client("Sorry, I can't."))
        with pytest.raises(ContentGenerationError, match="not valid JSON"):
            await generator.generate(ArtifactKind.MODULE_RECAP, _context())

    async def test_non_object_is_generation_error(self):
        generator = AnthropicContentGenerator(settings=Settings(), client=_mock_client("[1, 2]"))
        with pytest.raises(ContentGenerationError):
            await generator.generate(ArtifactKind.MODULE_RECAP, _context())
