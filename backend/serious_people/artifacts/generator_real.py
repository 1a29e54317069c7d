"""AnthropicContentGenerator: production ContentGenerator backed by Claude.

Architecture:
- Direct anthropic.AsyncAnthropic call (one request per artifact, one for the coach letter)
- Transient API errors retried via tenacity in invoke_with_retry
- Output parsed as JSON and validated with parse_draft
- Every failure surfaces as ContentGenerationError so the job can record it
"""

import json

import anthropic
import structlog

from serious_people.artifacts.generator import COACH_LETTER_KEY, GenerationContext
from serious_people.artifacts.llm_helpers import invoke_with_retry, parse_json_object
from serious_people.artifacts.prompts import build_artifact_prompt, build_coach_letter_prompt
from serious_people.core.config import Settings, get_settings
from serious_people.core.exceptions import ContentGenerationError
from serious_people.schemas.artifacts import ARTIFACT_CATALOG, ArtifactDraft, ArtifactKind, parse_draft

logger = structlog.get_logger(__name__)


class AnthropicContentGenerator:
    """Generates artifact drafts with Claude."""

    def __init__(self, settings: Settings | None = None, client: anthropic.AsyncAnthropic | None = None):
        self.settings = settings or get_settings()
        self._client = client or anthropic.AsyncAnthropic(api_key=self.settings.anthropic_api_key)

    async def generate(self, kind: ArtifactKind, context: GenerationContext) -> ArtifactDraft:
        spec = ARTIFACT_CATALOG[kind]
        system, messages = build_artifact_prompt(spec, context)

        try:
            raw_text = await invoke_with_retry(
                self._client,
                model=self.settings.content_model,
                system=system,
                messages=messages,
                max_tokens=self.settings.content_max_tokens,
            )
        except anthropic.APIError as exc:
            logger.warning(
                "artifact_llm_call_failed",
                user_id=context.user_id,
                artifact_key=kind.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise ContentGenerationError(kind.value, f"{type(exc).__name__}: {exc}") from exc

        try:
            payload = parse_json_object(raw_text)
        except json.JSONDecodeError as exc:
            raise ContentGenerationError(kind.value, "response was not valid JSON") from exc

        if not isinstance(payload, dict):
            raise ContentGenerationError(kind.value, "response was not a JSON object")

        return parse_draft(kind, payload)

    async def write_coach_letter(self, context: GenerationContext) -> str:
        system, messages = build_coach_letter_prompt(context)

        try:
            text = await invoke_with_retry(
                self._client,
                model=self.settings.content_model,
                system=system,
                messages=messages,
                max_tokens=self.settings.letter_max_tokens,
            )
        except anthropic.APIError as exc:
            logger.warning(
                "coach_letter_llm_call_failed",
                user_id=context.user_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise ContentGenerationError(COACH_LETTER_KEY, f"{type(exc).__name__}: {exc}") from exc

        return text.strip()
