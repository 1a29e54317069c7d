"""Prompts for single-artifact generation and the coach letter.

Each artifact is generated on its own so kinds can run in parallel and fail
independently. The prompt asks for one JSON object that parse_draft validates.
"""

import json

from serious_people.artifacts.generator import GenerationContext
from serious_people.domain.horizon import HorizonType
from serious_people.schemas.artifacts import ArtifactKindSpec

ARTIFACT_SYSTEM_PROMPT = """You are a senior career coach writing the final deliverables for a client who just completed a 3-module coaching program.

**Voice:**
Clear, direct language. No corporate jargon. Speak to the client as "you".

**Quality Bar:**
Reference their specific situation, people and constraints. Be actionable and concrete. Use markdown formatting (headers, lists, bold).

Return ONLY valid JSON."""

_OUTPUT_FORMAT = """## Output Format
Return valid JSON with this exact structure:
{{
  "title": "Human-readable title for this artifact",
  "type": "{artifact_type}",
  "importance_level": "{importance}",
  "why_important": "One sentence explaining why THIS specific client needs this artifact",
  "content": "Full markdown content..."{metadata_hint}
}}"""


def _format_list(values: list | None) -> str:
    return ", ".join(str(v) for v in values) if values else "Not specified"


def format_dossier(dossier: dict | None) -> str:
    """Render the client dossier as a markdown block (empty string when absent)."""
    if not dossier:
        return ""

    analysis = dossier.get("interview_analysis") or {}
    lines = [
        "## Client Dossier",
        f"**Current Role:** {analysis.get('current_role', 'Unknown')} at {analysis.get('company', 'Unknown')}",
        f"**Situation:** {analysis.get('situation', 'Not specified')}",
        f"**Big Problem:** {analysis.get('big_problem', 'Not specified')}",
        f"**Desired Outcome:** {analysis.get('desired_outcome', 'Not specified')}",
        f"**Key Facts:** {_format_list(analysis.get('key_facts'))}",
        f"**Constraints:** {_format_list(analysis.get('constraints'))}",
        "",
        "**Module Summaries:**",
    ]
    records = dossier.get("module_records") or []
    if records:
        for record in records:
            lines.append(
                f"- Module {record.get('module_number', '?')} ({record.get('module_name', '')}): "
                f"{record.get('summary', '')}"
            )
    else:
        lines.append("No modules completed")
    return "\n".join(lines)


def build_artifact_prompt(spec: ArtifactKindSpec, context: GenerationContext) -> tuple[str, list[dict]]:
    """Build system prompt and messages for one artifact.

    Args:
        spec: Catalog entry for the artifact kind
        context: Client coaching data

    Returns:
        Tuple of (system_prompt, messages_list)
    """
    horizon_type = context.horizon.type if context.horizon else HorizonType.DAYS_90
    metadata_hint = ""
    if spec.metadata_model is not None:
        schema = json.dumps(spec.metadata_model.model_json_schema())
        metadata_hint = f',\n  "metadata": <object matching JSON schema {schema}>'

    sections = [
        f"You are generating a SINGLE personalized artifact for {context.client_name}.",
        format_dossier(context.dossier),
        f"## Coaching Plan: {context.coaching_plan.get('name', 'Career coaching')}",
        f"## Plan Horizon: {horizon_type.label}",
        f"## Artifact to Generate: {spec.kind.value}",
        spec.render_guidelines(horizon_type.label),
        _OUTPUT_FORMAT.format(
            artifact_type=spec.artifact_type,
            importance=spec.importance.value,
            metadata_hint=metadata_hint,
        ),
    ]
    user_content = "\n\n".join(s for s in sections if s)
    return ARTIFACT_SYSTEM_PROMPT, [{"role": "user", "content": user_content}]


COACH_LETTER_SYSTEM_PROMPT = """You are an online career coach writing a brief, warm graduation note to a client who just completed a one-time 3-module coaching session.

This was a single online session of about an hour, NOT an ongoing relationship. You have never met in person. Do not imply a long-term relationship.

Output ONLY the letter text, nothing else."""


def build_coach_letter_prompt(context: GenerationContext) -> tuple[str, list[dict]]:
    """Build system prompt and messages for the coach letter.

    Args:
        context: Client coaching data

    Returns:
        Tuple of (system_prompt, messages_list)
    """
    sections = [
        format_dossier(context.dossier),
        f"## Coaching Plan: {context.coaching_plan.get('name', 'Career coaching')}",
        "\n".join([
            "Write a personal note of 2-3 short paragraphs that:",
            f'1. Starts with "{context.client_name}," on its own line',
            "2. Acknowledges what they worked on in this session without dramatizing",
            "3. References specific insights or decisions from their conversations",
            "4. Ends with grounded confidence, not flowery motivation",
            "",
            "No bullet points and no headers.",
        ]),
    ]
    user_content = "\n\n".join(s for s in sections if s)
    return COACH_LETTER_SYSTEM_PROMPT, [{"role": "user", "content": user_content}]
