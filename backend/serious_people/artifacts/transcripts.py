"""Transcript artifacts: the coaching conversations, copied into the plan as-is.

They need no generation, so they are created already complete, after the
generated artifacts in display order.
"""

from dataclasses import dataclass

TRANSCRIPT_TYPE = "transcript"
TRANSCRIPT_DISPLAY_ORDER_START = 100

# (source key in CoachingContext.transcripts, artifact key, module number)
TRANSCRIPT_SOURCES: list[tuple[str, str, int | None]] = [
    ("interview", "transcript_interview", None),
    ("module_1", "transcript_module_1", 1),
    ("module_2", "transcript_module_2", 2),
    ("module_3", "transcript_module_3", 3),
]

SPEAKER_LABELS = {"assistant": "Coach", "user": "You"}


@dataclass(frozen=True)
class TranscriptSeed:
    artifact_key: str
    title: str
    why_important: str
    display_order: int
    content: str
    metadata: dict


def _module_names(dossier: dict | None) -> dict[int, str]:
    records = (dossier or {}).get("module_records") or []
    return {r["module_number"]: r["module_name"] for r in records if r.get("module_number") and r.get("module_name")}


def render_transcript(messages: list[dict]) -> str:
    """Markdown rendering: one bold speaker label per message."""
    lines = []
    for message in messages:
        speaker = SPEAKER_LABELS.get(message.get("role"), str(message.get("role", "")).title())
        lines.append(f"**{speaker}:** {message.get('content', '')}")
    return "\n\n".join(lines)


def build_transcript_seeds(transcripts: dict | None, dossier: dict | None = None) -> list[TranscriptSeed]:
    """One seed per non-empty conversation, in interview, module 1..3 order.

    Args:
        transcripts: CoachingContext.transcripts
        dossier: Used for module names; falls back to "Module N"

    Returns:
        Seeds with consecutive display orders from TRANSCRIPT_DISPLAY_ORDER_START
    """
    if not transcripts:
        return []

    names = _module_names(dossier)
    seeds = []
    for source, artifact_key, module_number in TRANSCRIPT_SOURCES:
        entry = transcripts.get(source) or {}
        messages = entry.get("messages")
        if not isinstance(messages, list) or not messages:
            continue

        if module_number is None:
            title = "Interview Transcript"
            why = "The full conversation from your initial coaching interview."
        else:
            name = names.get(module_number, f"Module {module_number}")
            title = f"{name} Transcript"
            why = f"The full conversation from {name}."

        seeds.append(
            TranscriptSeed(
                artifact_key=artifact_key,
                title=title,
                why_important=why,
                display_order=TRANSCRIPT_DISPLAY_ORDER_START + len(seeds),
                content=render_transcript(messages),
                metadata={"summary": entry.get("summary"), "messages": messages},
            )
        )
    return seeds
