"""Tests for transcript artifact seeds."""

import pytest

from serious_people.artifacts.transcripts import (
    TRANSCRIPT_DISPLAY_ORDER_START,
    build_transcript_seeds,
    render_transcript,
)

pytestmark = pytest.mark.unit

INTERVIEW = [
    {"role": "assistant", "content": "What brings you here?"},
    {"role": "user", "content": "I want out."},
]


def test_no_transcripts_no_seeds():
    assert build_transcript_seeds(None) == []
    assert build_transcript_seeds({}) == []


def test_empty_conversations_are_skipped():
    seeds = build_transcript_seeds({"interview": {"messages": []}, "module_2": {"messages": INTERVIEW}})
    assert [s.artifact_key for s in seeds] == ["transcript_module_2"]
    assert seeds[0].display_order == TRANSCRIPT_DISPLAY_ORDER_START


def test_order_and_titles():
    transcripts = {
        "module_3": {"messages": INTERVIEW, "summary": "Committed to the move"},
        "interview": {"messages": INTERVIEW},
        "module_1": {"messages": INTERVIEW},
    }
    dossier = {"module_records": [{"module_number": 1, "module_name": "Job Autopsy"}]}

    seeds = build_transcript_seeds(transcripts, dossier)

    assert [s.artifact_key for s in seeds] == ["transcript_interview", "transcript_module_1", "transcript_module_3"]
    assert [s.display_order for s in seeds] == [100, 101, 102]
    assert [s.title for s in seeds] == ["Interview Transcript", "Job Autopsy Transcript", "Module 3 Transcript"]
    assert seeds[2].metadata == {"summary": "Committed to the move", "messages": INTERVIEW}
    assert seeds[0].metadata["summary"] is None


def test_render_labels_speakers():
    assert render_transcript(INTERVIEW) == "**Coach:** What brings you here?\n\n**You:** I want out."
