"""Tests for the artifact catalog and draft validation."""

import pytest

from serious_people.core.exceptions import ContentGenerationError
from serious_people.schemas.artifacts import (
    ARTIFACT_CATALOG,
    ArtifactKind,
    ImportanceLevel,
    parse_draft,
    resolve_catalog,
)

pytestmark = pytest.mark.unit

DEFAULT_KEYS = ["decision_snapshot", "action_plan", "risk_map", "module_recap", "resources"]


class TestCatalog:
    def test_every_kind_has_a_catalog_entry(self):
        assert set(ARTIFACT_CATALOG) == set(ArtifactKind)
        for kind, spec in ARTIFACT_CATALOG.items():
            assert spec.kind == kind
            assert spec.title
            assert spec.guidelines

    def test_must_read_kinds(self):
        must_read = {k for k, s in ARTIFACT_CATALOG.items() if s.importance == ImportanceLevel.MUST_READ}
        assert must_read == {ArtifactKind.DECISION_SNAPSHOT, ArtifactKind.ACTION_PLAN}

    def test_action_plan_guidelines_render_horizon(self):
        text = ARTIFACT_CATALOG[ArtifactKind.ACTION_PLAN].render_guidelines("60 days")
        assert "60 days" in text
        assert "{horizon}" not in text


class TestResolveCatalog:
    def test_default_catalog_preserves_order(self):
        specs = resolve_catalog(DEFAULT_KEYS)
        assert [s.kind.value for s in specs] == DEFAULT_KEYS

    def test_unknown_key_rejected(self):
        with pytest.raises(ValueError, match="Unknown artifact kind"):
            resolve_catalog(["decision_snapshot", "horoscope"])

    def test_duplicate_key_rejected(self):
        with pytest.raises(ValueError, match="Duplicate"):
            resolve_catalog(["risk_map", "risk_map"])

    def test_empty_catalog_rejected(self):
        with pytest.raises(ValueError):
            resolve_catalog([])


class TestParseDraft:
    def test_valid_draft(self):
        draft = parse_draft(
            ArtifactKind.DECISION_SNAPSHOT,
            {
                "title": "Your Decision Snapshot",
                "type": "snapshot",
                "importance_level": "must_read",
                "why_important": "You need clarity.",
                "content": "# Snapshot",
            },
        )
        assert draft.title == "Your Decision Snapshot"
        assert draft.importance_level == ImportanceLevel.MUST_READ
        assert draft.metadata is None

    def test_empty_content_rejected(self):
        with pytest.raises(ContentGenerationError):
            parse_draft(ArtifactKind.MODULE_RECAP, {"title": "Recap", "content": "   "})

    def test_missing_content_rejected(self):
        with pytest.raises(ContentGenerationError) as exc_info:
            parse_draft(ArtifactKind.MODULE_RECAP, {"title": "Recap"})
        assert exc_info.value.artifact_key == "module_recap"

    def test_unknown_importance_rejected(self):
        with pytest.raises(ContentGenerationError):
            parse_draft(
                ArtifactKind.MODULE_RECAP,
                {"title": "Recap", "content": "text", "importance_level": "critical"},
            )

    def test_kind_metadata_validated(self):
        with pytest.raises(ContentGenerationError):
            parse_draft(
                ArtifactKind.RISK_MAP,
                {"title": "Risks", "content": "text", "metadata": {"risks": [{"name": "only a name"}]}},
            )

    def test_kind_metadata_normalized(self):
        draft = parse_draft(
            ArtifactKind.RESOURCES,
            {
                "title": "Resources",
                "content": "- [Book](https://example.com)",
                "metadata": {"resources": [{"title": "Book", "url": "https://example.com"}]},
            },
        )
        assert draft.metadata == {"resources": [{"title": "Book", "url": "https://example.com", "why": None}]}

    def test_metadata_dropped_for_kinds_without_model(self):
        draft = parse_draft(
            ArtifactKind.SELF_NARRATIVE,
            {"title": "Story", "content": "text", "metadata": {"anything": 1}},
        )
        assert draft.metadata is None
