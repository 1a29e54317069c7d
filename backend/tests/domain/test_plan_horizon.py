"""Tests for the plan horizon heuristic."""

import pytest

from serious_people.domain.horizon import HorizonType, determine_plan_horizon

pytestmark = pytest.mark.unit


def _dossier(key_facts=None, constraints=None, situation=""):
    return {
        "interview_analysis": {
            "key_facts": key_facts or [],
            "constraints": constraints or [],
            "situation": situation,
        }
    }


class TestDeterminePlanHorizon:
    def test_no_dossier_defaults_to_90_days(self):
        assert determine_plan_horizon(None).type == HorizonType.DAYS_90

    def test_missing_analysis_defaults_to_90_days(self):
        assert determine_plan_horizon({"module_records": []}).type == HorizonType.DAYS_90

    def test_laid_off_is_30_days(self):
        horizon = determine_plan_horizon(_dossier(situation="Was laid off last week"))
        assert horizon.type == HorizonType.DAYS_30
        assert "Urgent" in horizon.rationale

    def test_urgent_constraint_is_30_days(self):
        assert determine_plan_horizon(_dossier(constraints=["Urgent: savings run out"])).type == HorizonType.DAYS_30

    def test_visa_is_60_days(self):
        assert determine_plan_horizon(_dossier(key_facts=["On a work visa"])).type == HorizonType.DAYS_60

    def test_deadline_is_60_days(self):
        assert determine_plan_horizon(_dossier(constraints=["Offer deadline Friday"])).type == HorizonType.DAYS_60

    def test_exploring_is_6_months(self):
        horizon = determine_plan_horizon(_dossier(situation="Exploring a move into teaching"))
        assert horizon.type == HorizonType.MONTHS_6

    def test_urgency_beats_deadline(self):
        """First matching rule wins."""
        dossier = _dossier(constraints=["visa deadline"], situation="fired yesterday")
        assert determine_plan_horizon(dossier).type == HorizonType.DAYS_30

    def test_plain_situation_is_90_days(self):
        assert determine_plan_horizon(_dossier(situation="Unhappy with manager")).type == HorizonType.DAYS_90

    def test_label(self):
        assert HorizonType.MONTHS_6.label == "6 months"
        assert HorizonType.DAYS_90.label == "90 days"
