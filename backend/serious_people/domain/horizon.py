"""Plan horizon heuristic.

Pure function over the client dossier's interview analysis.
"""
from dataclasses import dataclass
from enum import Enum


class HorizonType(str, Enum):
    DAYS_30 = "30_days"
    DAYS_60 = "60_days"
    DAYS_90 = "90_days"
    MONTHS_6 = "6_months"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ")


@dataclass(frozen=True)
class PlanHorizon:
    type: HorizonType
    rationale: str


def determine_plan_horizon(dossier: dict | None) -> PlanHorizon:
    """Pick the action-plan time box from the client's circumstances.

    Args:
        dossier: {"interview_analysis": {"key_facts": [...], "constraints": [...], "situation": str}}

    Returns:
        PlanHorizon with type and a one-line rationale

    Rules (first match wins):
        - Urgent signals (immediate, urgent, fired, laid off) -> 30 days
        - External deadlines (visa, deadline) -> 60 days
        - Exploratory language (long-term, exploring, considering) -> 6 months
        - Otherwise -> 90 days
    """
    analysis = (dossier or {}).get("interview_analysis")
    if not analysis:
        return PlanHorizon(HorizonType.DAYS_90, "Standard timeline for career transitions")

    key_facts = " ".join(analysis.get("key_facts") or []).lower()
    constraints = " ".join(analysis.get("constraints") or []).lower()
    situation = (analysis.get("situation") or "").lower()

    if (
        "immediate" in key_facts
        or "urgent" in constraints
        or "fired" in situation
        or "laid off" in situation
    ):
        return PlanHorizon(HorizonType.DAYS_30, "Urgent timeline due to immediate circumstances")

    if "visa" in key_facts or "visa" in constraints or "deadline" in constraints:
        return PlanHorizon(HorizonType.DAYS_60, "Accelerated timeline due to external deadlines")

    if "long-term" in key_facts or "exploring" in situation or "considering" in situation:
        return PlanHorizon(
            HorizonType.MONTHS_6, "Extended timeline for thorough exploration and positioning"
        )

    return PlanHorizon(HorizonType.DAYS_90, "Standard timeline for thoughtful career transitions")
