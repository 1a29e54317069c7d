"""Artifact and plan status enums plus the plan status derivation.

Pure functions with no external dependencies.
"""
from collections.abc import Iterable
from enum import Enum


class GenerationStatus(str, Enum):
    """Per-artifact generation lifecycle."""

    PENDING = "pending"
    GENERATING = "generating"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset({GenerationStatus.COMPLETE, GenerationStatus.ERROR})

# Allowed single-step transitions (compare-and-set in the job enforces these)
TRANSITIONS: dict[GenerationStatus, list[GenerationStatus]] = {
    GenerationStatus.PENDING: [GenerationStatus.GENERATING],
    GenerationStatus.GENERATING: [GenerationStatus.COMPLETE, GenerationStatus.ERROR],
    GenerationStatus.COMPLETE: [],  # Terminal; only an explicit reset returns it to pending
    GenerationStatus.ERROR: [],  # Terminal; only an explicit reset returns it to pending
}


class PlanStatus(str, Enum):
    """Overall plan status, always derived from artifact statuses."""

    PENDING = "pending"
    GENERATING = "generating"
    READY = "ready"
    ERROR = "error"


def is_valid_transition(current: GenerationStatus, target: GenerationStatus) -> bool:
    return target in TRANSITIONS.get(current, [])


def derive_plan_status(statuses: Iterable[GenerationStatus | str]) -> PlanStatus:
    """Compute the overall plan status from its artifact statuses.

    Args:
        statuses: generation_status of every artifact in the plan

    Returns:
        PlanStatus

    Rules:
        - No artifacts yet -> PENDING
        - Any artifact pending or generating -> GENERATING
        - All terminal with at least one complete -> READY (partial results are usable)
        - All terminal and all errored -> ERROR
    """
    normalized = [GenerationStatus(s) for s in statuses]
    if not normalized:
        return PlanStatus.PENDING

    if any(not s.is_terminal for s in normalized):
        return PlanStatus.GENERATING

    if any(s == GenerationStatus.COMPLETE for s in normalized):
        return PlanStatus.READY

    return PlanStatus.ERROR


def is_plan_settled(plan_status: PlanStatus | str, artifact_statuses: Iterable[GenerationStatus | str]) -> bool:
    """True once the plan and every artifact have reached a terminal status."""
    if PlanStatus(plan_status) not in (PlanStatus.READY, PlanStatus.ERROR):
        return False
    return all(GenerationStatus(s).is_terminal for s in artifact_statuses)
