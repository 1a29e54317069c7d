"""Journey steps and the resolver that maps completion flags to the current step.

Pure domain logic with no external dependencies. The server-side route gate and
the client-side gate both call these functions so the two cannot drift.
"""
from dataclasses import dataclass, fields
from enum import Enum


class JourneyStep(str, Enum):
    """Seven-step coaching journey, declared in progression order."""

    INTERVIEW = "interview"
    PAYWALL = "paywall"
    MODULE_1 = "module_1"
    MODULE_2 = "module_2"
    MODULE_3 = "module_3"
    GRADUATION = "graduation"
    SERIOUS_PLAN = "serious_plan"

    @property
    def order(self) -> int:
        return STEP_ORDER.index(self)


STEP_ORDER: list[JourneyStep] = list(JourneyStep)

STEP_PATHS: dict[JourneyStep, str] = {
    JourneyStep.INTERVIEW: "/interview",
    # The offer is presented inline at the end of the interview
    JourneyStep.PAYWALL: "/interview",
    JourneyStep.MODULE_1: "/module/1",
    JourneyStep.MODULE_2: "/module/2",
    JourneyStep.MODULE_3: "/module/3",
    JourneyStep.GRADUATION: "/coach-letter",
    JourneyStep.SERIOUS_PLAN: "/serious-plan",
}


@dataclass(frozen=True)
class CompletionState:
    """Snapshot of a user's completion flags, passed to the resolver by value."""

    interview_complete: bool = False
    payment_verified: bool = False
    module1_complete: bool = False
    module2_complete: bool = False
    module3_complete: bool = False
    has_plan: bool = False

    @classmethod
    def flag_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]

    @classmethod
    def from_record(cls, record) -> "CompletionState":
        """Build from any object exposing the six flag attributes (e.g. CompletionRecord)."""
        return cls(**{name: bool(getattr(record, name)) for name in cls.flag_names()})

    def as_dict(self) -> dict[str, bool]:
        return {name: getattr(self, name) for name in self.flag_names()}


# First unmet condition wins, checked in this order
_REQUIREMENTS: list[tuple[str, JourneyStep]] = [
    ("interview_complete", JourneyStep.INTERVIEW),
    ("payment_verified", JourneyStep.PAYWALL),
    ("module1_complete", JourneyStep.MODULE_1),
    ("module2_complete", JourneyStep.MODULE_2),
    ("module3_complete", JourneyStep.MODULE_3),
    ("has_plan", JourneyStep.GRADUATION),
]


@dataclass(frozen=True)
class JourneyPosition:
    """Result of resolving a CompletionState."""

    step: JourneyStep
    path: str


@dataclass(frozen=True)
class GateDecision:
    """Whether a request for a given step may proceed."""

    allowed: bool
    current_step: JourneyStep
    redirect_path: str | None = None


def resolve(completion: CompletionState) -> JourneyPosition:
    """Map completion flags to the single step the user is currently on.

    Pure function -- deterministic, no side effects.

    Args:
        completion: The user's completion flags

    Returns:
        JourneyPosition with the current step and its canonical path
    """
    for flag, step in _REQUIREMENTS:
        if not getattr(completion, flag):
            return JourneyPosition(step=step, path=STEP_PATHS[step])
    return JourneyPosition(step=JourneyStep.SERIOUS_PLAN, path=STEP_PATHS[JourneyStep.SERIOUS_PLAN])


def can_access(required: JourneyStep, current: JourneyStep) -> bool:
    """A step is reachable iff it does not come after the current step."""
    return required.order <= current.order


def gate(required: JourneyStep, completion: CompletionState) -> GateDecision:
    """Decide whether a request for ``required`` is allowed.

    Rules:
        - Steps at or before the current step are allowed
        - Later steps are denied with a redirect to the current step's path
    """
    position = resolve(completion)
    if can_access(required, position.step):
        return GateDecision(allowed=True, current_step=position.step)
    return GateDecision(allowed=False, current_step=position.step, redirect_path=position.path)
