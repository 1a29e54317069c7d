"""Client-side journey gate.

Decides from a GET /api/journey payload whether a page may render or where to
redirect. It calls the same domain functions as the server-side route gate.
"""

from serious_people.domain.journey import STEP_PATHS, GateDecision, JourneyStep, can_access

# Page path -> step required to view it
PAGE_STEPS: dict[str, JourneyStep] = {
    "/interview": JourneyStep.INTERVIEW,
    "/module/1": JourneyStep.MODULE_1,
    "/module/2": JourneyStep.MODULE_2,
    "/module/3": JourneyStep.MODULE_3,
    "/coach-letter": JourneyStep.GRADUATION,
    "/serious-plan": JourneyStep.SERIOUS_PLAN,
}


def check(required: JourneyStep, journey: dict) -> GateDecision:
    """Gate ``required`` against the server's journey payload."""
    current = JourneyStep(journey["step"])
    if can_access(required, current):
        return GateDecision(allowed=True, current_step=current)
    return GateDecision(
        allowed=False,
        current_step=current,
        redirect_path=journey.get("currentPath") or STEP_PATHS[current],
    )


def check_path(path: str, journey: dict) -> GateDecision:
    """Gate a page path; paths outside the journey are always allowed."""
    required = PAGE_STEPS.get(path)
    current = JourneyStep(journey["step"])
    if required is None:
        return GateDecision(allowed=True, current_step=current)
    return check(required, journey)
