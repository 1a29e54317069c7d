"""Journey API route: where the user is in the coaching progression."""

from fastapi import APIRouter, Depends

from serious_people.api.deps import get_completion_service
from serious_people.core.auth import AuthUser, require_auth
from serious_people.schemas.api import JourneyResponse
from serious_people.services.completion_service import CompletionService

router = APIRouter()


@router.get("", response_model=JourneyResponse)
async def get_journey(
    user: AuthUser = Depends(require_auth),
    completion: CompletionService = Depends(get_completion_service),
) -> JourneyResponse:
    """Resolve the caller's current step from their completion flags."""
    position, state = await completion.get_position(user.user_id, create=True)
    return JourneyResponse.build(position, state)
