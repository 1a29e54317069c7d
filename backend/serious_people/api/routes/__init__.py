from fastapi import APIRouter

from serious_people.api.routes import health, journey, serious_plan

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(journey.router, prefix="/journey", tags=["journey"])
api_router.include_router(serious_plan.router, prefix="/serious-plan", tags=["serious-plan"])
