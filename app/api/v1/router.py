"""API v1 router aggregator."""

from fastapi import APIRouter

from app.api.v1.creative import routes as creative
from app.api.v1.credits import routes as credits
from app.api.v1.tasks import routes as tasks

api_router = APIRouter()

api_router.include_router(creative.router, prefix="/creative", tags=["Creative"])
api_router.include_router(credits.router, prefix="/credits", tags=["Credits"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["Tasks"])
