from fastapi import APIRouter
from app.api.endpoints import interaction_log, revision

api_router = APIRouter()
api_router.include_router(interaction_log.router, prefix="/interaction-log", tags=["interaction-log"])
api_router.include_router(revision.router, prefix="/sessions", tags=["revision"])
