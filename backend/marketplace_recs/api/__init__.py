"""API routes"""

from fastapi import APIRouter
from .recommendations import router as recommendations_router
from .profiles import router as profiles_router
from .feedback import router as feedback_router

api_router = APIRouter()

api_router.include_router(recommendations_router, prefix="/recommendations", tags=["recommendations"])
api_router.include_router(profiles_router, prefix="/profiles", tags=["profiles"])
api_router.include_router(feedback_router, prefix="/recommendation-logs", tags=["feedback"])
