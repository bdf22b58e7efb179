"""User preference profile endpoints"""

from fastapi import APIRouter, Depends

from ..schemas.profile import UserPreferenceProfileResponse
from ..services.ai_recommendation import AIRecommendationService
from .dependencies import get_recommendation_service

router = APIRouter()


@router.get("/{user_id}", response_model=UserPreferenceProfileResponse)
def get_profile(
    user_id: str,
    service: AIRecommendationService = Depends(get_recommendation_service)
):
    """Get a user's preference profile, creating an empty one if needed"""
    return service.get_or_create_profile(user_id)


@router.post("/{user_id}/recompute", response_model=UserPreferenceProfileResponse)
def recompute_profile(
    user_id: str,
    service: AIRecommendationService = Depends(get_recommendation_service)
):
    """Rebuild a user's preference profile from their view history"""
    return service.recompute_profile(user_id)
