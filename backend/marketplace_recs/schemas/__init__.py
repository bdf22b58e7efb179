"""Pydantic schemas for request/response validation"""

from .recommendation import (
    RecommendedProduct,
    AIRecommendationRequest,
    RecommendationListResponse,
    ClickFeedback,
)
from .profile import UserPreferenceProfileResponse

__all__ = [
    "RecommendedProduct",
    "AIRecommendationRequest",
    "RecommendationListResponse",
    "ClickFeedback",
    "UserPreferenceProfileResponse",
]
