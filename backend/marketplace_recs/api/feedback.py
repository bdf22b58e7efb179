"""Recommendation feedback endpoints"""

from fastapi import APIRouter, Depends, status

from ..schemas.recommendation import ClickFeedback
from ..services.ai_recommendation import AIRecommendationService
from .dependencies import get_recommendation_service

router = APIRouter()


@router.post("/{log_id}/click", status_code=status.HTTP_204_NO_CONTENT)
def record_click(
    log_id: str,
    feedback: ClickFeedback,
    service: AIRecommendationService = Depends(get_recommendation_service)
):
    """Record that a recommended product was clicked"""
    service.record_click(log_id, feedback.clicked_product_id)


@router.post("/{log_id}/conversion", status_code=status.HTTP_204_NO_CONTENT)
def record_conversion(
    log_id: str,
    service: AIRecommendationService = Depends(get_recommendation_service)
):
    """Record that a recommendation led to a purchase"""
    service.record_conversion(log_id)
