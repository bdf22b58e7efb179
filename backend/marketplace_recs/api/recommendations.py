"""Recommendation API endpoints"""

from fastapi import APIRouter, Depends, Query, Request
from typing import Optional

from ..config import settings
from ..schemas.recommendation import AIRecommendationRequest, RecommendationListResponse
from ..services.ai_recommendation import AIRecommendationService
from ..utils.rate_limit import limiter, get_user_rate_limit_key
from .dependencies import get_recommendation_service

router = APIRouter()


@router.get(
    "/similar/{product_id}",
    response_model=RecommendationListResponse,
    response_model_exclude_none=True
)
def get_similar_products(
    product_id: str,
    limit: int = Query(settings.SIMILAR_DEFAULT_LIMIT, description="Number of products"),
    service: AIRecommendationService = Depends(get_recommendation_service)
):
    """Get products similar to a product (precomputed or content-based)"""

    products = service.get_similar_products(product_id, limit)
    return RecommendationListResponse(
        message="Similar products retrieved successfully",
        data=products
    )


@router.get(
    "/ai/{user_id}",
    response_model=RecommendationListResponse,
    response_model_exclude_none=True
)
@limiter.limit(settings.AI_RATE_LIMIT, key_func=get_user_rate_limit_key)
def get_ai_recommendations(
    request: Request,
    user_id: str,
    context: Optional[str] = Query(None, max_length=500, description="What the user is looking for"),
    limit: int = Query(settings.AI_DEFAULT_LIMIT, description="Number of products"),
    service: AIRecommendationService = Depends(get_recommendation_service)
):
    """
    Get AI-powered recommendations for a user

    Each product carries a short reason when the AI selection succeeded.
    When the AI provider is unavailable, the best-rated candidates are
    returned instead.
    """

    result = service.get_ai_recommendation_result(user_id, context, limit)
    return RecommendationListResponse(
        message="AI recommendations retrieved successfully",
        data=result.products,
        log_id=result.log_id
    )


@router.post(
    "/ai/{user_id}",
    response_model=RecommendationListResponse,
    response_model_exclude_none=True
)
@limiter.limit(settings.AI_RATE_LIMIT, key_func=get_user_rate_limit_key)
def post_ai_recommendations(
    request: Request,
    user_id: str,
    body: AIRecommendationRequest,
    service: AIRecommendationService = Depends(get_recommendation_service)
):
    """Same as the GET endpoint, with the context in the request body"""

    result = service.get_ai_recommendation_result(user_id, body.context, body.limit)
    return RecommendationListResponse(
        message="AI recommendations retrieved successfully",
        data=result.products,
        log_id=result.log_id
    )


@router.get(
    "/for-you/{user_id}",
    response_model=RecommendationListResponse,
    response_model_exclude_none=True
)
def get_for_you_feed(
    user_id: str,
    limit: int = Query(settings.FOR_YOU_DEFAULT_LIMIT, description="Number of products"),
    service: AIRecommendationService = Depends(get_recommendation_service)
):
    """Get the personalized "For You" feed for a user"""

    products = service.get_for_you_feed(user_id, limit)
    return RecommendationListResponse(
        message="For You feed retrieved successfully",
        data=products
    )
