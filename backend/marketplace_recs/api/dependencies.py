"""Shared FastAPI dependencies"""

from functools import lru_cache
from fastapi import Depends
from sqlalchemy.orm import Session

from ..services.ai_recommendation import AIRecommendationService
from ..services.llm_client import AnthropicLLMClient
from ..services.result_cache import RecommendationCache
from ..utils.database import get_db


@lru_cache
def get_cache() -> RecommendationCache:
    """Process-wide Redis-backed result cache"""
    return RecommendationCache()


@lru_cache
def get_llm_client() -> AnthropicLLMClient:
    """Process-wide LLM client"""
    return AnthropicLLMClient()


def get_recommendation_service(
    db: Session = Depends(get_db),
    cache: RecommendationCache = Depends(get_cache),
    llm_client: AnthropicLLMClient = Depends(get_llm_client)
) -> AIRecommendationService:
    """Request-scoped recommendation service"""
    return AIRecommendationService(db, cache=cache, llm_client=llm_client)
