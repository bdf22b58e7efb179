"""Recommendation services"""

from .ai_recommendation import AIRecommendationService
from .candidate_selector import CandidateSelector
from .llm_client import AnthropicLLMClient
from .profile_builder import ProfileBuilder
from .ranking import RankingEngine, AIRankingResult
from .result_cache import RecommendationCache, CacheOperation

__all__ = [
    "AIRecommendationService",
    "CandidateSelector",
    "AnthropicLLMClient",
    "ProfileBuilder",
    "RankingEngine",
    "AIRankingResult",
    "RecommendationCache",
    "CacheOperation",
]
