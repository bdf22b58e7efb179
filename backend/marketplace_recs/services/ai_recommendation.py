"""AI-assisted recommendation service"""

from typing import List, Optional
from sqlalchemy.orm import Session

from ..config import settings
from ..exceptions import ValidationError
from ..models import RecommendationLog, UserPreferenceProfile
from ..schemas.recommendation import RecommendedProduct
from ..utils.logging import get_logger
from ..utils.metrics import track_recommendation_time, record_recommendations
from .candidate_selector import CandidateSelector
from .llm_client import AnthropicLLMClient
from .profile_builder import ProfileBuilder
from .ranking import RankingEngine, AIRankingResult
from .result_cache import RecommendationCache, CacheOperation

logger = get_logger(__name__)


class AIRecommendationService:
    """
    Entry point for product recommendations

    Every read operation validates its input, then consults the result
    cache, and on a miss runs candidate selection, profile lookup and
    ranking before writing the result back. Store errors propagate
    unchanged; cache and LLM failures are absorbed.
    """

    def __init__(
        self,
        db: Session,
        cache: Optional[RecommendationCache] = None,
        llm_client: Optional[AnthropicLLMClient] = None
    ):
        self.db = db
        self.cache = cache or RecommendationCache()
        self.selector = CandidateSelector(db)
        self.profiles = ProfileBuilder(db)
        self.ranking = RankingEngine(db, llm_client or AnthropicLLMClient(), self.selector)

    # Recommendation reads

    def get_similar_products(self, product_id: str, limit: int = None) -> List[RecommendedProduct]:
        """Products similar to product_id; empty for an unknown product"""

        limit = self._validate_limit(settings.SIMILAR_DEFAULT_LIMIT if limit is None else limit)
        self._validate_id("product_id", product_id)

        key = self.cache.build_key(CacheOperation.SIMILAR, product_id, limit)
        cached = self.cache.get_products(CacheOperation.SIMILAR, key)
        if cached is not None:
            record_recommendations(CacheOperation.SIMILAR, "cache")
            return cached

        products = self._compute_similar(product_id, limit)
        self.cache.set_products(CacheOperation.SIMILAR, key, products)
        record_recommendations(CacheOperation.SIMILAR, "computed")
        return products

    def get_ai_recommendations(
        self, user_id: str, context: Optional[str] = None, limit: int = None
    ) -> List[RecommendedProduct]:
        """
        LLM-curated recommendations with a one-line reason per product

        When the LLM is unavailable the top-rated candidates are returned
        without reasons.
        """
        return self.get_ai_recommendation_result(user_id, context, limit).products

    def get_ai_recommendation_result(
        self, user_id: str, context: Optional[str] = None, limit: int = None
    ) -> AIRankingResult:
        """
        AI recommendations together with the id of their recommendation log

        The log id is what feedback calls reference; it is None for the
        fallback list. Only successful AI picks are cached, so an outage
        does not pin the fallback list for a full cache window.
        """

        limit = self._validate_limit(settings.AI_DEFAULT_LIMIT if limit is None else limit)
        self._validate_id("user_id", user_id)
        if context is not None and not isinstance(context, str):
            raise ValidationError("context", "must be a string")

        key = self.cache.build_key(CacheOperation.AI, user_id, limit)
        cached = self.cache.get_products(CacheOperation.AI, key)
        if cached is not None:
            record_recommendations(CacheOperation.AI, "cache")
            return AIRankingResult(
                products=cached, ai_succeeded=True, log_id=self.cache.get_log_id(key)
            )

        result = self._compute_ai(user_id, context, limit)
        if result.ai_succeeded:
            self.cache.set_products(CacheOperation.AI, key, result.products)
            if result.log_id is not None:
                self.cache.set_log_id(CacheOperation.AI, key, result.log_id)
            record_recommendations(CacheOperation.AI, "computed")
        else:
            record_recommendations(CacheOperation.AI, "fallback")
        return result

    def get_for_you_feed(self, user_id: str, limit: int = None) -> List[RecommendedProduct]:
        """Profile-filtered, best-rated products for the user"""

        limit = self._validate_limit(settings.FOR_YOU_DEFAULT_LIMIT if limit is None else limit)
        self._validate_id("user_id", user_id)

        key = self.cache.build_key(CacheOperation.FOR_YOU, user_id, limit)
        cached = self.cache.get_products(CacheOperation.FOR_YOU, key)
        if cached is not None:
            record_recommendations(CacheOperation.FOR_YOU, "cache")
            return cached

        products = self._compute_for_you(user_id, limit)
        self.cache.set_products(CacheOperation.FOR_YOU, key, products)
        record_recommendations(CacheOperation.FOR_YOU, "computed")
        return products

    @track_recommendation_time(CacheOperation.SIMILAR)
    def _compute_similar(self, product_id: str, limit: int) -> List[RecommendedProduct]:
        return self.ranking.similar(product_id, limit)

    @track_recommendation_time(CacheOperation.AI)
    def _compute_ai(self, user_id: str, context: Optional[str], limit: int):
        profile = self.profiles.get_or_create(user_id)
        return self.ranking.ai_powered(user_id, profile, context, limit)

    @track_recommendation_time(CacheOperation.FOR_YOU)
    def _compute_for_you(self, user_id: str, limit: int) -> List[RecommendedProduct]:
        profile = self.profiles.get_or_create(user_id)
        return self.ranking.for_you(profile, limit)

    # Profiles

    def get_or_create_profile(self, user_id: str) -> UserPreferenceProfile:
        self._validate_id("user_id", user_id)
        return self.profiles.get_or_create(user_id)

    def recompute_profile(self, user_id: str) -> UserPreferenceProfile:
        self._validate_id("user_id", user_id)
        return self.profiles.recompute(user_id)

    # Feedback

    def record_click(self, log_id: str, clicked_product_id: str) -> None:
        """Mark which recommended product the user clicked"""
        self._validate_id("log_id", log_id)
        self._validate_id("clicked_product_id", clicked_product_id)
        self._update_log(log_id, clicked_product_id=clicked_product_id)

    def record_conversion(self, log_id: str) -> None:
        """Mark a logged recommendation as converted"""
        self._validate_id("log_id", log_id)
        self._update_log(log_id, converted=True)

    def _update_log(self, log_id: str, **values) -> None:
        updated = (
            self.db.query(RecommendationLog)
            .filter(RecommendationLog.id == log_id)
            .update(values, synchronize_session=False)
        )
        self.db.commit()

        if not updated:
            logger.warning("Recommendation log not found", log_id=log_id, fields=list(values))

    # Validation

    @staticmethod
    def _validate_limit(limit) -> int:
        if isinstance(limit, bool) or not isinstance(limit, int):
            raise ValidationError("limit", "must be an integer")
        if limit < 1 or limit > settings.MAX_RECOMMENDATION_LIMIT:
            raise ValidationError(
                "limit", f"must be between 1 and {settings.MAX_RECOMMENDATION_LIMIT}"
            )
        return limit

    @staticmethod
    def _validate_id(field: str, value) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(field, "must be a non-empty string")
        if len(value) > settings.MAX_ID_LENGTH:
            raise ValidationError(field, f"must be at most {settings.MAX_ID_LENGTH} characters")
        return value
