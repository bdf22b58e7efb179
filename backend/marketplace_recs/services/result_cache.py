"""Recommendation result cache backed by Redis"""

import json
import redis
from typing import Optional, List

from ..config import settings
from ..schemas.recommendation import RecommendedProduct
from ..utils.logging import get_logger
from ..utils.metrics import increment_cache_hit, increment_cache_miss, increment_cache_error

logger = get_logger(__name__)


class CacheOperation:
    """Cached operation names, used in keys and metrics"""

    SIMILAR = "similar"
    FOR_YOU = "foryou"
    AI = "ai"


class RecommendationCache:
    """
    Memoizes recommendation lists per (operation, identifier, limit)

    Entries are always replaced whole and expire on their TTL; nothing is
    evicted when catalog or view data changes. Redis failures are logged and
    treated as a miss on read and a no-op on write, so an unreachable cache
    only costs a recompute.
    """

    def __init__(self, redis_client: Optional[redis.Redis] = None, prefix: Optional[str] = None):
        self.redis_client = redis_client or redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            socket_connect_timeout=settings.REDIS_SOCKET_TIMEOUT,
            decode_responses=True
        )
        self.prefix = prefix or settings.CACHE_PREFIX
        self.ttls = {
            CacheOperation.SIMILAR: settings.CACHE_TTL,
            CacheOperation.FOR_YOU: settings.CACHE_TTL,
            CacheOperation.AI: settings.AI_CACHE_TTL,
        }

    def build_key(self, operation: str, identifier: str, limit: int) -> str:
        """Generate cache key; limit is part of the key so sizes never collide"""
        return f"{self.prefix}:{operation}:{identifier}:{limit}"

    def ttl_for(self, operation: str) -> int:
        return self.ttls[operation]

    def get(self, key: str) -> Optional[str]:
        try:
            return self.redis_client.get(key)
        except redis.RedisError as e:
            increment_cache_error("get")
            logger.warning("Cache read failed, treating as miss", key=key, error=str(e))
            return None

    def set(self, key: str, value: str, ttl_seconds: int) -> bool:
        try:
            self.redis_client.setex(key, ttl_seconds, value)
            return True
        except redis.RedisError as e:
            increment_cache_error("set")
            logger.warning("Cache write failed", key=key, error=str(e))
            return False

    def get_products(self, operation: str, key: str) -> Optional[List[RecommendedProduct]]:
        """
        Read a cached recommendation list

        Returns None on a miss. An entry that no longer decodes is treated as
        a miss and gets overwritten by the recompute.
        """
        cached = self.get(key)
        if cached is None:
            increment_cache_miss(operation)
            return None

        try:
            products = [RecommendedProduct(**item) for item in json.loads(cached)]
        except (ValueError, TypeError) as e:
            increment_cache_miss(operation)
            logger.warning("Discarding undecodable cache entry", key=key, error=str(e))
            return None

        increment_cache_hit(operation)
        logger.debug("Recommendation cache hit", key=key)
        return products

    def set_products(self, operation: str, key: str, products: List[RecommendedProduct]) -> bool:
        value = json.dumps([product.model_dump(exclude_none=True) for product in products])
        return self.set(key, value, self.ttl_for(operation))

    def get_log_id(self, key: str) -> Optional[str]:
        """Recommendation log id stored next to a cached AI result"""
        return self.get(f"{key}:log")

    def set_log_id(self, operation: str, key: str, log_id: str) -> bool:
        return self.set(f"{key}:log", log_id, self.ttl_for(operation))

    def health_check(self) -> bool:
        """
        Check if Redis connection is healthy

        Returns:
            True if healthy, False otherwise
        """

        try:
            return bool(self.redis_client.ping())
        except redis.RedisError:
            return False
