"""Tests for the recommendation result cache"""

import json

from marketplace_recs.schemas.recommendation import RecommendedProduct
from marketplace_recs.services.result_cache import RecommendationCache, CacheOperation

from conftest import FakeRedis, UnreachableRedis


def _product(pid, reason=None):
    return RecommendedProduct(
        id=pid, title=f"Product {pid}", slug=f"product-{pid}", price=12.0,
        average_rating=4.0, total_reviews=7, type="excel_template", reason=reason
    )


def test_key_includes_operation_identifier_and_limit():
    cache = RecommendationCache(FakeRedis(), prefix="ai_recs")

    assert cache.build_key(CacheOperation.SIMILAR, "p1", 8) == "ai_recs:similar:p1:8"
    assert cache.build_key(CacheOperation.SIMILAR, "p1", 8) != cache.build_key(CacheOperation.SIMILAR, "p1", 4)
    assert cache.build_key(CacheOperation.AI, "u1", 6) != cache.build_key(CacheOperation.FOR_YOU, "u1", 6)


def test_ttl_tiers():
    cache = RecommendationCache(FakeRedis())

    assert cache.ttl_for(CacheOperation.SIMILAR) == 1800
    assert cache.ttl_for(CacheOperation.FOR_YOU) == 1800
    assert cache.ttl_for(CacheOperation.AI) == 3600


def test_products_round_trip_with_ttl():
    redis_client = FakeRedis()
    cache = RecommendationCache(redis_client)
    key = cache.build_key(CacheOperation.AI, "u1", 2)

    cache.set_products(CacheOperation.AI, key, [_product("p1", "Great fit"), _product("p2")])

    assert redis_client.ttls[key] == 3600
    stored = json.loads(redis_client.store[key])
    assert "reason" not in stored[1]
    assert "compare_at_price" not in stored[0]
    assert cache.get_products(CacheOperation.AI, key) == [_product("p1", "Great fit"), _product("p2")]


def test_miss_returns_none():
    cache = RecommendationCache(FakeRedis())

    assert cache.get_products(CacheOperation.SIMILAR, "ai_recs:similar:p1:8") is None


def test_empty_list_is_a_hit():
    cache = RecommendationCache(FakeRedis())
    key = cache.build_key(CacheOperation.SIMILAR, "p1", 8)

    cache.set_products(CacheOperation.SIMILAR, key, [])

    assert cache.get_products(CacheOperation.SIMILAR, key) == []


def test_unreachable_redis_is_a_miss():
    cache = RecommendationCache(UnreachableRedis())
    key = cache.build_key(CacheOperation.SIMILAR, "p1", 8)

    assert cache.get_products(CacheOperation.SIMILAR, key) is None
    assert cache.set_products(CacheOperation.SIMILAR, key, [_product("p1")]) is False
    assert cache.health_check() is False


def test_undecodable_entry_is_a_miss():
    redis_client = FakeRedis()
    cache = RecommendationCache(redis_client)
    redis_client.store["ai_recs:similar:p1:8"] = "not json"

    assert cache.get_products(CacheOperation.SIMILAR, "ai_recs:similar:p1:8") is None


def test_log_id_stored_beside_entry():
    redis_client = FakeRedis()
    cache = RecommendationCache(redis_client)
    key = cache.build_key(CacheOperation.AI, "u1", 3)

    cache.set_log_id(CacheOperation.AI, key, "log-1")

    assert cache.get_log_id(key) == "log-1"
    assert redis_client.ttls[f"{key}:log"] == 3600
    assert cache.get_log_id(cache.build_key(CacheOperation.AI, "u2", 3)) is None
