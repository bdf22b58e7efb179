"""Shared fixtures and collaborator fakes"""

import json
from datetime import datetime, timedelta

import pytest
import redis
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from marketplace_recs.exceptions import UpstreamUnavailable
from marketplace_recs.models import (
    Base,
    Category,
    Product,
    ProductStatus,
    ProductSimilarity,
    ProductView,
)
from marketplace_recs.services.ai_recommendation import AIRecommendationService
from marketplace_recs.services.result_cache import RecommendationCache


class FakeRedis:
    """In-memory stand-in for the Redis client calls the cache makes"""

    def __init__(self):
        self.store = {}
        self.ttls = {}
        self.get_calls = 0

    def get(self, key):
        self.get_calls += 1
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def ping(self):
        return True


class UnreachableRedis:
    """Redis client whose every call fails"""

    def get(self, key):
        raise redis.ConnectionError("connection refused")

    def setex(self, key, ttl, value):
        raise redis.ConnectionError("connection refused")

    def ping(self):
        raise redis.ConnectionError("connection refused")


class FakeLLM:
    """LLM collaborator returning a canned response or failing"""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def complete(self, system_prompt, user_message):
        self.calls.append((system_prompt, user_message))
        if self.error is not None:
            raise self.error
        return self.response

    @classmethod
    def picking(cls, picks):
        return cls(response=json.dumps(picks))

    @classmethod
    def failing(cls, cause="timeout"):
        return cls(error=UpstreamUnavailable(cause))


class QueryCounter:
    """Counts SQL statements executed on an engine"""

    def __init__(self, engine):
        self.count = 0
        event.listen(engine, "before_cursor_execute", self._on_execute)

    def _on_execute(self, conn, cursor, statement, parameters, context, executemany):
        self.count += 1


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads"""

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def db_session(session_factory):
    """Create a test database session"""

    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
def cache(fake_redis):
    return RecommendationCache(fake_redis)


@pytest.fixture
def catalog(db_session):
    """
    Sample catalog

    Finance (published): p3 (4.8, 50 reviews), p2 (4.8, 5), p1 (4.5, 10),
    p4 (3.0, 100). Marketing (published): p5 (5.0, 2), p7 (4.0, 8).
    p6 is a Finance draft.
    """

    finance = Category(id="c1", name="Finance")
    marketing = Category(id="c2", name="Marketing")
    db_session.add_all([finance, marketing])

    def product(pid, category, price, rating, reviews, type_="excel_template", status=ProductStatus.PUBLISHED):
        return Product(
            id=pid,
            title=f"Product {pid}",
            slug=f"product-{pid}",
            price=price,
            average_rating=rating,
            total_reviews=reviews,
            type=type_,
            status=status,
            category_id=category,
        )

    products = {
        "p1": product("p1", "c1", 20, 4.5, 10),
        "p2": product("p2", "c1", 30, 4.8, 5),
        "p3": product("p3", "c1", 10, 4.8, 50, type_="google_sheet"),
        "p4": product("p4", "c1", 40, 3.0, 100),
        "p5": product("p5", "c2", 15, 5.0, 2, type_="presentation"),
        "p6": product("p6", "c1", 25, 5.0, 90, status=ProductStatus.DRAFT),
        "p7": product("p7", "c2", 25, 4.0, 8, type_="presentation"),
    }
    db_session.add_all(products.values())
    db_session.commit()

    return products


def add_similarities(session, source_id, pairs):
    """Add similarity rows (other_id, score); odd rows are stored reversed"""

    for index, (other_id, score) in enumerate(pairs):
        a, b = (source_id, other_id) if index % 2 == 0 else (other_id, source_id)
        session.add(ProductSimilarity(
            product_a_id=a,
            product_b_id=b,
            overall_score=score,
            content_score=score,
            collaborative_score=0,
        ))
    session.commit()


def add_views(session, user_id, product_ids, start=None):
    """Record views in order; later entries are more recent"""

    start = start or datetime(2024, 1, 1, 12, 0, 0)
    for offset, product_id in enumerate(product_ids):
        session.add(ProductView(
            user_id=user_id,
            product_id=product_id,
            viewed_at=start + timedelta(minutes=offset),
        ))
    session.commit()


@pytest.fixture
def make_service(db_session, cache):
    """Build the service with the fake cache and a given LLM"""

    def factory(llm=None, cache_override=None):
        return AIRecommendationService(
            db_session,
            cache=cache_override or cache,
            llm_client=llm or FakeLLM.failing("not_configured"),
        )

    return factory
