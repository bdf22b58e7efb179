"""Prometheus metrics configuration"""

from prometheus_client import Counter, Histogram, Info
from prometheus_fastapi_instrumentator import Instrumentator
from typing import Callable
import time
from functools import wraps

# Application info
app_info = Info('marketplace_recommendations', 'Marketplace Recommendations Information')
app_info.info({
    'version': '1.0.0',
    'service': 'marketplace-recommendations'
})

# Recommendation metrics
recommendations_served_total = Counter(
    'recommendations_served_total',
    'Total recommendation lists served',
    ['operation', 'source']
)

recommendation_generation_duration_seconds = Histogram(
    'recommendation_generation_duration_seconds',
    'Time taken to generate recommendations on a cache miss',
    ['operation']
)

# Cache metrics
cache_hits_total = Counter(
    'recommendation_cache_hits_total',
    'Total recommendation cache hits',
    ['operation']
)

cache_misses_total = Counter(
    'recommendation_cache_misses_total',
    'Total recommendation cache misses',
    ['operation']
)

cache_errors_total = Counter(
    'recommendation_cache_errors_total',
    'Redis errors absorbed by the recommendation cache',
    ['action']
)

# LLM metrics
llm_request_duration_seconds = Histogram(
    'llm_request_duration_seconds',
    'LLM completion latency in seconds'
)

ai_fallbacks_total = Counter(
    'ai_recommendation_fallbacks_total',
    'AI recommendation requests served by the heuristic fallback',
    ['cause']
)


def setup_metrics(app):
    """
    Setup Prometheus metrics for FastAPI app

    Args:
        app: FastAPI application instance
    """
    instrumentator = Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics"],
        env_var_name="ENABLE_METRICS",
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True
    )

    instrumentator.instrument(app).expose(app, endpoint="/metrics")

    return instrumentator


def track_recommendation_time(operation: str):
    """
    Decorator to track recommendation generation time

    Usage:
        @track_recommendation_time("similar")
        def compute():
            pass
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            start_time = time.time()
            try:
                return func(*args, **kwargs)
            finally:
                recommendation_generation_duration_seconds.labels(
                    operation=operation
                ).observe(time.time() - start_time)

        return wrapper

    return decorator


def increment_cache_hit(operation: str):
    """Increment cache hit counter"""
    cache_hits_total.labels(operation=operation).inc()


def increment_cache_miss(operation: str):
    """Increment cache miss counter"""
    cache_misses_total.labels(operation=operation).inc()


def increment_cache_error(action: str):
    """Increment absorbed cache error counter"""
    cache_errors_total.labels(action=action).inc()


def record_recommendations(operation: str, source: str):
    """Record a served recommendation list (source: cache or computed)"""
    recommendations_served_total.labels(operation=operation, source=source).inc()


def record_ai_fallback(cause: str):
    """Record an AI request that fell back to the heuristic ranking"""
    ai_fallbacks_total.labels(cause=cause).inc()
