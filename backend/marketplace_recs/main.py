"""
Marketplace Recommendations - Main FastAPI Application

Recommendation service for the digital products marketplace:
- Similar products (precomputed similarity with live content fallback)
- AI-powered picks with per-product reasons
- Personalized "For You" feed from preference profiles
- Redis result cache
- Click and conversion feedback logging
- Structured Logging
- Prometheus Metrics
- Background profile refresh with Celery
"""

from fastapi import FastAPI, status, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from .config import settings
from .api import api_router
from .api.dependencies import get_cache
from .exceptions import ValidationError
from .utils.database import init_db, SessionLocal
from .utils.logging import setup_logging, get_logger, configure_stdlib_logging
from .utils.metrics import setup_metrics
from .utils.rate_limit import limiter

# Setup structured logging
setup_logging(log_level=settings.LOG_LEVEL)
configure_stdlib_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""

    # Startup
    logger.info("Starting Marketplace Recommendations", version=settings.VERSION)

    logger.info("Initializing database")
    init_db()

    logger.info("Checking Redis connection")
    if get_cache().health_check():
        logger.info("Redis connection successful")
    else:
        logger.warning("Redis connection failed - recommendations will not be cached")

    logger.info("Marketplace Recommendations started successfully")

    yield

    # Shutdown
    logger.info("Shutting down Marketplace Recommendations")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="""
    # Marketplace Recommendations API

    Product recommendations for the digital products marketplace.

    ## Endpoints

    - `similar`: products similar to a given product
    - `ai`: AI-curated picks for a user, each with a short reason
    - `for-you`: personalized feed filtered by the user's preference profile
    - `profiles`: read or recompute a user's preference profile
    - `recommendation-logs`: record clicks and conversions on AI picks
    """,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "recommendations", "description": "Recommendation retrieval"},
        {"name": "profiles", "description": "User preference profiles"},
        {"name": "feedback", "description": "Click and conversion feedback"},
    ]
)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Setup Prometheus metrics
setup_metrics(app)

app.include_router(api_router, prefix=settings.API_V1_STR)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"status": "error", "message": exc.message, "field": exc.field}
    )


@app.exception_handler(SQLAlchemyError)
async def store_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Store unavailable", url=str(request.url), error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "error", "message": "Data store unavailable"}
    )


# Middleware for logging requests
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all HTTP requests"""
    logger.info(
        "Request received",
        method=request.method,
        url=str(request.url),
        client=request.client.host if request.client else None
    )

    response = await call_next(request)

    logger.info(
        "Request completed",
        method=request.method,
        url=str(request.url),
        status_code=response.status_code
    )

    return response


@app.get("/", tags=["root"])
def root():
    """Root endpoint"""
    return {
        "message": "Marketplace Recommendations API",
        "version": settings.VERSION,
        "docs": "/docs",
        "status": "operational"
    }


@app.get("/health", tags=["root"], status_code=status.HTTP_200_OK)
def health_check():
    """Health check endpoint"""

    redis_healthy = get_cache().health_check()

    db_healthy = True
    try:
        db = SessionLocal()
        db.execute(text("SELECT 1"))
        db.close()
    except SQLAlchemyError as e:
        logger.error("Database health check failed", error=str(e))
        db_healthy = False

    # Redis is optional: without it every request recomputes
    return {
        "status": "healthy" if db_healthy and redis_healthy else ("degraded" if db_healthy else "unhealthy"),
        "redis": "connected" if redis_healthy else "disconnected",
        "database": "connected" if db_healthy else "disconnected",
        "version": settings.VERSION
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "marketplace_recs.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
