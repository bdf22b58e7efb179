"""Configuration settings for the marketplace recommendation service"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # API Settings
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "Marketplace Recommendations"
    VERSION: str = "1.0.0"
    LOG_LEVEL: str = "INFO"

    # Database Settings
    POSTGRES_USER: str = "marketplace"
    POSTGRES_PASSWORD: str = "marketplace_pass"
    POSTGRES_HOST: str = "postgres"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "marketplace"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_RECYCLE_SECONDS: int = 1800

    @property
    def DATABASE_URL(self) -> str:
        return f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # Redis Settings
    REDIS_HOST: str = "redis"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: Optional[str] = None
    REDIS_SOCKET_TIMEOUT: float = 2.0

    @property
    def REDIS_URL(self) -> str:
        if self.REDIS_PASSWORD:
            return f"redis://:{self.REDIS_PASSWORD}@{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"

    # Celery Settings
    CELERY_BROKER_URL: str = "redis://redis:6379/2"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/3"
    PROFILE_REFRESH_INTERVAL_MINUTES: int = 30

    # LLM Settings
    ANTHROPIC_API_KEY: Optional[str] = None
    ANTHROPIC_MODEL: str = "claude-sonnet-4-5-20250929"
    LLM_MAX_TOKENS: int = 2048
    LLM_TIMEOUT_SECONDS: float = 15.0

    # Cache Settings
    CACHE_PREFIX: str = "ai_recs"
    CACHE_TTL: int = 1800  # 30 minutes, similar + for-you
    AI_CACHE_TTL: int = 3600  # 1 hour, AI-powered

    # Recommendation Settings
    SIMILAR_DEFAULT_LIMIT: int = 8
    AI_DEFAULT_LIMIT: int = 6
    FOR_YOU_DEFAULT_LIMIT: int = 12
    MAX_RECOMMENDATION_LIMIT: int = 50
    MAX_ID_LENGTH: int = 64
    AI_CANDIDATE_POOL_SIZE: int = 50
    AI_PROMPT_CANDIDATES: int = 30
    AI_PROMPT_RECENT_VIEWS: int = 5
    AI_EXCLUDED_RECENT_VIEWS: int = 20

    # Profile Settings
    PROFILE_TOP_CATEGORIES: int = 5
    PROFILE_TOP_TYPES: int = 5
    PROFILE_BROWSING_HISTORY: int = 20
    PROFILE_REFRESH_BATCH_SIZE: int = 500

    # Rate limiting
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    AI_RATE_LIMIT: str = "20/minute"

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
