"""Database engine and request-scoped sessions"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Generator

from ..config import settings
from ..models.base import Base


# The catalog tables are shared with the storefront; connections are
# recycled so a failover on the primary does not leave stale sockets.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_recycle=settings.DB_POOL_RECYCLE_SECONDS
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Session dependency for FastAPI

    A request that fails mid-transaction has its session rolled back before
    the connection returns to the pool.
    """

    db = SessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db() -> None:
    """Create any missing tables for the registered models"""

    from .. import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
