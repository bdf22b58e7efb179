"""Background task definitions"""

from datetime import datetime

from .celery_config import celery_app
from ..config import settings
from ..services.profile_builder import ProfileBuilder
from ..utils.database import SessionLocal
from ..utils.logging import get_logger

logger = get_logger(__name__)


@celery_app.task(name="marketplace_recs.tasks.celery_tasks.recompute_profile_task")
def recompute_profile_task(user_id: str):
    """
    Recompute one user's preference profile

    Queued by the storefront after a burst of product views.
    """
    db = SessionLocal()

    try:
        profile = ProfileBuilder(db).recompute(user_id)
        return {
            "status": "success",
            "user_id": user_id,
            "last_computed_at": profile.last_computed_at.isoformat(),
        }

    except Exception:
        logger.error("Error recomputing profile", user_id=user_id, exc_info=True)
        raise
    finally:
        db.close()


@celery_app.task(name="marketplace_recs.tasks.celery_tasks.refresh_stale_profiles")
def refresh_stale_profiles(batch_size: int = None):
    """
    Recompute profiles whose owners viewed products since the last run

    Runs periodically. A failure on one user is logged and the batch
    continues.
    """
    batch_size = batch_size or settings.PROFILE_REFRESH_BATCH_SIZE
    logger.info("Starting stale profile refresh", batch_size=batch_size)
    db = SessionLocal()

    refreshed, failed = 0, 0
    try:
        builder = ProfileBuilder(db)
        for user_id in builder.stale_user_ids(batch_size):
            try:
                builder.recompute(user_id)
                refreshed += 1
            except Exception:
                db.rollback()
                failed += 1
                logger.error("Error refreshing profile", user_id=user_id, exc_info=True)

        logger.info("Stale profile refresh completed", refreshed=refreshed, failed=failed)

        return {
            "status": "success",
            "timestamp": datetime.utcnow().isoformat(),
            "refreshed": refreshed,
            "failed": failed,
        }
    finally:
        db.close()
