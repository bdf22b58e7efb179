"""Celery application and periodic schedule for profile maintenance"""

from celery import Celery
from celery.schedules import crontab

from ..config import settings


def refresh_time_limits(interval_minutes: int):
    """(hard, soft) limits in seconds for a task that runs every interval_minutes"""
    hard = interval_minutes * 60
    # Five minutes of headroom, capped at a quarter of the window
    soft = max(hard - 300, hard * 3 // 4)
    return hard, soft


REFRESH_TIME_LIMIT, REFRESH_SOFT_TIME_LIMIT = refresh_time_limits(settings.PROFILE_REFRESH_INTERVAL_MINUTES)

celery_app = Celery(
    "marketplace_recs",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND
)

celery_app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    # A refresh batch must finish before the next one is scheduled
    task_time_limit=REFRESH_TIME_LIMIT,
    task_soft_time_limit=REFRESH_SOFT_TIME_LIMIT,
    task_routes={
        'marketplace_recs.tasks.celery_tasks.*': {'queue': 'profiles'},
    },
    worker_prefetch_multiplier=1,
    result_expires=86400,
)

celery_app.conf.beat_schedule = {
    'refresh-stale-profiles': {
        'task': 'marketplace_recs.tasks.celery_tasks.refresh_stale_profiles',
        'schedule': crontab(minute=f'*/{settings.PROFILE_REFRESH_INTERVAL_MINUTES}'),
    },
}
