from celery import Celery
from celery.schedules import crontab

from app.config import settings

# Create Celery app
celery_app = Celery(
    "minicrm",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["app.tasks"],  # Auto-discover tasks from this module
)

# Celery configuration
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=1800,  # a full sync replays up to max_pages order pages
    task_soft_time_limit=1740,
    worker_prefetch_multiplier=1,
)

# Periodic full resync corrects order_count drift left by webhook deliveries
celery_app.conf.beat_schedule = {
    "cached-clients-sync-nightly": {
        "task": "sync_cached_clients",
        "schedule": crontab(hour=3, minute=0),  # 03:00 UTC daily
        "args": [],
    },
}
