"""Celery application configuration."""

from celery import Celery
from celery.schedules import crontab

from freshtrack.config import get_settings

settings = get_settings()

app = Celery(
    "freshtrack",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["freshtrack.tasks.expiry_checks"],
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.timezone,
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes max per task
    task_soft_time_limit=240,  # 4 minutes soft limit
)

# Schedule runs in the configured time zone, so "09:00" is local morning
app.conf.beat_schedule = {
    "check-expiry-daily": {
        "task": "freshtrack.tasks.expiry_checks.check_expiry_for_all_users",
        "schedule": crontab(hour=9, minute=0),
    },
    "notify-expiring-today-hourly": {
        "task": "freshtrack.tasks.expiry_checks.notify_expiring_today",
        "schedule": crontab(minute=0),
    },
    "auto-mark-expired-nightly": {
        "task": "freshtrack.tasks.expiry_checks.auto_mark_expired_items",
        "schedule": crontab(hour=0, minute=5),
    },
    "cleanup-notifications-nightly": {
        "task": "freshtrack.tasks.expiry_checks.cleanup_old_notifications",
        "schedule": crontab(hour=2, minute=0),
    },
}
