"""Celery application configuration"""

from celery import Celery
from celery.schedules import crontab

from tourism.config import settings

# Create Celery app
celery_app = Celery(
    "tourism",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "tourism.jobs.tasks",
    ],
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=300,  # 5 minutes
    worker_prefetch_multiplier=1,
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Beat schedule for periodic tasks
    beat_schedule={
        "send-reservation-reminders": {
            "task": "send_reservation_reminders",
            "schedule": 3600.0,  # Every hour
        },
        "complete-checked-out-reservations": {
            "task": "complete_checked_out_reservations",
            "schedule": crontab(hour=2, minute=0),  # Daily
        },
    },
)
