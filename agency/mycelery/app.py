"""
Celery configuration.

Redis is the broker and result backend. Beat drives the tier sweep on a
fixed interval and the payment reminders once a day.
"""

from celery import Celery
from celery.schedules import crontab

from agency.core.config import settings
from agency.helpers.getters import isDebugMode


celery_app = Celery(
    "agency",
    broker=settings.CELERY_BROKER_URL_EXTERNAL if isDebugMode() else settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["agency.mycelery.worker"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",

    timezone=settings.TIMEZONE,
    enable_utc=True,

    task_acks_late=True,
    task_time_limit=settings.TIER_SWEEP_LOCK_TTL_SECONDS,
    worker_prefetch_multiplier=1,
    result_expires=86400,

    beat_schedule={
        "sweep-client-tiers": {
            "task": "sweep_client_tiers",
            "schedule": float(settings.TIER_SWEEP_INTERVAL_SECONDS),
            # A run that would start after the next one is due is pointless
            "options": {"expires": settings.TIER_SWEEP_INTERVAL_SECONDS},
        },
        "send-payment-reminders": {
            "task": "send_payment_reminders",
            "schedule": crontab(hour=settings.REMINDER_HOUR, minute=settings.REMINDER_MINUTE),
        },
    },
)
