import redis
from celery.signals import worker_ready
from sqlalchemy import select

from agency.mycelery.app import celery_app
from agency.core.config import settings
from agency.db.session import SessionSync
from agency.logging import get_logger
from agency.models.client import Client
from agency.services.reminders import send_due_reminders
from agency.services.store import SqlRecordStore
from agency.services.tier_sweep import RedisSweepGuard, TierSweeper

logger = get_logger("agency.worker")

# One connection pool per worker process, shared by every task run
redis_client = redis.Redis.from_url(settings.REDIS_URL)


def sweep_guard() -> RedisSweepGuard:
    return RedisSweepGuard(
        client=redis_client,
        key=settings.TIER_SWEEP_LOCK_KEY,
        ttl_seconds=settings.TIER_SWEEP_LOCK_TTL_SECONDS,
    )


@celery_app.task(name="sweep_client_tiers")
def sweep_client_tiers():
    """Recompute every active client's tier snapshot; no-op if a sweep is running"""
    with SessionSync() as session:
        summary = TierSweeper(SqlRecordStore(session), guard=sweep_guard()).sweep()
    return summary.as_dict()


@celery_app.task(name="send_payment_reminders")
def send_payment_reminders():
    """Queue a reminder for each client whose payment is due tomorrow"""
    with SessionSync() as session:
        clients = session.execute(select(Client).filter(Client.status == "active")).scalars().all()
        result = send_due_reminders(clients, notifier=send_payment_reminder.delay)
    result["reminder_date"] = result["reminder_date"].isoformat()
    return result


@celery_app.task(name="send_payment_reminder")
def send_payment_reminder(reminder: dict):
    """Simulated delivery: the email transport is not wired in"""
    logger.info(
        "Simulated payment reminder",
        client_id=reminder["client_id"],
        to=reminder["to"],
        subject=reminder["subject"],
        amount=reminder["amount"],
        due_date=reminder["due_date"],
    )
    return {"sent": True, "client_id": reminder["client_id"]}


@worker_ready.connect
def sweep_on_startup(sender=None, **kwargs):
    """One sweep when the worker comes up, ahead of the first beat tick"""
    logger.info("Worker ready, dispatching initial tier sweep")
    sweep_client_tiers.delay()
