from sqlalchemy.orm import Session
from fastapi import Depends

from agency.db.session import SessionAsync, SessionSync
from agency.services.reminders import Notifier
from agency.services.revenue import RevenueAggregator
from agency.services.store import RecordStore, SqlRecordStore


async def get_db():
    async with SessionAsync() as session:
        yield session


def get_db_sync():
    db = SessionSync()
    try:
        yield db
    finally:
        db.close()


def get_record_store(db: Session = Depends(get_db_sync)) -> RecordStore:
    return SqlRecordStore(db)


def get_revenue_aggregator(store: RecordStore = Depends(get_record_store)) -> RevenueAggregator:
    return RevenueAggregator(store)


def get_reminder_notifier() -> Notifier:
    # Imported lazily so the API only needs Celery when reminders are sent
    from agency.mycelery.worker import send_payment_reminder
    return send_payment_reminder.delay
