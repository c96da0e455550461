"""
Reminders API Endpoints

HTTP trigger for the daily payment reminder job (for external cron).
"""

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from agency.api.dependencies import get_db_sync, get_reminder_notifier
from agency.models.client import Client
from agency.schemas.dashboard import ReminderRunOut
from agency.services.reminders import Notifier, send_due_reminders

router = APIRouter()


@router.get("/send", response_model=ReminderRunOut)
def send_payment_reminders(
    db: Session = Depends(get_db_sync),
    notifier: Notifier = Depends(get_reminder_notifier)
):
    """
    Send a reminder to every active client whose payment is due tomorrow.
    """
    clients = db.execute(select(Client).filter(Client.status == "active")).scalars().all()
    return send_due_reminders(clients, notifier)
