"""
Payment reminder job.

Once a day, every client whose next payment falls exactly on the following
day gets a reminder. Building the message lives here; delivery is the
notifier's job (the send_payment_reminder Celery task by default).
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional

from agency.core.config import settings
from agency.core.logging import capture_error
from agency.logging import get_logger

logger = get_logger("agency.reminders")

Notifier = Callable[[Dict[str, Any]], Any]


def clients_due_on(clients: Iterable[Any], day: date) -> List[Any]:
    """Clients whose next_payment is exactly `day` (time of day ignored)"""
    return [client for client in clients if client.next_payment is not None and _as_date(client.next_payment) == day]


def _as_date(value) -> date:
    return value.date() if hasattr(value, "date") and callable(value.date) else value


def amount_due(client) -> Decimal:
    """
    Amount owed on the next due date.

    Clients on a tier plan owe their resolved rate; others owe the flat
    rate of their payment type.
    """
    if (client.tiered_payments or client.final_services) and client.current_rate is not None:
        return Decimal(str(client.current_rate))
    if client.payment_type == "monthly" and client.monthly_rate is not None:
        return Decimal(str(client.monthly_rate))
    if client.payment_type == "weekly" and client.weekly_rate is not None:
        return Decimal(str(client.weekly_rate))
    if client.current_rate is not None:
        return Decimal(str(client.current_rate))
    return Decimal("0")


def build_reminder(client) -> Dict[str, Any]:
    amount = amount_due(client)
    due_date = _as_date(client.next_payment)
    symbol = settings.CURRENCY_SYMBOL
    html = f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <h1 style="color: #333;">Hello {client.name},</h1>
            <p>This is a reminder that your payment is due tomorrow.</p>
            <div style="background: #f8f9fa; padding: 20px; border-radius: 8px; margin: 20px 0;">
                <h2 style="margin-top: 0;">Payment Details</h2>
                <p><strong>Amount:</strong> {symbol}{amount:,.2f}</p>
                <p><strong>Due Date:</strong> {due_date.strftime('%d %b %Y')}</p>
            </div>
            <p>Please ensure the payment is made by end of day tomorrow.</p>
            <p>Thank you for your business!</p>
        </div>
    """
    return {
        "client_id": client.id,
        "from": settings.REMINDER_FROM_EMAIL,
        "to": client.email,
        "subject": "Payment Due Tomorrow",
        "html": html,
        "amount": str(amount),
        "due_date": due_date.isoformat(),
    }


def send_due_reminders(clients: Iterable[Any], notifier: Notifier, today: Optional[date] = None) -> Dict[str, Any]:
    """
    Hand every client due tomorrow to the notifier.

    A notifier failure for one client is recorded in failed_emails and the
    remaining clients are still processed.
    """
    today = today or date.today()
    reminder_date = today + timedelta(days=1)
    due = clients_due_on(clients, reminder_date)

    sent = 0
    failed = []
    for client in due:
        try:
            notifier(build_reminder(client))
            sent += 1
        except Exception as e:
            logger.error("Payment reminder failed", client_id=client.id, error=str(e))
            capture_error(e, context={"client": {"id": client.id}}, tags={"job": "payment_reminders"})
            failed.append({"client_id": client.id, "email": client.email, "error": str(e)})

    if due:
        logger.great("Payment reminders processed", total=len(due), sent=sent, failed=len(failed))

    return {
        "message": "Payment reminder emails processed",
        "total_clients": len(due),
        "emails_sent": sent,
        "emails_failed": len(failed),
        "failed_emails": failed,
        "reminder_date": reminder_date,
    }
