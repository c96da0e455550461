"""
Pydantic schemas for dashboard analytics.
"""

from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel


class PeriodTotalsOut(BaseModel):
    start: date
    end: date
    revenue: float
    other_expenses: float
    team_salaries: float
    expenses: float
    net_result: float
    profit_margin: float


class MRROut(BaseModel):
    amount: float
    client_count: int
    skipped: int
    skipped_clients: List[int]


class DashboardStatsOut(BaseModel):
    view: str
    current: PeriodTotalsOut
    previous: PeriodTotalsOut
    profit_change: float
    pending_client_payments: float
    projected_mrr: MRROut


class ActivityOut(BaseModel):
    payment_id: int
    client_id: int
    type: str
    status: str
    severity: str
    message: str
    amount: Optional[float] = None
    payment_date: date
    recorded_at: Optional[datetime] = None


class StatusAmountsOut(BaseModel):
    total: float
    completed: float
    pending: float
    overdue: float


class SeriesPointOut(StatusAmountsOut):
    start: date
    end: date


class ClientShareOut(StatusAmountsOut):
    client_id: int
    client_name: str


class ReminderRunOut(BaseModel):
    message: str
    total_clients: int
    emails_sent: int
    emails_failed: int
    failed_emails: List[dict]
    reminder_date: Optional[date] = None
