"""
Record store used by the tier sweep and the revenue aggregator.

RecordStore is the read/write contract; SqlRecordStore backs it with a
synchronous SQLAlchemy session (the Celery worker and the dashboard
endpoints both run sync). Date windows are inclusive on both ends.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from agency.core.errors import AggregationError, NotFoundError
from agency.models.client import Client
from agency.models.other_expense import OtherExpense
from agency.models.payment import Payment
from agency.models.salary_payment import SalaryPayment
from agency.schemas.client import rates_to_json


@dataclass(frozen=True)
class ClientRecord:
    """Tier-relevant view of a client"""
    id: int
    created_at: datetime
    tiered_payments: List[Any] = field(default_factory=list)
    final_services: Dict[str, Any] = field(default_factory=dict)
    current_services: Optional[Dict[str, Any]] = None
    current_rate: Optional[Decimal] = None
    current_tier_index: Optional[int] = None
    status: str = "active"


@dataclass(frozen=True)
class AmountRecord:
    """Payment, expense or salary fact"""
    amount: Decimal
    date: date
    description: Optional[str] = None


@dataclass(frozen=True)
class PaymentRecord:
    """Client payment of any status, with the client's name for display"""
    id: int
    client_id: int
    client_name: Optional[str]
    amount: Decimal
    payment_date: date
    status: str = "completed"
    type: str = "payment"
    post_count: Optional[int] = None
    created_at: Optional[datetime] = None


class RecordStore(ABC):

    @abstractmethod
    def list_clients(self, active_only: bool = True) -> List[ClientRecord]:
        ...

    @abstractmethod
    def get_client(self, client_id: int) -> ClientRecord:
        """Raises NotFoundError for an unknown id"""

    @abstractmethod
    def payments_between(self, start: date, end: date) -> List[AmountRecord]:
        """Received (completed) client payments dated within [start, end]"""

    @abstractmethod
    def expenses_between(self, start: date, end: date) -> List[AmountRecord]:
        ...

    @abstractmethod
    def salaries_between(self, start: date, end: date) -> List[AmountRecord]:
        ...

    @abstractmethod
    def pending_client_payments(self) -> List[AmountRecord]:
        """Pending and overdue client payments"""

    @abstractmethod
    def recent_payments(self, limit: int = 10) -> List[PaymentRecord]:
        """Most recently recorded payments of any status, newest first"""

    @abstractmethod
    def client_payments_between(self, start: Optional[date] = None, end: Optional[date] = None) -> List[PaymentRecord]:
        """Payments of every status dated within [start, end]; a missing bound is open"""

    @abstractmethod
    def update_client_snapshot(
        self,
        client_id: int,
        services: Dict[str, Decimal],
        rate: Decimal,
        tier_index: int,
    ) -> None:
        """Persist a resolved snapshot; the only write path for current_*"""


def client_record(client: Client) -> ClientRecord:
    return ClientRecord(
        id=client.id,
        created_at=client.created_at,
        tiered_payments=client.tiered_payments or [],
        final_services=client.final_services or {},
        current_services=client.current_services,
        current_rate=client.current_rate,
        current_tier_index=client.current_tier_index,
        status=client.status,
    )


class SqlRecordStore(RecordStore):
    """RecordStore over a sync SQLAlchemy session"""

    def __init__(self, session: Session):
        self.session = session

    def _amounts(self, query, label: str) -> List[AmountRecord]:
        try:
            rows = self.session.execute(query).all()
        except SQLAlchemyError as e:
            raise AggregationError(f"Failed to load {label}: {e}") from e
        return [AmountRecord(amount=Decimal(str(row[0])), date=row[1], description=row[2]) for row in rows]

    def list_clients(self, active_only: bool = True) -> List[ClientRecord]:
        query = select(Client).order_by(Client.id)
        if active_only:
            query = query.filter(Client.status == "active")
        try:
            clients = self.session.execute(query).scalars().all()
        except SQLAlchemyError as e:
            raise AggregationError(f"Failed to load clients: {e}") from e
        return [client_record(client) for client in clients]

    def get_client(self, client_id: int) -> ClientRecord:
        client = self.session.get(Client, client_id)
        if client is None:
            raise NotFoundError(f"Client {client_id} not found", client_id=client_id)
        return client_record(client)

    def payments_between(self, start: date, end: date) -> List[AmountRecord]:
        query = select(Payment.amount, Payment.payment_date, Payment.description).filter(
            Payment.status == "completed",
            Payment.payment_date >= start,
            Payment.payment_date <= end,
        )
        return self._amounts(query, "payments")

    def expenses_between(self, start: date, end: date) -> List[AmountRecord]:
        query = select(OtherExpense.amount, OtherExpense.expense_date, OtherExpense.description).filter(
            OtherExpense.expense_date >= start,
            OtherExpense.expense_date <= end,
        )
        return self._amounts(query, "expenses")

    def salaries_between(self, start: date, end: date) -> List[AmountRecord]:
        query = select(SalaryPayment.amount, SalaryPayment.payment_date, SalaryPayment.description).filter(
            SalaryPayment.payment_date >= start,
            SalaryPayment.payment_date <= end,
        )
        return self._amounts(query, "salaries")

    def pending_client_payments(self) -> List[AmountRecord]:
        query = select(Payment.amount, Payment.payment_date, Payment.description).filter(
            Payment.status.in_(["pending", "overdue"])
        )
        return self._amounts(query, "pending payments")

    def _payment_records(self, query, label: str) -> List[PaymentRecord]:
        try:
            rows = self.session.execute(query).all()
        except SQLAlchemyError as e:
            raise AggregationError(f"Failed to load {label}: {e}") from e
        return [
            PaymentRecord(
                id=payment.id,
                client_id=payment.client_id,
                client_name=client_name,
                amount=Decimal(str(payment.amount)),
                payment_date=payment.payment_date,
                status=payment.status,
                type=payment.type,
                post_count=payment.post_count,
                created_at=payment.created_at,
            )
            for payment, client_name in rows
        ]

    def recent_payments(self, limit: int = 10) -> List[PaymentRecord]:
        query = (
            select(Payment, Client.name)
            .outerjoin(Client, Client.id == Payment.client_id)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .limit(limit)
        )
        return self._payment_records(query, "recent payments")

    def client_payments_between(self, start: Optional[date] = None, end: Optional[date] = None) -> List[PaymentRecord]:
        query = select(Payment, Client.name).outerjoin(Client, Client.id == Payment.client_id)
        if start is not None:
            query = query.filter(Payment.payment_date >= start)
        if end is not None:
            query = query.filter(Payment.payment_date <= end)
        return self._payment_records(query.order_by(Payment.payment_date, Payment.id), "client payments")

    def update_client_snapshot(
        self,
        client_id: int,
        services: Dict[str, Decimal],
        rate: Decimal,
        tier_index: int,
    ) -> None:
        client = self.session.get(Client, client_id)
        if client is None:
            raise NotFoundError(f"Client {client_id} not found", client_id=client_id)
        client.current_services = rates_to_json(services)
        client.current_rate = rate
        client.current_tier_index = tier_index
        try:
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            raise
