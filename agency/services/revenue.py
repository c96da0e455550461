"""
Revenue aggregation for the dashboard.

All figures are derived on read from the record store; nothing here writes.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Optional

from agency.core.errors import AggregationError, ValidationError
from agency.logging import get_logger
from agency.services.billing_dates import (
    bucket_end,
    bucket_start,
    period_bounds,
    previous_bucket_start,
    previous_period,
)
from agency.services.store import AmountRecord, PaymentRecord, RecordStore
from agency.services.tier_resolver import resolve_tier

logger = get_logger("agency.revenue")

ZERO = Decimal("0")

ACTIVITY_SEVERITY = {"completed": "success", "pending": "warning"}


@dataclass(frozen=True)
class PeriodTotals:
    start: date
    end: date
    revenue: Decimal
    other_expenses: Decimal
    team_salaries: Decimal

    @property
    def expenses(self) -> Decimal:
        return self.other_expenses + self.team_salaries

    @property
    def net_result(self) -> Decimal:
        return self.revenue - self.expenses

    @property
    def profit_margin(self) -> float:
        """Net result as a percentage of revenue, 0 when there is no revenue"""
        if self.revenue == 0:
            return 0.0
        return float(self.net_result / self.revenue * 100)


@dataclass(frozen=True)
class MRRProjection:
    amount: Decimal
    client_count: int
    skipped_clients: List[int] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.skipped_clients)


@dataclass(frozen=True)
class DashboardStats:
    view: str
    current: PeriodTotals
    previous: PeriodTotals
    pending_client_payments: Decimal
    projected_mrr: MRRProjection

    @property
    def profit_change(self) -> float:
        """Change in net result against the previous period, in percent"""
        net = self.current.net_result
        prev = self.previous.net_result
        if prev != 0:
            return float((net - prev) / abs(prev) * 100)
        if net > 0:
            return 100.0
        return 0.0


@dataclass(frozen=True)
class ActivityItem:
    """One line of the recent activity feed"""
    payment_id: int
    client_id: int
    type: str
    status: str
    severity: str
    message: str
    amount: Optional[Decimal]
    payment_date: date
    recorded_at: Optional[datetime]


@dataclass(frozen=True)
class StatusAmounts:
    completed: Decimal = ZERO
    pending: Decimal = ZERO
    overdue: Decimal = ZERO

    @property
    def total(self) -> Decimal:
        return self.completed + self.pending + self.overdue

    def add(self, status: str, amount: Decimal) -> "StatusAmounts":
        if status not in ("completed", "pending", "overdue"):
            return self
        return replace(self, **{status: getattr(self, status) + amount})


@dataclass(frozen=True)
class SeriesPoint:
    start: date
    end: date
    amounts: StatusAmounts


@dataclass(frozen=True)
class ClientShare:
    client_id: int
    client_name: str
    amounts: StatusAmounts


def _total(records: Iterable[AmountRecord]) -> Decimal:
    return sum((Decimal(str(record.amount)) for record in records), ZERO)


class RevenueAggregator:
    """
    Dashboard figures over a RecordStore.

    Args:
        store: record store to read from
        clock: returns the evaluation time for MRR projection (defaults to now, UTC)
    """

    def __init__(self, store: RecordStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))

    def aggregate(self, period_start: date, period_end: date) -> PeriodTotals:
        """
        Revenue and expenses over [period_start, period_end], both inclusive.

        Store failures propagate as AggregationError so the caller can show
        a failure state instead of a misleading zero.
        """
        if period_start > period_end:
            raise ValidationError(
                f"period_start {period_start} is after period_end {period_end}",
                period_start=str(period_start),
                period_end=str(period_end),
            )

        try:
            revenue = _total(self.store.payments_between(period_start, period_end))
            other_expenses = _total(self.store.expenses_between(period_start, period_end))
            team_salaries = _total(self.store.salaries_between(period_start, period_end))
        except AggregationError:
            raise
        except Exception as e:
            raise AggregationError(f"Aggregation failed for {period_start}..{period_end}: {e}") from e

        return PeriodTotals(
            start=period_start,
            end=period_end,
            revenue=revenue,
            other_expenses=other_expenses,
            team_salaries=team_salaries,
        )

    def projected_mrr(self) -> MRRProjection:
        """
        Sum of every active client's currently resolved tier total.

        A client whose tiers cannot be resolved is skipped and reported in
        skipped_clients; the rest of the projection still counts.
        """
        try:
            clients = self.store.list_clients(active_only=True)
        except AggregationError:
            raise
        except Exception as e:
            raise AggregationError(f"Failed to list clients for MRR projection: {e}") from e

        now = self.clock()
        amount = ZERO
        counted = 0
        skipped = []
        for client in clients:
            try:
                result = resolve_tier(client.created_at, client.tiered_payments, client.final_services, now=now)
            except Exception as e:
                skipped.append(client.id)
                logger.warning("Skipping client in MRR projection", client_id=client.id, error=str(e))
                continue
            amount += result.total_amount
            counted += 1

        return MRRProjection(amount=amount, client_count=counted, skipped_clients=skipped)

    def period_stats(self, view: str, year: int, month: int = 1) -> DashboardStats:
        """
        Selected month or year against the period before it, plus pending
        receivables and the MRR projection.
        """
        try:
            start, end = period_bounds(view, year, month)
            prev_year, prev_month = previous_period(view, year, month)
            prev_start, prev_end = period_bounds(view, prev_year, prev_month)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        current = self.aggregate(start, end)
        previous = self.aggregate(prev_start, prev_end)

        try:
            pending = _total(self.store.pending_client_payments())
        except AggregationError:
            raise
        except Exception as e:
            raise AggregationError(f"Failed to load pending payments: {e}") from e

        return DashboardStats(
            view=view,
            current=current,
            previous=previous,
            pending_client_payments=pending,
            projected_mrr=self.projected_mrr(),
        )

    # ==================== Activity & charts ====================

    def _payments(self, label: str, loader: Callable[[], List[PaymentRecord]]) -> List[PaymentRecord]:
        try:
            return loader()
        except AggregationError:
            raise
        except Exception as e:
            raise AggregationError(f"Failed to load {label}: {e}") from e

    def recent_activity(self, limit: int = 10) -> List[ActivityItem]:
        """
        The latest recorded payments as feed lines.

        Payments read "Payment <status> from <client>"; post entries read
        "<n> posts completed for <client>" and carry no amount.
        """
        if limit < 1:
            raise ValidationError(f"limit must be at least 1, got {limit}", limit=limit)

        items = []
        for record in self._payments("recent activity", lambda: self.store.recent_payments(limit)):
            client_name = record.client_name or "Unknown"
            if record.type == "payment":
                message = f"Payment {record.status} from {client_name}"
                amount = record.amount
            else:
                message = f"{record.post_count or 0} posts completed for {client_name}"
                amount = None
            items.append(ActivityItem(
                payment_id=record.id,
                client_id=record.client_id,
                type=record.type,
                status=record.status,
                severity=ACTIVITY_SEVERITY.get(record.status, "info"),
                message=message,
                amount=amount,
                payment_date=record.payment_date,
                recorded_at=record.created_at,
            ))
        return items

    def revenue_series(self, granularity: str = "month", periods: int = 12) -> List[SeriesPoint]:
        """
        Payment amounts per day, week or month by status, oldest first.

        The last point is the bucket containing today; buckets with no
        payments are included with zero amounts.
        """
        if periods < 1:
            raise ValidationError(f"periods must be at least 1, got {periods}", periods=periods)
        try:
            starts = [bucket_start(self.clock().date(), granularity)]
        except ValueError as e:
            raise ValidationError(str(e)) from e
        while len(starts) < periods:
            starts.append(previous_bucket_start(starts[-1], granularity))
        starts.reverse()

        window_end = bucket_end(starts[-1], granularity)
        buckets: Dict[date, StatusAmounts] = {start: StatusAmounts() for start in starts}
        records = self._payments(
            "revenue series", lambda: self.store.client_payments_between(starts[0], window_end)
        )
        for record in records:
            key = bucket_start(record.payment_date, granularity)
            if key in buckets:
                buckets[key] = buckets[key].add(record.status, record.amount)

        return [
            SeriesPoint(start=start, end=bucket_end(start, granularity), amounts=buckets[start])
            for start in starts
        ]

    def client_distribution(
        self,
        start: Optional[date] = None,
        end: Optional[date] = None,
        limit: int = 10,
    ) -> List[ClientShare]:
        """
        Payment totals per client by status, largest total first.

        Without bounds every payment on record counts.
        """
        if start and end and start > end:
            raise ValidationError(f"start {start} is after end {end}", start=str(start), end=str(end))
        if limit < 1:
            raise ValidationError(f"limit must be at least 1, got {limit}", limit=limit)

        shares: Dict[int, ClientShare] = {}
        for record in self._payments("client distribution", lambda: self.store.client_payments_between(start, end)):
            share = shares.get(record.client_id) or ClientShare(
                client_id=record.client_id,
                client_name=record.client_name or "Unknown",
                amounts=StatusAmounts(),
            )
            shares[record.client_id] = replace(share, amounts=share.amounts.add(record.status, record.amount))

        ranked = sorted(shares.values(), key=lambda share: (-share.amounts.total, share.client_id))
        return ranked[:limit]
