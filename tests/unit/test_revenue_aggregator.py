"""
Unit tests for the revenue aggregator over an in-memory record store.
"""

import pytest
from datetime import date
from decimal import Decimal

from agency.core.errors import AggregationError, ValidationError
from agency.services.revenue import RevenueAggregator
from agency.services.store import ClientRecord
from tests.fakes import NOW, InMemoryRecordStore, amount, months_ago, payment

TIERS = [
    {"duration_months": 3, "services": {"instagram": 5000, "reels": 3000}},
    {"duration_months": 6, "services": {"instagram": 7000, "reels": 4000}},
]
FINAL = {"instagram": 9000, "reels": 5000}

JUNE = (date(2025, 6, 1), date(2025, 6, 30))


def tiered_client(client_id: int, months: int, **kwargs) -> ClientRecord:
    kwargs.setdefault("tiered_payments", TIERS)
    kwargs.setdefault("final_services", FINAL)
    return ClientRecord(id=client_id, created_at=months_ago(NOW, months), **kwargs)


class TestAggregate:
    """aggregate(start, end)"""

    def test_sums_within_inclusive_window(self, clock):
        store = InMemoryRecordStore(
            payments=[
                amount(10000, date(2025, 6, 1)),
                amount(5000, date(2025, 6, 30)),
                amount(99999, date(2025, 5, 31)),
                amount(99999, date(2025, 7, 1)),
            ],
            expenses=[amount(1500, date(2025, 6, 10))],
            salaries=[amount(6000, date(2025, 6, 1)), amount(6000, date(2025, 7, 1))],
        )

        totals = RevenueAggregator(store, clock=clock).aggregate(*JUNE)

        assert totals.revenue == Decimal("15000")
        assert totals.other_expenses == Decimal("1500")
        assert totals.team_salaries == Decimal("6000")
        assert totals.expenses == Decimal("7500")
        assert totals.net_result == Decimal("7500")
        assert totals.profit_margin == pytest.approx(50.0)

    def test_zero_revenue_margin_is_zero(self, clock):
        store = InMemoryRecordStore(expenses=[amount(500, date(2025, 6, 5))])

        totals = RevenueAggregator(store, clock=clock).aggregate(*JUNE)

        assert totals.revenue == 0
        assert totals.expenses == Decimal("500")
        assert totals.profit_margin == 0.0

    def test_loss_gives_negative_margin(self, clock):
        store = InMemoryRecordStore(
            payments=[amount(1000, date(2025, 6, 5))],
            expenses=[amount(1500, date(2025, 6, 5))],
        )

        totals = RevenueAggregator(store, clock=clock).aggregate(*JUNE)

        assert totals.profit_margin == pytest.approx(-50.0)

    def test_single_day_window(self, clock):
        store = InMemoryRecordStore(payments=[amount(250.5, date(2025, 6, 5))])

        totals = RevenueAggregator(store, clock=clock).aggregate(date(2025, 6, 5), date(2025, 6, 5))

        assert totals.revenue == Decimal("250.5")

    def test_is_idempotent(self, clock):
        store = InMemoryRecordStore(
            payments=[amount(1000, date(2025, 6, 5))],
            salaries=[amount(300, date(2025, 6, 6))],
        )
        aggregator = RevenueAggregator(store, clock=clock)

        assert aggregator.aggregate(*JUNE) == aggregator.aggregate(*JUNE)
        assert store.writes == []

    def test_reversed_window_is_rejected(self, clock):
        with pytest.raises(ValidationError):
            RevenueAggregator(InMemoryRecordStore(), clock=clock).aggregate(date(2025, 6, 30), date(2025, 6, 1))

    def test_store_failure_propagates(self, clock):
        store = InMemoryRecordStore()
        store.fail_queries = True

        with pytest.raises(AggregationError):
            RevenueAggregator(store, clock=clock).aggregate(*JUNE)

    def test_unexpected_store_error_becomes_aggregation_error(self, clock):
        class BrokenStore(InMemoryRecordStore):
            def expenses_between(self, start, end):
                raise ConnectionError("connection reset")

        with pytest.raises(AggregationError) as exc_info:
            RevenueAggregator(BrokenStore(), clock=clock).aggregate(*JUNE)

        assert "connection reset" in exc_info.value.message


class TestProjectedMRR:
    """projected_mrr()"""

    def test_sums_current_tier_totals(self, clock):
        store = InMemoryRecordStore(clients=[
            tiered_client(1, months=0),   # tier 0: 8000
            tiered_client(2, months=4),   # tier 1: 11000
            tiered_client(3, months=12),  # graduated: 14000
        ])

        projection = RevenueAggregator(store, clock=clock).projected_mrr()

        assert projection.amount == Decimal("33000")
        assert projection.client_count == 3
        assert projection.skipped == 0

    def test_ignores_inactive_clients(self, clock):
        store = InMemoryRecordStore(clients=[
            tiered_client(1, months=0),
            tiered_client(2, months=0, status="inactive"),
        ])

        projection = RevenueAggregator(store, clock=clock).projected_mrr()

        assert projection.amount == Decimal("8000")
        assert projection.client_count == 1

    def test_skips_unresolvable_client(self, clock):
        broken = tiered_client(2, months=1, tiered_payments=[{"duration_months": -1, "services": {}}])
        store = InMemoryRecordStore(clients=[tiered_client(1, months=0), broken, tiered_client(3, months=12)])

        projection = RevenueAggregator(store, clock=clock).projected_mrr()

        assert projection.amount == Decimal("22000")
        assert projection.client_count == 2
        assert projection.skipped == 1
        assert projection.skipped_clients == [2]

    def test_no_clients(self, clock):
        projection = RevenueAggregator(InMemoryRecordStore(), clock=clock).projected_mrr()

        assert projection.amount == 0
        assert projection.client_count == 0

    def test_client_listing_failure_raises(self, clock):
        class BrokenStore(InMemoryRecordStore):
            def list_clients(self, active_only=True):
                raise ConnectionError("down")

        with pytest.raises(AggregationError):
            RevenueAggregator(BrokenStore(), clock=clock).projected_mrr()


class TestPeriodStats:
    """period_stats(view, year, month)"""

    def test_month_against_previous_month(self, clock):
        store = InMemoryRecordStore(
            clients=[tiered_client(1, months=0)],
            payments=[amount(20000, date(2025, 6, 3)), amount(10000, date(2025, 5, 3))],
            expenses=[amount(5000, date(2025, 6, 4)), amount(5000, date(2025, 5, 4))],
            pending=[amount(8000, date(2025, 7, 1)), amount(2000, date(2025, 5, 20))],
        )

        stats = RevenueAggregator(store, clock=clock).period_stats("month", 2025, 6)

        assert (stats.current.start, stats.current.end) == JUNE
        assert (stats.previous.start, stats.previous.end) == (date(2025, 5, 1), date(2025, 5, 31))
        assert stats.current.net_result == Decimal("15000")
        assert stats.previous.net_result == Decimal("5000")
        assert stats.profit_change == pytest.approx(200.0)
        assert stats.pending_client_payments == Decimal("10000")
        assert stats.projected_mrr.amount == Decimal("8000")

    def test_january_compares_with_previous_december(self, clock):
        stats = RevenueAggregator(InMemoryRecordStore(), clock=clock).period_stats("month", 2025, 1)

        assert stats.previous.start == date(2024, 12, 1)
        assert stats.previous.end == date(2024, 12, 31)

    def test_year_view(self, clock):
        store = InMemoryRecordStore(payments=[amount(1000, date(2025, 2, 1)), amount(400, date(2024, 11, 1))])

        stats = RevenueAggregator(store, clock=clock).period_stats("year", 2025)

        assert stats.current.revenue == Decimal("1000")
        assert stats.previous.revenue == Decimal("400")
        assert stats.previous.start == date(2024, 1, 1)

    def test_profit_change_from_zero(self, clock):
        store = InMemoryRecordStore(payments=[amount(1000, date(2025, 6, 2))])

        stats = RevenueAggregator(store, clock=clock).period_stats("month", 2025, 6)

        assert stats.profit_change == 100.0

    def test_profit_change_against_previous_loss(self, clock):
        store = InMemoryRecordStore(
            payments=[amount(1000, date(2025, 6, 2))],
            expenses=[amount(1000, date(2025, 5, 2))],
        )

        stats = RevenueAggregator(store, clock=clock).period_stats("month", 2025, 6)

        # -1000 -> +1000
        assert stats.profit_change == pytest.approx(200.0)

    def test_unknown_view(self, clock):
        with pytest.raises(ValidationError):
            RevenueAggregator(InMemoryRecordStore(), clock=clock).period_stats("week", 2025, 6)

    def test_bad_month(self, clock):
        with pytest.raises(ValidationError):
            RevenueAggregator(InMemoryRecordStore(), clock=clock).period_stats("month", 2025, 13)


class TestRecentActivity:
    """recent_activity(limit)"""

    def test_feed_lines(self, clock):
        store = InMemoryRecordStore(client_payments=[
            payment(1, 8000, date(2025, 6, 1)),
            payment(2, 5000, date(2025, 6, 2), status="pending", client_id=2, client_name="Bloom Studio"),
            payment(3, 0, date(2025, 6, 3), type="post", post_count=12),
            payment(4, 3000, date(2025, 6, 4), status="overdue", client_name=None),
        ])

        items = RevenueAggregator(store, clock=clock).recent_activity()

        assert [item.payment_id for item in items] == [4, 3, 2, 1]
        assert items[0].message == "Payment overdue from Unknown"
        assert items[0].severity == "info"
        assert items[1].message == "12 posts completed for Acme Foods"
        assert items[1].amount is None
        assert items[2].message == "Payment pending from Bloom Studio"
        assert items[2].severity == "warning"
        assert items[3].amount == Decimal("8000")
        assert items[3].severity == "success"

    def test_defaults_to_ten_latest(self, clock):
        store = InMemoryRecordStore(client_payments=[
            payment(day, 100, date(2025, 5, day)) for day in range(1, 13)
        ])

        items = RevenueAggregator(store, clock=clock).recent_activity()

        assert len(items) == 10
        assert items[0].payment_id == 12

    def test_invalid_limit(self, clock):
        with pytest.raises(ValidationError):
            RevenueAggregator(InMemoryRecordStore(), clock=clock).recent_activity(0)

    def test_store_failure_propagates(self, clock):
        store = InMemoryRecordStore()
        store.fail_queries = True

        with pytest.raises(AggregationError):
            RevenueAggregator(store, clock=clock).recent_activity()


class TestRevenueSeries:
    """revenue_series(granularity, periods)"""

    def test_monthly_buckets_by_status(self, clock):
        store = InMemoryRecordStore(client_payments=[
            payment(1, 9999, date(2025, 3, 31)),
            payment(2, 1000, date(2025, 4, 1)),
            payment(3, 500, date(2025, 5, 10), status="pending"),
            payment(4, 250, date(2025, 5, 31), status="overdue"),
            payment(5, 2000, date(2025, 6, 14)),
            payment(6, 9999, date(2025, 7, 1), status="pending"),
        ])

        series = RevenueAggregator(store, clock=clock).revenue_series("month", periods=3)

        assert [(point.start, point.end) for point in series] == [
            (date(2025, 4, 1), date(2025, 4, 30)),
            (date(2025, 5, 1), date(2025, 5, 31)),
            (date(2025, 6, 1), date(2025, 6, 30)),
        ]
        assert series[0].amounts.completed == Decimal("1000")
        assert series[1].amounts.pending == Decimal("500")
        assert series[1].amounts.overdue == Decimal("250")
        assert series[1].amounts.total == Decimal("750")
        assert series[2].amounts.total == Decimal("2000")

    def test_weeks_start_on_monday(self, clock):
        store = InMemoryRecordStore(client_payments=[
            payment(1, 100, date(2025, 6, 8)),
            payment(2, 200, date(2025, 6, 9)),
        ])

        series = RevenueAggregator(store, clock=clock).revenue_series("week", periods=2)

        assert [(point.start, point.end) for point in series] == [
            (date(2025, 6, 2), date(2025, 6, 8)),
            (date(2025, 6, 9), date(2025, 6, 15)),
        ]
        assert [point.amounts.total for point in series] == [Decimal("100"), Decimal("200")]

    def test_empty_days_are_zero(self, clock):
        series = RevenueAggregator(InMemoryRecordStore(), clock=clock).revenue_series("day", periods=7)

        assert len(series) == 7
        assert series[-1].start == NOW.date()
        assert series[0].start == date(2025, 6, 9)
        assert all(point.amounts.total == 0 for point in series)

    def test_unknown_granularity(self, clock):
        with pytest.raises(ValidationError):
            RevenueAggregator(InMemoryRecordStore(), clock=clock).revenue_series("quarter")

    def test_invalid_periods(self, clock):
        with pytest.raises(ValidationError):
            RevenueAggregator(InMemoryRecordStore(), clock=clock).revenue_series("month", periods=0)


class TestClientDistribution:
    """client_distribution(start, end, limit)"""

    def test_totals_per_client_largest_first(self, clock):
        store = InMemoryRecordStore(client_payments=[
            payment(1, 8000, date(2025, 6, 1), client_id=1),
            payment(2, 2000, date(2025, 6, 2), status="pending", client_id=1),
            payment(3, 15000, date(2025, 6, 3), client_id=2, client_name="Bloom Studio"),
            payment(4, 500, date(2025, 6, 4), status="overdue", client_id=3, client_name="Corner Cafe"),
        ])

        shares = RevenueAggregator(store, clock=clock).client_distribution()

        assert [share.client_name for share in shares] == ["Bloom Studio", "Acme Foods", "Corner Cafe"]
        acme = shares[1]
        assert acme.amounts.completed == Decimal("8000")
        assert acme.amounts.pending == Decimal("2000")
        assert acme.amounts.total == Decimal("10000")
        assert shares[2].amounts.overdue == Decimal("500")

    def test_window_and_limit(self, clock):
        store = InMemoryRecordStore(client_payments=[
            payment(1, 8000, date(2025, 5, 31), client_id=1),
            payment(2, 1000, date(2025, 6, 1), client_id=1),
            payment(3, 3000, date(2025, 6, 30), client_id=2, client_name="Bloom Studio"),
        ])

        shares = RevenueAggregator(store, clock=clock).client_distribution(*JUNE, limit=1)

        assert len(shares) == 1
        assert shares[0].client_name == "Bloom Studio"

    def test_reversed_window_is_rejected(self, clock):
        with pytest.raises(ValidationError):
            RevenueAggregator(InMemoryRecordStore(), clock=clock).client_distribution(date(2025, 6, 30), date(2025, 6, 1))
