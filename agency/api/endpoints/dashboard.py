"""
Dashboard API Endpoints

Read-only analytics. These handlers are sync and run in the threadpool
against the record store, so they never block the event loop and can run
alongside each other and the tier sweep.
"""

from datetime import date
from typing import List, Literal, Optional
from fastapi import APIRouter, Depends, Query

from agency.api.dependencies import get_revenue_aggregator
from agency.schemas.dashboard import (
    ActivityOut,
    ClientShareOut,
    DashboardStatsOut,
    MRROut,
    PeriodTotalsOut,
    SeriesPointOut,
)
from agency.services.revenue import MRRProjection, PeriodTotals, RevenueAggregator, StatusAmounts

router = APIRouter()


def _totals_out(totals: PeriodTotals) -> PeriodTotalsOut:
    return PeriodTotalsOut(
        start=totals.start,
        end=totals.end,
        revenue=totals.revenue,
        other_expenses=totals.other_expenses,
        team_salaries=totals.team_salaries,
        expenses=totals.expenses,
        net_result=totals.net_result,
        profit_margin=round(totals.profit_margin, 2),
    )


def _mrr_out(projection: MRRProjection) -> MRROut:
    return MRROut(
        amount=projection.amount,
        client_count=projection.client_count,
        skipped=projection.skipped,
        skipped_clients=projection.skipped_clients,
    )


def _amounts(amounts: StatusAmounts) -> dict:
    return {
        "total": amounts.total,
        "completed": amounts.completed,
        "pending": amounts.pending,
        "overdue": amounts.overdue,
    }


@router.get("/summary", response_model=PeriodTotalsOut)
def get_period_summary(
    start: date,
    end: date,
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator)
):
    """
    Revenue, expenses and profit margin for an inclusive date window.
    """
    return _totals_out(aggregator.aggregate(start, end))


@router.get("/mrr", response_model=MRROut)
def get_projected_mrr(
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator)
):
    """
    Projected MRR from every active client's current tier.

    Clients whose tiers cannot be resolved are listed in skipped_clients.
    """
    return _mrr_out(aggregator.projected_mrr())


@router.get("/stats", response_model=DashboardStatsOut)
def get_dashboard_stats(
    view: Literal["month", "year"] = "month",
    year: Optional[int] = Query(None, ge=2000, le=2100),
    month: Optional[int] = Query(None, ge=1, le=12),
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator)
):
    """
    Stats for the selected month or year compared to the previous period.

    Defaults to the current month.
    """
    today = date.today()
    stats = aggregator.period_stats(view, year or today.year, month or today.month)

    return DashboardStatsOut(
        view=stats.view,
        current=_totals_out(stats.current),
        previous=_totals_out(stats.previous),
        profit_change=round(stats.profit_change, 2),
        pending_client_payments=stats.pending_client_payments,
        projected_mrr=_mrr_out(stats.projected_mrr),
    )


@router.get("/activity", response_model=List[ActivityOut])
def get_recent_activity(
    limit: int = Query(10, ge=1, le=100),
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator)
):
    """Latest recorded payments as activity feed lines"""
    return [ActivityOut(**vars(item)) for item in aggregator.recent_activity(limit)]


@router.get("/revenue-series", response_model=List[SeriesPointOut])
def get_revenue_series(
    granularity: Literal["day", "week", "month"] = "month",
    periods: int = Query(12, ge=1, le=366),
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator)
):
    """
    Payment amounts per day, week or month, split by status.

    Oldest bucket first; the last bucket contains today.
    """
    return [
        SeriesPointOut(start=point.start, end=point.end, **_amounts(point.amounts))
        for point in aggregator.revenue_series(granularity, periods)
    ]


@router.get("/client-distribution", response_model=List[ClientShareOut])
def get_client_distribution(
    start: Optional[date] = None,
    end: Optional[date] = None,
    limit: int = Query(10, ge=1, le=100),
    aggregator: RevenueAggregator = Depends(get_revenue_aggregator)
):
    """
    Payment totals per client, largest first.

    start / end bound payment_date inclusively; omit both for all time.
    """
    return [
        ClientShareOut(client_id=share.client_id, client_name=share.client_name, **_amounts(share.amounts))
        for share in aggregator.client_distribution(start, end, limit)
    ]
