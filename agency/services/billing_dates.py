"""
Billing calendar helpers: next due dates, dashboard period bounds and
chart buckets.
"""

import calendar
from datetime import date, timedelta
from typing import Tuple


def _clamp_day(year: int, month: int, day: int) -> date:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def next_payment_date(current: date) -> date:
    """
    Same day of the following month.

    Days that do not exist in the next month fall back to its last day,
    so Jan 31 becomes Feb 28 (or Feb 29 in a leap year).
    """
    year, month = (current.year + 1, 1) if current.month == 12 else (current.year, current.month + 1)
    return _clamp_day(year, month, current.day)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last day of a month, both inclusive"""
    if not 1 <= month <= 12:
        raise ValueError(f"month must be in 1..12, got {month}")
    return date(year, month, 1), _clamp_day(year, month, 31)


def year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def period_bounds(view: str, year: int, month: int = 1) -> Tuple[date, date]:
    if view == "year":
        return year_bounds(year)
    if view == "month":
        return month_bounds(year, month)
    raise ValueError(f"view must be 'month' or 'year', got {view!r}")


def previous_period(view: str, year: int, month: int = 1) -> Tuple[int, int]:
    """(year, month) of the period before the selected one"""
    if view == "year":
        return year - 1, month
    if month == 1:
        return year - 1, 12
    return year, month - 1


BUCKETS = ("day", "week", "month")


def bucket_start(day: date, granularity: str) -> date:
    """Start of the day, week (Monday) or month containing `day`"""
    if granularity == "day":
        return day
    if granularity == "week":
        return day - timedelta(days=day.weekday())
    if granularity == "month":
        return day.replace(day=1)
    raise ValueError(f"granularity must be one of {', '.join(BUCKETS)}, got {granularity!r}")


def bucket_end(start: date, granularity: str) -> date:
    """Last day of the bucket starting at `start`, inclusive"""
    if granularity == "day":
        return start
    if granularity == "week":
        return start + timedelta(days=6)
    if granularity == "month":
        return month_bounds(start.year, start.month)[1]
    raise ValueError(f"granularity must be one of {', '.join(BUCKETS)}, got {granularity!r}")


def previous_bucket_start(start: date, granularity: str) -> date:
    return bucket_start(start - timedelta(days=1), granularity)
