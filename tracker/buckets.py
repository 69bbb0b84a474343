"""Time-bucketed income/expense totals for the overview and trend charts.

Bucket keys are display labels only ("Mon", "07", "Mar 07", "Mar"), so the
same label from two different periods lands in the same bucket. With the
``year`` range that means e.g. October of last year and October of this year
are added together.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from tracker.domain import (
    BucketTotals,
    EXPENSE,
    INCOME,
    MONTH,
    QUARTER,
    TIME_RANGES,
    Transaction,
    TrendPoint,
    WEEK,
    YEAR,
    utc_now,
)

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_RANGE_OFFSETS = {
    WEEK: timedelta(days=7),
    MONTH: pd.DateOffset(months=1),
    QUARTER: pd.DateOffset(months=3),
    YEAR: pd.DateOffset(years=1),
}


def _check_range(time_range: str) -> None:
    if time_range not in TIME_RANGES:
        raise ValueError(f"unknown time range {time_range!r}, expected one of {TIME_RANGES}")


def range_start(time_range: str, now: Optional[datetime] = None) -> datetime:
    """Earliest date still inside ``time_range`` counted back from ``now``.

    Month-based ranges step back by calendar months; a day that does not
    exist in the target month is clamped to that month's last day.
    """
    _check_range(time_range)
    now = now or utc_now()
    start = pd.Timestamp(now) - _RANGE_OFFSETS[time_range]
    return start.to_pydatetime()


def filter_by_range(
    trans: Iterable[Transaction], time_range: str, now: Optional[datetime] = None
) -> Tuple[Transaction, ...]:
    start = range_start(time_range, now)
    return tuple(t for t in trans if t.date >= start)


def weekday_key(d: datetime) -> str:
    # datetime.weekday() is Monday-based
    return WEEKDAY_NAMES[(d.weekday() + 1) % 7]


def day_key(d: datetime) -> str:
    return f"{d.day:02d}"


def short_date_key(d: datetime) -> str:
    return f"{MONTH_NAMES[d.month - 1]} {d.day:02d}"


def month_key(d: datetime) -> str:
    return MONTH_NAMES[d.month - 1]


BUCKET_KEYS: Dict[str, Callable[[datetime], str]] = {
    WEEK: weekday_key,
    MONTH: day_key,
    QUARTER: short_date_key,
    YEAR: month_key,
}

# quarter has no explicit order: buckets follow first occurrence in date order
BUCKET_ORDER: Dict[str, Callable[[str], int]] = {
    WEEK: WEEKDAY_NAMES.index,
    MONTH: int,
    YEAR: MONTH_NAMES.index,
}


def bucket_transactions(
    trans: Iterable[Transaction], time_range: str, now: Optional[datetime] = None
) -> List[BucketTotals]:
    """Income and expense sums per time bucket within ``time_range``.

    Buckets with no activity are left out rather than zero-filled.
    """
    recent = filter_by_range(trans, time_range, now)
    if time_range == QUARTER:
        recent = tuple(sorted(recent, key=lambda t: t.date))

    key = BUCKET_KEYS[time_range]
    totals: Dict[str, List[float]] = {}
    for t in recent:
        acc = totals.setdefault(key(t.date), [0.0, 0.0])
        if t.type == INCOME:
            acc[0] += t.amount
        elif t.type == EXPENSE:
            acc[1] += t.amount

    buckets = [BucketTotals(name=name, income=inc, expense=exp) for name, (inc, exp) in totals.items()]
    order = BUCKET_ORDER.get(time_range)
    if order is not None:
        buckets.sort(key=lambda b: order(b.name))

    logger.debug("bucketed %d transactions into %d %s buckets", len(recent), len(buckets), time_range)
    return buckets


def balance_trend(
    trans: Iterable[Transaction], time_range: str, now: Optional[datetime] = None
) -> List[TrendPoint]:
    """Net balance (income minus expense) per bucket, same buckets as the overview."""
    return [
        TrendPoint(name=b.name, balance=b.income - b.expense)
        for b in bucket_transactions(trans, time_range, now)
    ]
