from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Sequence

from moneycoach.models.constants import COFFEE_CATEGORY
from moneycoach.models.expense import ExpenseRecord

"""Weekly spending aggregation.

Scopes implemented:
    - Week boundary (most recent Sunday, local midnight)
    - Week-to-date totals and per-category counts
    - Naive monthly projection

Design notes:
    Everything is a pure function of (expenses, category, reference instant)
    so the dashboard, API and coach prompt derive identical numbers and tests
    can pin the clock.
"""


def _as_local(moment: datetime) -> datetime:
    # Naive instants are read as local wall-clock time.
    return moment if moment.tzinfo is not None else moment.astimezone()


def _is_system_local(moment: datetime) -> bool:
    # astimezone() stamps a fixed offset, not a zone; recognise it by offset.
    return (
        isinstance(moment.tzinfo, timezone)
        and moment.utcoffset() == moment.astimezone().utcoffset()
    )


def _midnight(day: date, like: datetime) -> datetime:
    """00:00 on ``day`` in the zone of ``like``, honouring DST transitions."""
    if _is_system_local(like):
        return datetime.combine(day, time.min).astimezone()
    return datetime.combine(day, time.min, tzinfo=like.tzinfo)


def sunday_based_weekday(moment: datetime) -> int:
    """Weekday index with Sunday = 0 ... Saturday = 6."""
    return (moment.weekday() + 1) % 7


def week_start(now: datetime | None = None) -> datetime:
    """Most recent Sunday 00:00 in ``now``'s timezone, at or before ``now``."""
    now = _as_local(now or datetime.now().astimezone())
    start_day = now.date() - timedelta(days=sunday_based_weekday(now))
    return _midnight(start_day, now)


def this_week_expenses(
    expenses: Sequence[ExpenseRecord], now: datetime | None = None
) -> List[ExpenseRecord]:
    """Records with timestamp >= week start, order preserved."""
    start = week_start(now)
    return [e for e in expenses if e.timestamp >= start]


@dataclass(frozen=True)
class SpendingContext:
    week_start: datetime
    category: str
    category_count: int
    category_total: float
    coffee_count: int
    week_total: float
    transaction_count: int
    monthly_projection: float


def monthly_projection(week_total: float, now: datetime) -> float:
    # Linear extrapolation: spend per elapsed weekday * 30. Sunday counts as 7.
    return week_total / (sunday_based_weekday(_as_local(now)) or 7) * 30


def analyze_spending_context(
    expenses: Sequence[ExpenseRecord],
    category: str,
    now: datetime | None = None,
) -> SpendingContext:
    now = _as_local(now or datetime.now().astimezone())
    start = week_start(now)
    week = [e for e in expenses if e.timestamp >= start]
    in_category = [e for e in week if e.category == category]

    week_total = sum(e.amount for e in week)
    return SpendingContext(
        week_start=start,
        category=category,
        category_count=len(in_category),
        category_total=sum(e.amount for e in in_category),
        coffee_count=sum(1 for e in week if e.category == COFFEE_CATEGORY),
        week_total=week_total,
        transaction_count=len(week),
        monthly_projection=monthly_projection(week_total, now),
    )


__all__ = [
    "SpendingContext",
    "analyze_spending_context",
    "monthly_projection",
    "sunday_based_weekday",
    "this_week_expenses",
    "week_start",
]
