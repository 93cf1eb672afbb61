from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Sequence

from moneycoach.db.store import StoredData
from moneycoach.models.constants import CATEGORY_EMOJIS, COFFEE_CATEGORY, CURRENCY_SYMBOL
from moneycoach.models.expense import ExpenseRecord
from moneycoach.services.aggregation import this_week_expenses
from moneycoach.services.money import format_inr

"""Dashboard view models.

Pure functions that turn stored data plus a reference instant into the
values the templates paint: weekly stats, the recent-history list, and the
budget display. The templates hold no logic beyond iteration.
"""

HISTORY_LIMIT = 20
EMPTY_HISTORY_MESSAGE = "No expenses logged yet. Start tracking!"


def locale_date(moment: datetime) -> str:
    """Short en-IN date, e.g. 5/1/2026 (day/month/year, no padding)."""
    return f"{moment.day}/{moment.month}/{moment.year}"


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'s' if n > 1 else ''} ago"


def time_ago(then: datetime, now: datetime | None = None) -> str:
    now = now or datetime.now().astimezone()
    if then.tzinfo is None:
        then = then.astimezone()
    if now.tzinfo is None:
        now = now.astimezone()
    diff_ms = (now - then).total_seconds() * 1000
    mins = int(diff_ms // 60000)
    hours = int(diff_ms // 3600000)
    days = int(diff_ms // 86400000)

    if mins < 1:
        return "Just now"
    if mins < 60:
        return _plural(mins, "min")
    if hours < 24:
        return _plural(hours, "hour")
    if days < 7:
        return _plural(days, "day")
    return locale_date(then.astimezone(now.tzinfo))


@dataclass(frozen=True)
class WeeklyStats:
    total_spent: float
    total_display: str
    transaction_count: int
    coffee_count: int


def weekly_stats(
    expenses: Sequence[ExpenseRecord], now: datetime | None = None
) -> WeeklyStats:
    week = this_week_expenses(expenses, now)
    total = sum(e.amount for e in week)
    return WeeklyStats(
        total_spent=total,
        total_display=format_inr(total),
        transaction_count=len(week),
        coffee_count=sum(1 for e in week if e.category == COFFEE_CATEGORY),
    )


@dataclass(frozen=True)
class HistoryEntry:
    id: int
    emoji: str
    description: str
    category: str
    age: str
    amount_display: str


def expense_history(
    expenses: Sequence[ExpenseRecord],
    now: datetime | None = None,
    limit: int = HISTORY_LIMIT,
) -> List[HistoryEntry]:
    """Most recent ``limit`` expenses in stored (newest-first) order."""
    limit = max(0, min(limit, HISTORY_LIMIT))
    return [
        HistoryEntry(
            id=e.id,
            emoji=CATEGORY_EMOJIS.get(e.category, ""),
            description=e.description,
            category=e.category,
            age=time_ago(e.timestamp, now),
            amount_display=f"{CURRENCY_SYMBOL}{format_inr(e.amount)}",
        )
        for e in list(expenses)[:limit]
    ]


@dataclass(frozen=True)
class DashboardView:
    configured: bool
    budget_display: str
    stats: WeeklyStats
    history: List[HistoryEntry] = field(default_factory=list)

    @property
    def history_empty(self) -> bool:
        return not self.history


def build_dashboard(
    data: StoredData, now: datetime | None = None, limit: int = HISTORY_LIMIT
) -> DashboardView:
    """Full view model for one paint; nothing is carried over between calls."""
    return DashboardView(
        configured=data.is_configured,
        budget_display=format_inr(data.monthly_budget),
        stats=weekly_stats(data.expenses, now),
        history=expense_history(data.expenses, now, limit),
    )


__all__ = [
    "DashboardView",
    "HistoryEntry",
    "WeeklyStats",
    "EMPTY_HISTORY_MESSAGE",
    "HISTORY_LIMIT",
    "build_dashboard",
    "expense_history",
    "locale_date",
    "time_ago",
    "weekly_stats",
]
