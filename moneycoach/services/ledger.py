"""Store mutations shared by the HTML and JSON routes.

Each function takes already-validated input and performs exactly one store
write, returning the reloaded data so callers can re-render from it.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Tuple

from moneycoach.db.store import Store, StoredData
from moneycoach.models.expense import ExpenseIn, ExpenseRecord
from moneycoach.models.profile import ProfileIn
from moneycoach.services.view import locale_date

logger = logging.getLogger("moneycoach.ledger")


def next_expense_id(data: StoredData, now: datetime) -> int:
    """Creation time in epoch milliseconds, bumped past the newest id."""
    candidate = int(now.timestamp() * 1000)
    if data.expenses:
        candidate = max(candidate, data.expenses[0].id + 1)
    return candidate


def log_expense(
    store: Store, expense: ExpenseIn, now: datetime | None = None
) -> Tuple[ExpenseRecord, StoredData]:
    now = now or datetime.now().astimezone()
    if now.tzinfo is None:
        now = now.astimezone()
    data = store.load()
    record = ExpenseRecord(
        id=next_expense_id(data, now),
        description=expense.description,
        amount=expense.amount,
        category=expense.category,
        timestamp=now.astimezone(timezone.utc),
        date=locale_date(now),
    )
    data.expenses.insert(0, record)
    store.save(expenses=data.expenses)
    logger.info(
        "expense logged id=%s category=%s amount=%s",
        record.id,
        record.category,
        record.amount,
    )
    return record, data


def save_profile(store: Store, profile: ProfileIn) -> StoredData:
    store.save(api_key=profile.api_key, monthly_budget=profile.monthly_budget)
    logger.info("profile saved budget=%s", profile.monthly_budget)
    return store.load()


def reset_all(store: Store) -> StoredData:
    store.reset()
    return store.load()


__all__ = ["log_expense", "next_expense_id", "reset_all", "save_profile"]
