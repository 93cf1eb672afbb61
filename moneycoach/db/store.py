"""Key/value persistence for the single user's profile and expenses.

Responsibilities
----------------
- Map three storage keys (credential, budget, expense list) to typed data.
- Partial updates: ``save`` writes only the fields it is given.
- Full wipe via ``reset``; there is no per-record delete.

Callers depend on the ``Store`` interface. ``SqliteStore`` persists to a
local SQLite file; ``MemoryStore`` keeps everything in a dict for tests.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import closing
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from moneycoach.models.constants import (
    KEY_API_KEY,
    KEY_BUDGET,
    KEY_EXPENSES,
    STORAGE_KEYS,
)
from moneycoach.models.expense import ExpenseRecord
from moneycoach.services.validation import parse_int_prefix

from .schema import BASIC_UTC_NOW, init_db

logger = logging.getLogger("moneycoach.db")

_UNSET = object()


@dataclass
class StoredData:
    api_key: str = ""
    monthly_budget: int = 0
    expenses: List[ExpenseRecord] = field(default_factory=list)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key) and self.monthly_budget > 0


class Store(ABC):
    """Flat key/value store holding the three Money Coach entries."""

    # ------------------------------------------------------------------
    # Raw key access (implemented per medium)
    @abstractmethod
    def _get_raw(self, key: str) -> Optional[str]:
        raise NotImplementedError

    @abstractmethod
    def _set_raw(self, values: Dict[str, str]) -> None:
        raise NotImplementedError

    @abstractmethod
    def _delete_raw(self, keys: Iterable[str]) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Typed API
    def load(self) -> StoredData:
        return StoredData(
            api_key=self._get_raw(KEY_API_KEY) or "",
            monthly_budget=parse_int_prefix(self._get_raw(KEY_BUDGET)) or 0,
            expenses=self._decode_expenses(self._get_raw(KEY_EXPENSES)),
        )

    def save(
        self,
        *,
        api_key: str = _UNSET,  # type: ignore[assignment]
        monthly_budget: int = _UNSET,  # type: ignore[assignment]
        expenses: List[ExpenseRecord] = _UNSET,  # type: ignore[assignment]
    ) -> None:
        values: Dict[str, str] = {}
        if api_key is not _UNSET:
            values[KEY_API_KEY] = api_key
        if monthly_budget is not _UNSET:
            values[KEY_BUDGET] = str(monthly_budget)
        if expenses is not _UNSET:
            values[KEY_EXPENSES] = json.dumps(
                [e.to_storage() for e in expenses], ensure_ascii=False
            )
        if values:
            self._set_raw(values)

    def reset(self) -> None:
        self._delete_raw(STORAGE_KEYS)
        logger.info("store reset: all entries removed")

    # ------------------------------------------------------------------
    def _decode_expenses(self, raw: Optional[str]) -> List[ExpenseRecord]:
        if not raw:
            return []
        try:
            items = json.loads(raw)
            if not isinstance(items, list):
                raise ValueError(f"expected a JSON array, got {type(items).__name__}")
            return [ExpenseRecord.model_validate(item) for item in items]
        except (ValueError, ValidationError) as exc:
            # Corrupt blob: fall back to an empty list, keep credential/budget.
            logger.warning("discarding unreadable expense data: %s", exc)
            return []


class SqliteStore(Store):
    def __init__(self, db_path: Path):
        self.db_path = db_path
        init_db(db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _get_raw(self, key: str) -> Optional[str]:
        with closing(self._connect()) as conn, conn:
            cur = conn.cursor()
            cur.execute("SELECT value FROM kv WHERE key = ?", (key,))
            row = cur.fetchone()
            return row[0] if row else None

    def _set_raw(self, values: Dict[str, str]) -> None:
        with closing(self._connect()) as conn, conn:
            cur = conn.cursor()
            for key, value in values.items():
                cur.execute(
                    f"""
                    INSERT INTO kv (key, value) VALUES (?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = ({BASIC_UTC_NOW})
                    """,
                    (key, value),
                )
            conn.commit()

    def _delete_raw(self, keys: Iterable[str]) -> None:
        keys = list(keys)
        with closing(self._connect()) as conn, conn:
            cur = conn.cursor()
            cur.execute(
                f"DELETE FROM kv WHERE key IN ({','.join('?' for _ in keys)})",
                keys,
            )
            conn.commit()


class MemoryStore(Store):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def _get_raw(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def _set_raw(self, values: Dict[str, str]) -> None:
        self.data.update(values)

    def _delete_raw(self, keys: Iterable[str]) -> None:
        for key in keys:
            self.data.pop(key, None)


__all__ = ["Store", "StoredData", "SqliteStore", "MemoryStore"]
