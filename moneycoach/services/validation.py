"""Form-input parsing and user-facing validation for setup, settings and
expense logging.

Form values arrive as raw text. They are parsed leniently, the way a browser
``parseInt`` / ``parseFloat`` reads an input box ("150abc" -> 150), then run
through the pydantic models. Failures are reported as a single alert message;
the caller must not touch the store when a message is returned.
"""

from __future__ import annotations

import math
import re
from typing import Optional, Tuple

from pydantic import ValidationError

from moneycoach.models.constants import API_KEY_PREFIX
from moneycoach.models.expense import ExpenseIn
from moneycoach.models.profile import ProfileIn

MSG_DESCRIPTION = "Please enter a description"
MSG_AMOUNT = "Please enter a valid amount"
MSG_API_KEY_SETUP = "Please enter a valid OpenAI API key (starts with sk-)"
MSG_API_KEY_SETTINGS = "Please enter a valid OpenAI API key"
MSG_BUDGET = "Please enter a valid monthly budget"

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_int_prefix(raw: Optional[str]) -> Optional[int]:
    """Leading integer of ``raw`` or None when there is none."""
    if raw is None:
        return None
    m = _INT_PREFIX.match(raw)
    if not m:
        return None
    try:
        return int(m.group(1))
    except ValueError:
        # past the interpreter's int digit limit
        return None


def parse_float_prefix(raw: Optional[str]) -> Optional[float]:
    """Leading decimal number of ``raw`` or None when there is none."""
    if raw is None:
        return None
    m = _FLOAT_PREFIX.match(raw)
    if not m:
        return None
    value = float(m.group(1))
    return value if math.isfinite(value) else None


def validate_profile_form(
    api_key: Optional[str], budget: Optional[str], *, setup: bool = True
) -> Tuple[Optional[ProfileIn], Optional[str]]:
    """Return (profile, None) on success or (None, alert message)."""
    key = (api_key or "").strip()
    parsed_budget = parse_int_prefix(budget)
    if not key or not key.startswith(API_KEY_PREFIX):
        return None, MSG_API_KEY_SETUP if setup else MSG_API_KEY_SETTINGS
    if not parsed_budget or parsed_budget <= 0:
        return None, MSG_BUDGET
    try:
        return ProfileIn(api_key=key, monthly_budget=parsed_budget), None
    except ValidationError:  # pragma: no cover - guarded by checks above
        return None, MSG_BUDGET


def validate_expense_form(
    description: Optional[str], amount: Optional[str], category: Optional[str]
) -> Tuple[Optional[ExpenseIn], Optional[str]]:
    """Return (expense, None) on success or (None, alert message)."""
    desc = (description or "").strip()
    parsed_amount = parse_float_prefix(amount)
    if not desc:
        return None, MSG_DESCRIPTION
    if not parsed_amount or parsed_amount <= 0:
        return None, MSG_AMOUNT
    try:
        return (
            ExpenseIn(description=desc, amount=parsed_amount, category=category or ""),
            None,
        )
    except ValidationError as ve:
        err = ve.errors()[0]
        loc = ".".join(str(p) for p in err.get("loc", []))
        return None, f"{loc}: {err.get('msg', 'invalid')}"


__all__ = [
    "parse_int_prefix",
    "parse_float_prefix",
    "validate_profile_form",
    "validate_expense_form",
    "MSG_DESCRIPTION",
    "MSG_AMOUNT",
    "MSG_API_KEY_SETUP",
    "MSG_API_KEY_SETTINGS",
    "MSG_BUDGET",
]
