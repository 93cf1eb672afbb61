"""Pydantic domain models for Money Coach."""

from .constants import CATEGORIES, CATEGORY_EMOJIS  # re-export
from .expense import ExpenseIn, ExpenseOut, ExpenseRecord
from .profile import ProfileIn, ProfileOut

__all__ = [
    "CATEGORIES",
    "CATEGORY_EMOJIS",
    "ExpenseIn",
    "ExpenseOut",
    "ExpenseRecord",
    "ProfileIn",
    "ProfileOut",
]
