"""Domain constants and enumerations for validation.

Kept as plain collections; the category set is closed and small.
"""

from typing import Dict, Tuple

# Order matches the category picker on the dashboard.
CATEGORIES: Tuple[str, ...] = (
    "food",
    "coffee",
    "shopping",
    "transport",
    "entertainment",
    "bills",
    "other",
)

CATEGORY_EMOJIS: Dict[str, str] = {
    "food": "🍔",
    "coffee": "☕",
    "shopping": "🛍️",
    "transport": "🚗",
    "entertainment": "🎬",
    "bills": "💡",
    "other": "📦",
}

COFFEE_CATEGORY = "coffee"
API_KEY_PREFIX = "sk-"
CURRENCY_SYMBOL = "₹"

# Browser-era storage keys; kept so an exported localStorage dump maps 1:1.
KEY_API_KEY = "moneyCoach_apiKey"
KEY_BUDGET = "moneyCoach_budget"
KEY_EXPENSES = "moneyCoach_expenses"
STORAGE_KEYS: Tuple[str, ...] = (KEY_API_KEY, KEY_BUDGET, KEY_EXPENSES)
