"""Coach prompt construction.

The text is read by a language model, not parsed, so wording is soft. The
one hard rule: the coffee line appears only for coffee entries or when coffee
was already bought this week.
"""

from __future__ import annotations

from typing import Dict, List

from moneycoach.models.constants import COFFEE_CATEGORY, CURRENCY_SYMBOL as R
from moneycoach.models.expense import ExpenseIn
from moneycoach.services.aggregation import SpendingContext
from moneycoach.services.money import plain_number, round_half_up

SYSTEM_PROMPT = (
    "You are a warm, witty, and supportive money coach. Your job is to respond "
    "to expense entries with insight and humor. Keep responses short (max 2-3 "
    "sentences), conversational, and never judgmental. Combine practical "
    "financial reflection with empathy or encouragement. Use Indian Rupee (₹) "
    "for all amounts."
)

CLOSING_INSTRUCTION = (
    "Respond with a witty, warm, and insightful message (2-3 sentences max)."
)


def include_coffee_line(category: str, coffee_count: int) -> bool:
    return category == COFFEE_CATEGORY or coffee_count > 0


def build_coach_prompt(
    expense: ExpenseIn, context: SpendingContext, monthly_budget: int
) -> str:
    cat = expense.category
    lines = [
        f'User entry: "{expense.description} {R}{plain_number(expense.amount)}"',
        f"Category: {cat}",
        f"Monthly budget: {R}{monthly_budget}",
        "This week so far:",
        f"- Total spent: {R}{plain_number(context.week_total)}",
        f"- Number of {cat} purchases: {context.category_count}",
        f"- Total {cat} spending: {R}{plain_number(context.category_total)}",
    ]
    if include_coffee_line(cat, context.coffee_count):
        lines.append(f"- Coffee/drinks count this week: {context.coffee_count}")
    lines.append(
        f"- Monthly projection: {R}{round_half_up(context.monthly_projection)}"
    )
    lines.append("")
    lines.append(CLOSING_INSTRUCTION)
    return "\n".join(lines)


def build_messages(prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


__all__ = [
    "SYSTEM_PROMPT",
    "CLOSING_INSTRUCTION",
    "build_coach_prompt",
    "build_messages",
    "include_coffee_line",
]
