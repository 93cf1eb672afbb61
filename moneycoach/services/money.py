"""Money / rounding / display helpers.

Centralized so the prompt builder, view renderer and API use identical
number formatting.
"""

from __future__ import annotations
import math
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Union


def _quantize(value: float, exp: Decimal) -> Decimal:
    """Half-up quantize ``value`` to ``exp`` at whatever precision it needs."""
    d = Decimal(str(value))
    with localcontext() as ctx:
        # integer digits + fraction digits + one for a rounding carry
        ctx.prec = max(ctx.prec, d.adjusted() + 2 - exp.as_tuple().exponent)
        return d.quantize(exp, rounding=ROUND_HALF_UP)


def round2(value: float) -> float:
    if not math.isfinite(value):
        return float(value)
    return float(_quantize(value, Decimal("0.01")))


def round_half_up(value: float) -> Union[int, float]:
    """Round to the nearest integer, halves upward (2.5 -> 3).

    Non-finite input (an aggregate past the float range) is returned as is.
    """
    if not math.isfinite(value):
        return float(value)
    return int(_quantize(value, Decimal("1")))


def plain_number(value: float) -> str:
    """Render a number without a trailing ``.0`` for integral values."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _group_indian(digits: str) -> str:
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    groups = []
    while len(head) > 2:
        groups.insert(0, head[-2:])
        head = head[:-2]
    if head:
        groups.insert(0, head)
    return ",".join(groups + [tail])


def format_inr(value: float, max_fraction_digits: int = 3) -> str:
    """Format with Indian digit grouping (lakh/crore): 1234567.5 -> 12,34,567.5."""
    if isinstance(value, float) and not math.isfinite(value):
        return "NaN" if math.isnan(value) else ("-∞" if value < 0 else "∞")
    d = _quantize(value, Decimal(1).scaleb(-max_fraction_digits))
    sign = "-" if d < 0 else ""
    text = f"{abs(d):f}"
    int_part, _, frac = text.partition(".")
    frac = frac.rstrip("0")
    out = _group_indian(int_part)
    return f"{sign}{out}.{frac}" if frac else f"{sign}{out}"


__all__ = ["round2", "round_half_up", "plain_number", "format_inr"]
