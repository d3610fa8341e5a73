"""
app/domain/money.py

Exact decimal helpers for royalty amounts.

Every monetary value in the summary engine is a ``decimal.Decimal``. Sums run
under a 60-digit context so accumulation of currency values is exact for any
realistic export, and independent of row order. Nothing here raises on bad
input: unparseable amounts become ``Decimal("0")``.
"""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Context, Decimal, InvalidOperation
from typing import Any, Final

ZERO: Final[Decimal] = Decimal("0")

MONEY_CONTEXT: Final[Context] = Context(prec=60, rounding=ROUND_HALF_UP)

# Thousands separators, whitespace and currency glyphs seen in distributor exports.
_NOISE_PATTERN = re.compile(r"[,\s$€£¥₹]")
_EMPTY_TOKENS = frozenset({"", "-", "+", "."})
# Plain literals only; no exponent notation.
_PLAIN_DECIMAL = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)")
# Widest integer part accepted before an amount degrades to zero.
MAX_INTEGER_DIGITS: Final[int] = 24


def parse_decimal(value: Any) -> Decimal:
    """
    Parse a raw CSV amount into a finite Decimal, degrading to zero.

    ``"$1,234.50"`` -> ``Decimal("1234.50")``; ``"abc"``, ``""``, ``None``,
    ``"NaN"``, ``"Infinity"``, exponent forms such as ``"1e9"`` and
    amounts wider than MAX_INTEGER_DIGITS -> ``Decimal("0")``.
    """

    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value if _in_range(value) else ZERO

    cleaned = _NOISE_PATTERN.sub("", str(value))
    if cleaned in _EMPTY_TOKENS or _PLAIN_DECIMAL.fullmatch(cleaned) is None:
        return ZERO

    try:
        parsed = Decimal(cleaned)
    except (InvalidOperation, ValueError):
        return ZERO
    return parsed if _in_range(parsed) else ZERO


def _in_range(value: Decimal) -> bool:
    return value.is_finite() and (value.is_zero() or value.adjusted() < MAX_INTEGER_DIGITS)


def add(left: Decimal, right: Decimal) -> Decimal:
    """Exact addition under the money context."""
    return MONEY_CONTEXT.add(left, right)


def divide(numerator: Decimal | int, denominator: Decimal | int) -> Decimal:
    """
    Divide under the money context; a zero denominator yields zero.
    """

    denominator_value = Decimal(denominator)
    if denominator_value == 0:
        return ZERO
    return MONEY_CONTEXT.divide(Decimal(numerator), denominator_value)


def quantize(value: Decimal, places: int) -> Decimal:
    """Round half-up to a fixed number of fractional digits."""
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP, context=MONEY_CONTEXT)


def to_rounded_float(value: Decimal, places: int) -> float:
    """
    Round half-up in decimal space, then expose as float for JSON payloads.
    """

    return float(quantize(value, places))
