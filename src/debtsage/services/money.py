"""Exact money helpers over integer minor units (cents)."""

from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal
from typing import Iterable

_PREFIX_SYMBOLS = {
    "USD": "$",
    "GBP": "£",
    "CNY": "¥",
    "JPY": "¥",
}

_SUFFIX_SYMBOLS = {
    "KZT": "₸",
    "EUR": "€",
    "RUB": "₽",
    "TRY": "₺",
    "UAH": "₴",
    "GEL": "₾",
}

BPS_PER_UNIT = 10_000
MONTHS_PER_YEAR = 12


def _to_decimal(value: int | str | float | Decimal) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # Route through str so 1.5 stays 1.5 rather than its binary expansion.
        return Decimal(str(value))
    return Decimal(value)


def round_cents(value: int | Decimal) -> int:
    """Round to the nearest whole minor unit, halves away from zero."""

    return int(_to_decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def add_cents(*amounts: int) -> int:
    return sum_cents(amounts)


def sum_cents(amounts: Iterable[int]) -> int:
    total = 0
    for amount in amounts:
        total += int(amount)
    return total


def subtract_cents(a: int, b: int) -> int:
    return int(a) - int(b)


def multiply_cents(amount: int, factor: int | str | float | Decimal) -> int:
    """Multiply a cents amount by ``factor`` and round to whole cents."""

    return round_cents(Decimal(int(amount)) * _to_decimal(factor))


def monthly_interest_cents(balance_cents: int, apr_bps: int) -> int:
    """One month of simple interest on ``balance_cents`` at ``apr_bps`` per year."""

    interest = (
        Decimal(balance_cents) * Decimal(apr_bps) / Decimal(BPS_PER_UNIT) / Decimal(MONTHS_PER_YEAR)
    )
    return round_cents(interest)


def percent_string(bps: int) -> str:
    """Render basis points as a percentage with one decimal place (1850 -> "18.5")."""

    percent = (Decimal(bps) / Decimal(100)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return f"{percent:f}"


def format_money(amount_cents: int, currency: str = "KZT") -> str:
    """Format cents for display, truncating sub-unit amounts.

    >>> format_money(15000000)
    '150 000 ₸'
    >>> format_money(-500000, "USD")
    '-$5 000'
    """

    major = (Decimal(int(amount_cents)) / Decimal(100)).to_integral_value(rounding=ROUND_DOWN)
    sign = "-" if major < 0 else ""
    digits = f"{abs(int(major)):,}".replace(",", " ")
    code = (currency or "").upper()
    if code in _PREFIX_SYMBOLS:
        return f"{sign}{_PREFIX_SYMBOLS[code]}{digits}"
    symbol = _SUFFIX_SYMBOLS.get(code, code)
    return f"{sign}{digits} {symbol}"
