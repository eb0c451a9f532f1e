# agencydesk/services/money.py
"""
Currency parsing and formatting.

Amounts arrive as heterogeneous strings ("1250.00", "$1,234.56", " 300 ").
Parsing is lenient: anything that does not parse counts as zero, and the
caller can tell via ParsedAmount.ok.
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, NamedTuple, Optional, Union

CURRENCY_SYMBOLS = ("$",)
CENTS = Decimal("0.01")
ZERO = Decimal("0")

# Everything but digits, sign and decimal point
_RE_NON_NUMERIC = re.compile(r"[^0-9.+\-]")

Number = Union[int, float, Decimal]


class ParsedAmount(NamedTuple):
    value: Decimal
    ok: bool


def parse_amount_detailed(raw: Any) -> ParsedAmount:
    """
    Parse a money value.

    Examples:
        '$1,234.56' -> (1234.56, True)
        '100'       -> (100, True)
        'garbage'   -> (0, False)
        None        -> (0, False)
    """
    if raw is None:
        return ParsedAmount(ZERO, False)
    if isinstance(raw, bool):
        return ParsedAmount(ZERO, False)
    if isinstance(raw, Decimal):
        return ParsedAmount(raw, True) if raw.is_finite() else ParsedAmount(ZERO, False)
    if isinstance(raw, (int, float)):
        try:
            d = Decimal(str(raw))
        except InvalidOperation:
            return ParsedAmount(ZERO, False)
        return ParsedAmount(d, True) if d.is_finite() else ParsedAmount(ZERO, False)

    cleaned = _RE_NON_NUMERIC.sub("", str(raw))
    if not cleaned or not any(ch.isdigit() for ch in cleaned):
        return ParsedAmount(ZERO, False)
    try:
        return ParsedAmount(Decimal(cleaned), True)
    except InvalidOperation:
        return ParsedAmount(ZERO, False)


def parse_amount(raw: Any) -> Decimal:
    """Lenient parse; unparsable input yields 0. Check the raw string when strictness matters."""
    return parse_amount_detailed(raw).value


def is_valid_amount(raw: Any, allow_negative: bool = False) -> bool:
    parsed = parse_amount_detailed(raw)
    if not parsed.ok:
        return False
    return allow_negative or parsed.value >= 0


def quantize_cents(value: Number) -> Decimal:
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_currency(value: Optional[Number]) -> str:
    """US dollars, two decimals, thousands separator: 1234.5 -> '$1,234.50'."""
    if value is None:
        value = ZERO
    q = quantize_cents(value)
    sign = "-" if q < 0 else ""
    return f"{sign}${abs(q):,.2f}"


def format_decimal(value: Number) -> str:
    """Canonical decimal string for the wire: 1234.5 -> '1234.50'."""
    return f"{quantize_cents(value):.2f}"


def display_amount(raw: Any) -> str:
    """
    Display form of a stored amount.

    A value that already starts with a currency symbol is taken as its own
    display string; anything else is parsed and formatted. Unparsable text
    comes back unchanged.
    """
    if raw is None:
        return format_currency(ZERO)
    s = str(raw).strip()
    if s.startswith(CURRENCY_SYMBOLS):
        return s
    parsed = parse_amount_detailed(s)
    if not parsed.ok:
        return s
    return format_currency(parsed.value)
