# tests/test_money_and_dates.py
from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from agencydesk.services.dates import (
    format_date,
    month_range,
    parse_instant,
    quarter_range,
    to_iso,
    week_start,
)
from agencydesk.services.money import (
    display_amount,
    format_currency,
    format_decimal,
    is_valid_amount,
    parse_amount,
    parse_amount_detailed,
)

pytestmark = pytest.mark.unit


def test_parse_amount_strips_symbols_and_separators():
    assert parse_amount("$1,234.56") == Decimal("1234.56")
    assert parse_amount(" 300 ") == Decimal("300")
    assert parse_amount(42) == Decimal("42")


@pytest.mark.parametrize(
    "raw",
    ["garbage", "", None, "$", "1-2", True, Decimal("Infinity"), Decimal("NaN"), float("inf")],
)
def test_parse_amount_unparsable_is_zero_and_flagged(raw):
    parsed = parse_amount_detailed(raw)
    assert parsed.value == 0
    assert parsed.ok is False


def test_is_valid_amount_rejects_negative_unless_allowed():
    assert is_valid_amount("10.00")
    assert not is_valid_amount("-5")
    assert is_valid_amount("-5", allow_negative=True)
    assert not is_valid_amount("abc")


def test_format_currency():
    assert format_currency(Decimal("1234.5")) == "$1,234.50"
    assert format_currency(0) == "$0.00"
    assert format_currency(None) == "$0.00"
    assert format_currency(Decimal("-12.345")) == "-$12.35"
    assert format_decimal(Decimal("1234.5")) == "1234.50"


def test_display_amount():
    assert display_amount("$1,000 (est.)") == "$1,000 (est.)"
    assert display_amount("1500") == "$1,500.00"
    assert display_amount("n/a") == "n/a"
    assert display_amount(None) == "$0.00"


def test_parse_instant_normalizes_to_naive_utc():
    assert parse_instant("2025-01-05") == datetime(2025, 1, 5)
    assert parse_instant("2025-01-05T10:00:00.000Z") == datetime(2025, 1, 5, 10, 0)
    assert parse_instant("2025-01-05T10:00:00+02:00") == datetime(2025, 1, 5, 8, 0)
    assert parse_instant("not a date") is None
    assert parse_instant(date(2025, 3, 1)) == datetime(2025, 3, 1)


def test_format_date_styles():
    assert format_date("2025-01-05T00:00:00.000Z") == "2025-01-05"
    assert format_date("2025-01-05", style="long") == "January 5, 2025"
    assert format_date(None) == ""
    assert format_date("bogus") == ""


def test_to_iso():
    assert to_iso("2025-01-05") == "2025-01-05T00:00:00.000Z"
    assert to_iso("") is None
    assert to_iso(None) is None
    with pytest.raises(ValueError):
        to_iso("05/01/2025")
    with pytest.raises(ValueError):
        to_iso("2025-02-30")


def test_month_and_quarter_ranges_are_inclusive():
    start, end = month_range(2024, 2)
    assert start == datetime(2024, 2, 1)
    assert end == datetime(2024, 2, 29, 23, 59, 59, 999999)

    q_start, q_end = quarter_range(2025, 5)
    assert q_start == datetime(2025, 4, 1)
    assert q_end.date() == date(2025, 6, 30)


def test_week_start_is_monday():
    assert week_start("2025-01-08") == date(2025, 1, 6)
    assert week_start("2025-01-06") == date(2025, 1, 6)
    assert week_start("2025-01-12") == date(2025, 1, 6)
    assert week_start(None) is None
