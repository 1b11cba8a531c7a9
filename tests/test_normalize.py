import os
import sys
from datetime import date

import pytest

# Ensure the repository's src/ is importable
sys.path.insert(0, os.path.abspath("src"))

from helpy_receipts.domain.normalize import (
    TOTAL_STRATEGIES,
    extract_date,
    extract_total,
    first_match,
    month_number,
    parse_amount,
)

FALLBACK = date(2020, 5, 6)


def test_first_total_label_wins_even_on_subtotal():
    text = "Subtotal $5.00\nTax $0.35\nTotal: $5.35"
    assert extract_total(text) == (5.0, 0.8)


def test_grand_total_with_thousands_separator():
    assert extract_total("GRAND TOTAL 1,234.50") == (1234.5, 0.8)


def test_amount_due_label():
    name, value = first_match(TOTAL_STRATEGIES, "Balance Due: 42.10")
    assert name == "amount-due-label"
    assert value == 42.1


def test_trailing_dollar_amount():
    name, value = first_match(TOTAL_STRATEGIES, "Coffee\nPaid $7.25\nThank you")
    assert name == "trailing-dollar"
    assert value == 7.25


def test_largest_amount_fallback_has_low_confidence():
    text = "Item A 3.50\nItem B 12.00\nItem C 1.25"
    assert extract_total(text) == (12.0, 0.5)


def test_no_amounts_gives_zero_total():
    assert extract_total("hello world") == (0.0, 0.5)
    assert extract_total("Total: ,") == (0.0, 0.5)


def test_parse_amount():
    assert parse_amount("1,234.50") == 1234.5
    assert parse_amount("") is None
    assert parse_amount(",") is None


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Date: 2024-01-15", "2024-01-15"),
        ("2024/1/5 12:30", "2024-01-05"),
        ("13/01/2024", "2024-01-13"),
        ("01/13/2024", "2024-01-13"),
        ("15-01-2024", "2024-01-15"),
        ("03/04/2024", "2024-03-04"),
        ("Jan 15, 2024", "2024-01-15"),
        ("September 3 2023", "2023-09-03"),
        ("Sept. 3, 2023", "2023-09-03"),
    ],
)
def test_date_formats(text, expected):
    assert extract_date(text, today=FALLBACK) == expected


@pytest.mark.parametrize(
    "text",
    [
        "2024-13-45",
        "02/30/2024",
        "1850-01-01",
        "Mayor 12, 2024",
        "no date here",
        "",
    ],
)
def test_invalid_dates_fall_back_to_today(text):
    assert extract_date(text, today=FALLBACK) == "2020-05-06"


def test_only_first_occurrence_of_a_pattern_counts():
    assert extract_date("Ref 2024-99-01 Date 2024-02-29", today=FALLBACK) == "2020-05-06"


def test_invalid_first_occurrence_defers_to_next_pattern():
    assert extract_date("Ref 2024-99-01 on 15/01/2024", today=FALLBACK) == "2024-01-15"


def test_default_fallback_is_current_date():
    assert extract_date("nothing") == date.today().isoformat()


def test_month_number():
    assert month_number("dec") == 12
    assert month_number("Sept") == 9
    assert month_number("Mayor") is None
    assert month_number("ma") is None
