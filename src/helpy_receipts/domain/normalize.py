"""Amount and date extraction from receipt text.

Each field is driven by an ordered table of named strategies. A strategy
takes the receipt text and returns a value or None; the first one that
produces a value wins (see :func:`first_match`).
"""

import re
from datetime import date
from typing import Callable, Optional, Sequence, Tuple, TypeVar

from ..logging import get_logger
from .models import CONFIDENCE_GUESSED, CONFIDENCE_MATCHED

_LOG = get_logger("normalize")

T = TypeVar("T")
Strategy = Tuple[str, Callable[[str], Optional[T]]]

MIN_YEAR = 1900
MAX_YEAR = 2100

_AMOUNT = r"(\d[\d,]*\.?\d*)"
_TOTAL_LABEL = re.compile(r"(?:grand\s*)?total[:\s]*\$?\s*" + _AMOUNT, re.IGNORECASE)
_AMOUNT_DUE_LABEL = re.compile(r"(?:amount\s*due|balance\s*due)[:\s]*\$?\s*" + _AMOUNT, re.IGNORECASE)
_TRAILING_DOLLAR = re.compile(r"\$\s*(\d[\d,]*\.\d{2})\s*$", re.MULTILINE)
_ANY_PRICE = re.compile(r"\$?\s*(\d+\.\d{2})")

_ISO_DATE = re.compile(r"(\d{4})[/\-](\d{1,2})[/\-](\d{1,2})")
_AMBIGUOUS_DATE = re.compile(r"(\d{1,2})[/\-](\d{1,2})[/\-](\d{4})")
_MONTH_NAME_DATE = re.compile(
    r"\b((?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*)\.?\s+(\d{1,2}),?\s+(\d{4})",
    re.IGNORECASE,
)
_MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)
_CANONICAL_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


def first_match(strategies: Sequence[Strategy], text: str) -> Tuple[Optional[str], Optional[T]]:
    """Return (strategy name, value) for the first strategy that yields a value."""
    for name, strategy in strategies:
        value = strategy(text)
        if value is not None:
            return name, value
    return None, None


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------


def parse_amount(value: str) -> Optional[float]:
    """Convert '1,234.50' style strings to a float with two decimals."""
    s = (value or "").replace(",", "").strip()
    if not s:
        return None
    try:
        return round(float(s), 2)
    except ValueError:
        return None


def _labelled(pattern: "re.Pattern[str]") -> Callable[[str], Optional[float]]:
    def _strategy(text: str) -> Optional[float]:
        m = pattern.search(text)
        return parse_amount(m.group(1)) if m else None

    return _strategy


TOTAL_STRATEGIES: Tuple[Strategy, ...] = (
    ("total-label", _labelled(_TOTAL_LABEL)),
    ("amount-due-label", _labelled(_AMOUNT_DUE_LABEL)),
    ("trailing-dollar", _labelled(_TRAILING_DOLLAR)),
)


def largest_amount(text: str) -> Optional[float]:
    """Return the largest price-looking number in the text, if any."""
    amounts = [a for a in (parse_amount(m) for m in _ANY_PRICE.findall(text)) if a is not None]
    return max(amounts) if amounts else None


def extract_total(text: str) -> Tuple[float, float]:
    """Return (total, confidence) for the receipt.

    Labelled or line-final amounts give CONFIDENCE_MATCHED; otherwise the
    largest number is taken with CONFIDENCE_GUESSED, and 0 when there is none.
    """
    name, total = first_match(TOTAL_STRATEGIES, text)
    if total is not None:
        _LOG.debug(f"Total {total} via {name}")
        return total, CONFIDENCE_MATCHED
    guess = largest_amount(text)
    if guess is not None:
        _LOG.debug(f"Total {guess} guessed from largest amount")
        return guess, CONFIDENCE_GUESSED
    return 0.0, CONFIDENCE_GUESSED


# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------


def to_iso_date(year: int, month: int, day: int) -> Optional[str]:
    """Return YYYY-MM-DD when the parts form a real date in the accepted year range."""
    if not (MIN_YEAR <= year <= MAX_YEAR):
        return None
    try:
        iso = date(year, month, day).isoformat()
    except ValueError:
        return None
    return iso if _CANONICAL_DATE.match(iso) else None


def _first_occurrence(pattern: "re.Pattern[str]", text: str, handler) -> Optional[str]:
    # Only the first hit of a pattern counts; an invalid one defers to the next pattern.
    m = pattern.search(text)
    return handler(m) if m else None


def _iso_handler(m: "re.Match[str]") -> Optional[str]:
    year, month, day = (int(g) for g in m.groups())
    if not (1 <= month <= 12 and 1 <= day <= 31):
        return None
    return to_iso_date(year, month, day)


def _ambiguous_handler(m: "re.Match[str]") -> Optional[str]:
    first, second, year = (int(g) for g in m.groups())
    # A first part above 12 cannot be a month, so the date is day-first.
    if 12 < first <= 31 and 1 <= second <= 12:
        return to_iso_date(year, second, first)
    if 1 <= first <= 12 and 1 <= second <= 31:
        return to_iso_date(year, first, second)
    return None


def month_number(word: str) -> Optional[int]:
    """Map an English month name or abbreviation ('Jan', 'Sept', 'January') to 1..12."""
    w = (word or "").lower().rstrip(".")
    if len(w) < 3:
        return None
    for idx, full in enumerate(_MONTH_NAMES, start=1):
        if full.startswith(w):
            return idx
    return None


def _month_name_handler(m: "re.Match[str]") -> Optional[str]:
    month = month_number(m.group(1))
    if month is None:
        return None
    return to_iso_date(int(m.group(3)), month, int(m.group(2)))


DATE_STRATEGIES: Tuple[Strategy, ...] = (
    ("iso", lambda t: _first_occurrence(_ISO_DATE, t, _iso_handler)),
    ("day-or-month-first", lambda t: _first_occurrence(_AMBIGUOUS_DATE, t, _ambiguous_handler)),
    ("month-name", lambda t: _first_occurrence(_MONTH_NAME_DATE, t, _month_name_handler)),
)


def extract_date(text: str, today: Optional[date] = None) -> str:
    """Return the receipt date as YYYY-MM-DD, or today's date when none is readable."""
    name, iso = first_match(DATE_STRATEGIES, text)
    if iso is not None:
        _LOG.debug(f"Date {iso} via {name}")
        return iso
    fallback = (today or date.today()).isoformat()
    _LOG.debug(f"No valid date found; using {fallback}")
    return fallback
