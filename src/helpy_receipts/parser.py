"""Turn raw OCR text into a :class:`ParsedReceipt`.

The parser is a pure function: no I/O, no shared state, and it never raises
for string input. Uncertain fields fall back to documented defaults
("Unknown" merchant, 0 total at 0.5 confidence, today's date,
"Miscellaneous" category, no line items).
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from .domain.categories import classify_category
from .domain.items import extract_line_items
from .domain.merchant import extract_merchant, match_known_merchant, text_lines
from .domain.models import ParsedReceipt
from .domain.normalize import extract_date, extract_total
from .domain.sanitize import unwrap_ocr_text
from .logging import get_logger

LOG = get_logger("parser")


def parse_receipt_text(
    raw_text: str,
    known_merchants: Optional[Sequence[str]] = None,
    *,
    today: Optional[date] = None,
) -> ParsedReceipt:
    """Parse an OCR transcript into structured expense data.

    The merchant is read from the unwrapped text and optionally snapped to
    one of ``known_merchants``. Total, date, category and line items are read
    from the original ``raw_text``; line items priced at or above the total
    are dropped. ``today`` overrides the fallback date (for tests).
    """
    if not isinstance(raw_text, str):
        LOG.warning(f"parse_receipt_text received non-string input: {type(raw_text).__name__}")
        raw_text = "" if raw_text is None else str(raw_text)

    cleaned = unwrap_ocr_text(raw_text)
    lines = text_lines(cleaned)

    merchant = extract_merchant(lines)
    snapped = match_known_merchant(merchant, lines, known_merchants)
    if snapped:
        if snapped != merchant:
            LOG.info(f"Merchant {merchant!r} matched known merchant {snapped!r}")
        merchant = snapped

    total, confidence = extract_total(raw_text)
    receipt = ParsedReceipt(
        raw_text=raw_text,
        total=total,
        merchant=merchant,
        date=extract_date(raw_text, today=today),
        category=classify_category(raw_text),
        confidence=confidence,
        line_items=extract_line_items(raw_text, total),
    )
    LOG.info(
        "Parsed receipt: merchant=%s total=%.2f (confidence=%.1f) date=%s category=%s items=%d",
        receipt.merchant,
        receipt.total,
        receipt.confidence,
        receipt.date,
        receipt.category,
        len(receipt.line_items),
    )
    return receipt
