"""
Helpy receipts – OCR text normalization for household expenses.

The package turns the raw text returned by a vision OCR model into a
structured expense record (merchant, total, date, category, line items).
The core lives in :mod:`helpy_receipts.parser` and :mod:`helpy_receipts.domain`;
the OCR client and CLI are thin layers on top.
"""

from .parser import parse_receipt_text
from .domain.models import LineItem, ParsedReceipt

__all__ = [
    "parse_receipt_text",
    "LineItem",
    "ParsedReceipt",
]
