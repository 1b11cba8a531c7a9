from dataclasses import dataclass, field
from datetime import date as _date
from typing import Any, Dict, List, Tuple


UNKNOWN_MERCHANT = "Unknown"
MERCHANT_MAX_LENGTH = 50
DEFAULT_CATEGORY = "Miscellaneous"

EXPENSE_CATEGORIES: Tuple[str, ...] = (
    "Housing & Utilities",
    "Food & Daily Needs",
    "Transport & Travel",
    "Health & Personal Care",
    "Fun & Lifestyle",
    DEFAULT_CATEGORY,
)

# Confidence of the total amount: labelled line vs. largest number guess.
CONFIDENCE_MATCHED = 0.8
CONFIDENCE_GUESSED = 0.5


@dataclass(frozen=True)
class LineItem:
    name: str
    price: float


@dataclass
class ParsedReceipt:
    """Structured expense data extracted from one OCR transcript.

    ``raw_text`` is the unmodified transcript, kept for auditing.
    ``date`` is always ISO ``YYYY-MM-DD``; ``confidence`` describes how the
    total was found (see CONFIDENCE_MATCHED / CONFIDENCE_GUESSED).
    """

    raw_text: str
    total: float = 0.0
    merchant: str = UNKNOWN_MERCHANT
    date: str = field(default_factory=lambda: _date.today().isoformat())
    category: str = DEFAULT_CATEGORY
    confidence: float = CONFIDENCE_GUESSED
    line_items: List[LineItem] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "raw_text": self.raw_text,
            "total": self.total,
            "merchant": self.merchant,
            "date": self.date,
            "category": self.category,
            "confidence": self.confidence,
            "line_items": [{"name": it.name, "price": it.price} for it in self.line_items],
        }
