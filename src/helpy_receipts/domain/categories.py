from typing import Dict, Tuple

from .models import DEFAULT_CATEGORY

# Checked in order; the first category with any keyword in the text wins.
CATEGORY_KEYWORDS: Dict[str, Tuple[str, ...]] = {
    "Food & Daily Needs": ("grocery", "supermarket", "market", "food", "restaurant", "cafe", "deli", "bakery"),
    "Transport & Travel": ("gas", "fuel", "petrol", "uber", "grab", "taxi", "parking", "transit"),
    "Housing & Utilities": ("electric", "water", "internet", "phone", "rent", "maintenance"),
    "Health & Personal Care": ("pharmacy", "clinic", "hospital", "doctor", "dental", "medical"),
    "Fun & Lifestyle": ("cinema", "movie", "entertainment", "gym", "spa", "hobby"),
}


def classify_category(text: str) -> str:
    """Return the spending category for the receipt text (case-insensitive substring match)."""
    lowered = (text or "").lower()
    for category, keywords in CATEGORY_KEYWORDS.items():
        if any(kw in lowered for kw in keywords):
            return category
    return DEFAULT_CATEGORY
