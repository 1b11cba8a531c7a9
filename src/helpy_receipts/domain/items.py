import re
from typing import List

from .models import LineItem
from .normalize import parse_amount

_ITEM_LINE = re.compile(r"^(.+?)[ \t]+\$?[ \t]*(\d+\.\d{2})[ \t\r]*$", re.MULTILINE)

ITEM_NAME_MIN = 3
ITEM_NAME_MAX = 49


def extract_line_items(text: str, total: float) -> List[LineItem]:
    """Return 'name  price' lines priced strictly below the receipt total.

    Anything at or above the total is treated as a subtotal, tax or total line.
    """
    items: List[LineItem] = []
    for m in _ITEM_LINE.finditer(text):
        name = m.group(1).strip()
        price = parse_amount(m.group(2))
        if price is None or not (ITEM_NAME_MIN <= len(name) <= ITEM_NAME_MAX):
            continue
        if price < total:
            items.append(LineItem(name=name, price=price))
    return items
