"""Clean up OCR replies that still carry JSON envelopes or markdown fences.

Vision models sometimes answer with ``{"text": "..."}``, a list of such
fragments, or a fenced code block instead of plain text. ``unwrap_ocr_text``
recovers the transcript on a best-effort basis and never raises.
"""

import json
import re
from typing import Any, List, Optional

from ..logging import get_logger

LOG = get_logger("sanitize")

_OBJECT_TEXT_KEYS = ("text", "content", "message")
_ARRAY_TEXT_KEYS = ("text", "content")

_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)
_LEADING_WRAPPER = re.compile(r'^\s*\{[^"]*"(?:text|content|message)"\s*:\s*"', re.IGNORECASE)
_TRAILING_WRAPPER = re.compile(r'"\s*\}\s*$')


def _try_json(s: str) -> Optional[Any]:
    try:
        return json.loads(s)
    except ValueError:
        return None


def _text_field(obj: dict, keys) -> Optional[str]:
    for key in keys:
        value = obj.get(key)
        if isinstance(value, str):
            return value
    return None


def _from_object(s: str) -> Optional[str]:
    obj = _try_json(s)
    if not isinstance(obj, dict):
        return None
    return _text_field(obj, _OBJECT_TEXT_KEYS)


def _from_array(s: str) -> Optional[str]:
    arr = _try_json(s)
    if not isinstance(arr, list):
        return None
    parts: List[str] = []
    for element in arr:
        if isinstance(element, dict):
            text = _text_field(element, _ARRAY_TEXT_KEYS)
            if text is not None:
                parts.append(text)
                continue
        if isinstance(element, str):
            parts.append(element)
        else:
            parts.append(json.dumps(element, ensure_ascii=False))
    return "\n".join(parts)


def strip_artifacts(text: str) -> str:
    """Remove code fences and half-parsed ``{"text": "...`` wrapper fragments."""
    out = _FENCE.sub("", text)
    out, leading = _LEADING_WRAPPER.subn("", out, count=1)
    trailing = 0
    # An intact JSON object keeps its closing quote and brace.
    if leading or not out.lstrip().startswith("{"):
        out, trailing = _TRAILING_WRAPPER.subn("", out, count=1)
    if leading or trailing:
        # The fragment was never JSON-decoded, so escapes are still literal.
        out = out.replace("\\n", "\n").replace('\\"', '"')
    return out.strip()


def unwrap_ocr_text(raw_text: str) -> str:
    """Return the transcript hidden inside ``raw_text``.

    Tried in order: JSON object with a text/content/message string field,
    JSON array of text fragments (joined by newlines), then plain text.
    Residual fences and wrapper fragments are stripped in every case.
    """
    text = raw_text
    stripped = raw_text.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        inner = _from_object(stripped)
        if inner is not None:
            LOG.debug("Unwrapped JSON object envelope")
            text = inner
    elif stripped.startswith("[") and stripped.endswith("]"):
        inner = _from_array(stripped)
        if inner is not None:
            LOG.debug("Unwrapped JSON array envelope")
            text = inner
    return strip_artifacts(text)
