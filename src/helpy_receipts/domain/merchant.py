from typing import Iterable, List, Optional, Sequence, Tuple
import re
import unicodedata

from ..logging import get_logger
from .models import MERCHANT_MAX_LENGTH, UNKNOWN_MERCHANT

LOG = get_logger("merchant")

# Bars for replacing the OCR guess with a confirmed household merchant.
# Overriding a real read needs a closer match than filling in "Unknown".
SNAP_THRESHOLD_WITH_GUESS = 0.78
SNAP_THRESHOLD_WITHOUT_GUESS = 0.70
SNAP_CANDIDATE_LINES = 3

# Lines that look like codes, links, dates, prices or JSON rather than a store name.
_CODE_PATTERNS = (
    re.compile(r"^[A-Z0-9]{10,}$"),
    re.compile(r"^https?://"),
    re.compile(r"^\d{4}[/\-]\d{1,2}[/\-]\d{1,2}"),
    re.compile(r"^[#*]\s*"),
    re.compile(r"^[A-Z]{2,}\s*\d+"),
    re.compile(r"^\$\d+"),
    re.compile(r'^\{.*"text"'),
)
_MOSTLY_NUMBERS = re.compile(r"^\d+[\s\d]*$")
_SYMBOL = re.compile(r"[^a-zA-Z0-9\s\u4e00-\u9fff]")
_PHRASE_SEPARATOR = re.compile(r"[\n,，。\-\s]{2,}")
_NON_ALNUM = re.compile(r"[\W_]+")


def text_lines(text: str) -> List[str]:
    """Split text into trimmed, non-empty lines."""
    return [ln.strip() for ln in (text or "").split("\n") if ln.strip()]


def _is_noise(line: str) -> bool:
    if len(line) < 3:
        return True
    if any(p.search(line) for p in _CODE_PATTERNS):
        return True
    if _MOSTLY_NUMBERS.match(line):
        return True
    return len(_SYMBOL.findall(line)) > len(line) * 0.5


def first_phrase(line: str) -> str:
    """Return the text before the first run of separators, capped to the merchant length."""
    return _PHRASE_SEPARATOR.split(line)[0].strip()[:MERCHANT_MAX_LENGTH].strip()


def extract_merchant(lines: Sequence[str]) -> str:
    """Guess the merchant from the first line that reads like a name.

    Falls back to the first line's first phrase, then to "Unknown".
    """
    for line in lines:
        if _is_noise(line):
            continue
        phrase = first_phrase(line)
        if phrase:
            return phrase
    if lines:
        phrase = first_phrase(lines[0])
        if phrase:
            LOG.debug(f"No clean merchant line; falling back to first line: {phrase!r}")
            return phrase
    return UNKNOWN_MERCHANT


def normalize_merchant_name(name: str) -> str:
    """Lowercase and collapse every non-alphanumeric run to a single space."""
    nfc = unicodedata.normalize("NFC", name or "")
    return _NON_ALNUM.sub(" ", nfc.lower()).strip()


def levenshtein(a: str, b: str) -> int:
    """Edit distance where swapping two adjacent characters counts as one edit.

    OCR often transposes neighbouring letters ("Strabucks"), which plain
    Levenshtein would charge twice.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)
    la, lb = len(a), len(b)
    prev2: List[int] = []
    prev = list(range(lb + 1))
    for i in range(1, la + 1):
        cur = [i] + [0] * lb
        ai = a[i - 1]
        for j in range(1, lb + 1):
            cost = 0 if ai == b[j - 1] else 1
            cur[j] = min(cur[j - 1] + 1, prev[j] + 1, prev[j - 1] + cost)
            if i > 1 and j > 1 and ai == b[j - 2] and a[i - 2] == b[j - 1]:
                cur[j] = min(cur[j], prev2[j - 2] + 1)
        prev2, prev = prev, cur
    return prev[lb]


def similarity(a: str, b: str) -> float:
    """Return 1 - distance / longest length of the normalized names, in [0, 1]."""
    na, nb = normalize_merchant_name(a), normalize_merchant_name(b)
    longest = max(len(na), len(nb))
    if not na or not nb:
        return 0.0
    return 1.0 - levenshtein(na, nb) / longest


def _best_pair(candidates: Iterable[str], known: Iterable[str]) -> Tuple[float, Optional[str], Optional[str]]:
    best: Tuple[float, Optional[str], Optional[str]] = (0.0, None, None)
    known_list = [k.strip() for k in known if isinstance(k, str) and k.strip()]
    for cand in candidates:
        for k in known_list:
            score = similarity(cand, k)
            if score > best[0]:
                best = (score, cand, k)
    return best


def match_known_merchant(
    guess: str,
    lines: Sequence[str],
    known_merchants: Optional[Sequence[str]],
) -> Optional[str]:
    """Return the confirmed merchant that best matches the receipt, if close enough.

    Candidates are the OCR guess plus the first few lines. The single best
    (candidate, known) pair must beat SNAP_THRESHOLD_WITH_GUESS when OCR found
    a merchant, or SNAP_THRESHOLD_WITHOUT_GUESS when it found nothing.
    """
    if not known_merchants:
        return None
    has_guess = bool(guess) and guess != UNKNOWN_MERCHANT
    candidates: List[str] = [guess] if has_guess else []
    candidates.extend(lines[:SNAP_CANDIDATE_LINES])
    score, cand, known = _best_pair(candidates, known_merchants)
    threshold = SNAP_THRESHOLD_WITH_GUESS if has_guess else SNAP_THRESHOLD_WITHOUT_GUESS
    if known is None or score <= threshold:
        LOG.debug(f"No known merchant above {threshold:.2f} (best={score:.3f} for {cand!r})")
        return None
    LOG.debug(f"Known merchant match: {cand!r} -> {known!r} (score={score:.3f})")
    return known[:MERCHANT_MAX_LENGTH].strip()
