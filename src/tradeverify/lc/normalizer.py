from __future__ import annotations

import re
from typing import List, Tuple

# Legal forms collapse to one long form. Order matters: these run before
# punctuation is stripped so "s.a.r.l." and "p.l.c." are still recognised.
_LEGAL_FORMS: List[Tuple[re.Pattern[str], str]] = [
    (re.compile(r"\b(ltd|limited)\b", re.IGNORECASE), "limited"),
    (re.compile(r"\b(sarl|s\.a\.r\.l\.?|s\.a\.r\.l)\b", re.IGNORECASE), "sarl"),
    (re.compile(r"\b(inc|incorporated)\b", re.IGNORECASE), "incorporated"),
    (re.compile(r"\b(corp|corporation)\b", re.IGNORECASE), "corporation"),
    (re.compile(r"\b(co|company)\b", re.IGNORECASE), "company"),
    (re.compile(r"\b(plc|p\.l\.c\.?)\b", re.IGNORECASE), "plc"),
]

_PUNCTUATION = re.compile(r"[.,\-'\"()]")
_WHITESPACE = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    """Canonicalize a company name so equivalent spellings compare equal."""

    normalized = (name or "").strip().lower()
    for pattern, replacement in _LEGAL_FORMS:
        normalized = pattern.sub(replacement, normalized)
    normalized = normalized.replace("&", "and")
    normalized = _PUNCTUATION.sub("", normalized)
    normalized = _WHITESPACE.sub(" ", normalized)
    return normalized.strip()
