# File: migration_checker/classifier/similarity.py
"""migration_checker.classifier.similarity: title comparison between source and destination."""

from __future__ import annotations

import re
from collections import Counter
from typing import Optional

__all__ = ("normalize_title", "dice_coefficient", "titles_match", "SIMILARITY_THRESHOLD")

SIMILARITY_THRESHOLD = 0.8

_WS_RE = re.compile(r"\s+")
_PUNCT_RE = re.compile(r"[^\w\s]")


def normalize_title(title: str) -> str:
    """Lowercase, collapse whitespace, drop punctuation."""
    return _PUNCT_RE.sub("", _WS_RE.sub(" ", title.lower())).strip()


def dice_coefficient(a: str, b: str) -> float:
    """Sørensen–Dice coefficient over character bigrams (multiset intersection)."""
    if a == b:
        return 1.0
    if len(a) < 2 or len(b) < 2:
        return 0.0
    left = Counter(a[i : i + 2] for i in range(len(a) - 1))
    right = Counter(b[i : i + 2] for i in range(len(b) - 1))
    shared = sum((left & right).values())
    return 2.0 * shared / (len(a) + len(b) - 2)


def titles_match(source: Optional[str], destination: Optional[str]) -> bool:
    """
    True when two page titles name the same page: equal after normalization,
    one containing the other (an appended site name), or Dice > 0.8.
    Two missing titles match; exactly one missing does not.
    """
    if not source and not destination:
        return True
    if not source or not destination:
        return False

    a = normalize_title(source)
    b = normalize_title(destination)
    if a == b or a in b or b in a:
        return True
    return dice_coefficient(a, b) > SIMILARITY_THRESHOLD
