# File: migration_checker/classifier/soft404.py
"""migration_checker.classifier.soft404: detection of error pages served with HTTP 200.

Scoring is table-driven: :class:`Soft404Rules` holds the ordered pattern lists,
the weights and the thresholds, so the table can be tuned or replaced
without touching :func:`check_soft404`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import List, Optional, Pattern, Sequence, Tuple

__all__ = (
    "Soft404Result",
    "Soft404Rules",
    "DEFAULT_RULES",
    "TITLE_ERROR_PATTERNS",
    "BODY_ERROR_PATTERNS",
    "check_soft404",
)

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


def _compile(patterns: Sequence[str]) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


TITLE_ERROR_PATTERNS: Tuple[Pattern[str], ...] = _compile(
    (
        r"404",
        r"not\s*found",
        r"page\s*not\s*found",
        r"error",
        r"missing",
        r"oops",
    )
)

BODY_ERROR_PATTERNS: Tuple[Pattern[str], ...] = _compile(
    (
        r"page\s*not\s*found",
        r"404\s*(error)?",
        r"not\s*found",
        r"doesn'?t\s*exist",
        r"does\s*not\s*exist",
        r"no\s*longer\s*(available|exists?)",
        r"cannot\s*be\s*found",
        r"could\s*not\s*(be\s*)?found",
        r"we\s*couldn'?t\s*find",
        r"page\s*(you('?re)?\s*(looking\s*for\s*)?)?is\s*missing",
        r"this\s*page\s*(has\s*been\s*)?(moved|removed|deleted)",
        r"oops",
        r"sorry.*page",
        r"nothing\s*(here|found)",
    )
)


@dataclass(frozen=True)
class Soft404Rules:
    """Weights and pattern tables for soft-404 scoring."""

    title_patterns: Tuple[Pattern[str], ...] = TITLE_ERROR_PATTERNS
    body_patterns: Tuple[Pattern[str], ...] = BODY_ERROR_PATTERNS
    title_weight: float = 0.4
    body_base_weight: float = 0.3
    body_per_match_weight: float = 0.1
    body_max_weight: float = 0.5
    min_content_length: int = 500
    short_content_weight: float = 0.2
    min_text_length: int = 100
    little_text_weight: float = 0.3
    threshold: float = 0.5

    def with_extra_patterns(
        self, *, title: Sequence[str] = (), body: Sequence[str] = ()
    ) -> Soft404Rules:
        """Copy of the rules with additional title/body patterns appended."""
        return replace(
            self,
            title_patterns=self.title_patterns + _compile(title),
            body_patterns=self.body_patterns + _compile(body),
        )


DEFAULT_RULES = Soft404Rules()


@dataclass(slots=True)
class Soft404Result:
    is_soft404: bool
    confidence: float
    reasons: List[str] = field(default_factory=list)


def check_soft404(
    body: str,
    title: Optional[str],
    status_code: int,
    rules: Soft404Rules = DEFAULT_RULES,
) -> Soft404Result:
    """Score *body*/*title* of a response; only status 200 is ever flagged.

    A real 404 (or any other non-200 code) returns confidence 0 with no reasons.
    """
    if status_code != 200:
        return Soft404Result(False, 0.0, [])

    reasons: List[str] = []
    score = 0.0

    if title and any(p.search(title) for p in rules.title_patterns):
        score += rules.title_weight
        reasons.append(f'Title matches error pattern: "{title}"')

    body_lower = body.lower()
    body_matches = sum(1 for p in rules.body_patterns if p.search(body_lower))
    if body_matches:
        score += min(
            rules.body_base_weight + rules.body_per_match_weight * body_matches,
            rules.body_max_weight,
        )
        reasons.append("Body contains error indicator")

    content_length = len(body)
    if content_length < rules.min_content_length:
        score += rules.short_content_weight
        reasons.append(f"Short content length: {content_length} chars")

    text = _WS_RE.sub(" ", _TAG_RE.sub("", body)).strip()
    if len(text) < rules.min_text_length:
        score += rules.little_text_weight
        reasons.append(f"Very little text content: {len(text)} chars")

    confidence = min(round(score, 6), 1.0)
    return Soft404Result(confidence >= rules.threshold, confidence, reasons)
