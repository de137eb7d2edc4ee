"""migration_checker.classifier: heuristics for pages that answer 200 but are not the right page."""

from .similarity import dice_coefficient, normalize_title, titles_match
from .soft404 import DEFAULT_RULES, Soft404Result, Soft404Rules, check_soft404

__all__ = [
    "DEFAULT_RULES",
    "Soft404Result",
    "Soft404Rules",
    "check_soft404",
    "dice_coefficient",
    "normalize_title",
    "titles_match",
]
