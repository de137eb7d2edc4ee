"""migration_checker.validation: destination checks for crawled source paths."""

from .models import ValidationIssue, ValidationRecord, ValidationReport, ValidationSummary
from .validator import MigrationValidator

__all__ = [
    "MigrationValidator",
    "ValidationIssue",
    "ValidationRecord",
    "ValidationReport",
    "ValidationSummary",
]
