# File: migration_checker/validation/models.py
"""migration_checker.validation.models: per-URL verdicts and the validation report."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional

IssueType = Literal[
    "not_found",
    "soft_404",
    "server_error",
    "title_mismatch",
    "redirect",
    "timeout",
    "error",
]
Status = Literal["ok", "warning", "error"]

STATUS_ORDER: Dict[str, int] = {"error": 0, "warning": 1, "ok": 2}


def escalate(current: Status, new: Status) -> Status:
    """The more severe of two statuses; a status is never downgraded."""
    return new if STATUS_ORDER[new] < STATUS_ORDER[current] else current


@dataclass(slots=True, frozen=True)
class ValidationIssue:
    type: IssueType
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type, "message": self.message}
        if self.details is not None:
            data["details"] = self.details
        return data


@dataclass(slots=True)
class ValidationRecord:
    """Verdict for one source path checked against the destination."""

    source_path: str
    source_title: Optional[str]
    destination_url: str
    destination_status_code: Optional[int]
    destination_title: Optional[str]
    status: Status
    issues: List[ValidationIssue] = field(default_factory=list)
    response_time_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourcePath": self.source_path,
            "sourceTitle": self.source_title,
            "destinationUrl": self.destination_url,
            "destinationStatusCode": self.destination_status_code,
            "destinationTitle": self.destination_title,
            "status": self.status,
            "issues": [issue.to_dict() for issue in self.issues],
            "responseTimeMs": self.response_time_ms,
        }


_ISSUE_COUNTERS: Dict[str, str] = {
    "soft_404": "soft404_count",
    "not_found": "not_found_count",
    "server_error": "server_error_count",
    "title_mismatch": "title_mismatch_count",
    "redirect": "redirect_count",
}


@dataclass(slots=True)
class ValidationSummary:
    total_urls: int = 0
    ok_urls: int = 0
    warning_urls: int = 0
    error_urls: int = 0
    soft404_count: int = 0
    not_found_count: int = 0
    server_error_count: int = 0
    title_mismatch_count: int = 0
    redirect_count: int = 0
    duration_ms: int = 0

    @classmethod
    def from_records(cls, records: Iterable[ValidationRecord], duration_ms: int) -> ValidationSummary:
        summary = cls(duration_ms=duration_ms)
        for record in records:
            summary.total_urls += 1
            if record.status == "ok":
                summary.ok_urls += 1
            elif record.status == "warning":
                summary.warning_urls += 1
            else:
                summary.error_urls += 1
            for issue in record.issues:
                counter = _ISSUE_COUNTERS.get(issue.type)
                if counter:
                    setattr(summary, counter, getattr(summary, counter) + 1)
        return summary

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalUrls": self.total_urls,
            "okUrls": self.ok_urls,
            "warningUrls": self.warning_urls,
            "errorUrls": self.error_urls,
            "soft404Count": self.soft404_count,
            "notFoundCount": self.not_found_count,
            "serverErrorCount": self.server_error_count,
            "titleMismatchCount": self.title_mismatch_count,
            "redirectCount": self.redirect_count,
            "durationMs": self.duration_ms,
        }


@dataclass(slots=True)
class ValidationReport:
    source_url: str
    destination_url: str
    summary: ValidationSummary
    results: List[ValidationRecord]
    validated_at: str
    config: Dict[str, Any] = field(default_factory=dict)

    @property
    def errors(self) -> List[ValidationRecord]:
        return [r for r in self.results if r.status == "error"]

    @property
    def warnings(self) -> List[ValidationRecord]:
        return [r for r in self.results if r.status == "warning"]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceUrl": self.source_url,
            "destinationUrl": self.destination_url,
            "summary": self.summary.to_dict(),
            "results": [r.to_dict() for r in self.results],
            "validatedAt": self.validated_at,
            "config": self.config,
        }
