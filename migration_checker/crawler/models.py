# migration_checker/crawler/models.py
"""
Data models for the migration_checker crawler and fetch layer.

The ``to_dict`` / ``from_dict`` helpers produce and read the camelCase
field names of the persisted crawl artifact.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Mapping, Optional, Union

FailureKind = Literal["timeout", "transport", "renderer"]

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (compatible; MigrationChecker/1.0; "
        "+https://github.com/migration-checker/migration-checker)"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


@dataclass(slots=True)
class FetchOptions:
    """Per-call fetch settings. ``timeout_ms == 0`` disables the deadline."""

    timeout_ms: int = 10_000
    max_retries: int = 2
    follow_redirects: bool = True
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True, frozen=True)
class FetchOutcome:
    """Result of one logical fetch, after retries are exhausted.

    Either ``error`` is set and ``status_code`` is 0, or the HTTP fields
    are populated.
    """

    status_code: int
    body: str
    final_url: str
    was_redirected: bool
    response_time_ms: int
    error: Optional[str] = None
    error_kind: Optional[FailureKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(
        cls, url: str, message: str, kind: FailureKind, response_time_ms: int = 0
    ) -> FetchOutcome:
        return cls(
            status_code=0,
            body="",
            final_url=url,
            was_redirected=False,
            response_time_ms=response_time_ms,
            error=message,
            error_kind=kind,
        )


@dataclass(slots=True, frozen=True)
class Success:
    """A single attempt that produced an HTTP response."""

    outcome: FetchOutcome


@dataclass(slots=True, frozen=True)
class Failure:
    """A single attempt that produced no HTTP response."""

    kind: FailureKind
    message: str
    response_time_ms: int = 0


AttemptResult = Union[Success, Failure]


@dataclass(slots=True, frozen=True)
class FrontierItem:
    """A discovered URL waiting in the frontier."""

    url: str
    depth: int
    discovered_from: Optional[str] = None


@dataclass(slots=True, frozen=True)
class CrawlRecord:
    """One visited URL. ``status_code`` 0 means the request never got a response."""

    url: str
    path: str
    title: Optional[str]
    status_code: int
    depth: int
    discovered_from: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "path": self.path,
            "title": self.title,
            "statusCode": self.status_code,
            "depth": self.depth,
            "discoveredFrom": self.discovered_from,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CrawlRecord:
        return cls(
            url=data["url"],
            path=data["path"],
            title=data.get("title"),
            status_code=int(data.get("statusCode", 0)),
            depth=int(data.get("depth", 0)),
            discovered_from=data.get("discoveredFrom"),
        )


@dataclass(slots=True)
class CrawlStats:
    total_urls: int = 0
    successful_crawls: int = 0
    failed_crawls: int = 0
    skipped_due_to_depth: int = 0
    skipped_due_to_exclude: int = 0
    duration_ms: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "totalUrls": self.total_urls,
            "successfulCrawls": self.successful_crawls,
            "failedCrawls": self.failed_crawls,
            "skippedDueToDepth": self.skipped_due_to_depth,
            "skippedDueToExclude": self.skipped_due_to_exclude,
            "durationMs": self.duration_ms,
        }


@dataclass(slots=True)
class CrawlOutput:
    """The crawl artifact: every visited URL plus run statistics."""

    source_url: str
    urls: List[CrawlRecord]
    stats: CrawlStats
    crawled_at: str
    config: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sourceUrl": self.source_url,
            "urls": [record.to_dict() for record in self.urls],
            "stats": self.stats.to_dict(),
            "crawledAt": self.crawled_at,
            "config": self.config,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CrawlOutput:
        raw_stats = data.get("stats", {})
        stats = CrawlStats(
            total_urls=raw_stats.get("totalUrls", 0),
            successful_crawls=raw_stats.get("successfulCrawls", 0),
            failed_crawls=raw_stats.get("failedCrawls", 0),
            skipped_due_to_depth=raw_stats.get("skippedDueToDepth", 0),
            skipped_due_to_exclude=raw_stats.get("skippedDueToExclude", 0),
            duration_ms=raw_stats.get("durationMs", 0),
        )
        return cls(
            source_url=data["sourceUrl"],
            urls=[CrawlRecord.from_dict(item) for item in data.get("urls", [])],
            stats=stats,
            crawled_at=data.get("crawledAt", ""),
            config=dict(data.get("config", {})),
        )
