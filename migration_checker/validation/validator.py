# File: migration_checker/validation/validator.py
"""
Checks every crawled source path against the destination site.

Each path gets one :class:`ValidationRecord`. Checks run in a fixed order
and may only raise the status (ok → warning → error), never lower it.
"""

from __future__ import annotations

import logging
import time
from typing import List, Optional
from urllib.parse import urlparse

from migration_checker.classifier.similarity import titles_match
from migration_checker.classifier.soft404 import DEFAULT_RULES, Soft404Rules, check_soft404
from migration_checker.config import ValidatorConfig
from migration_checker.crawler.fetcher import Fetcher, create_fetcher
from migration_checker.crawler.models import CrawlOutput, CrawlRecord, FetchOptions
from migration_checker.crawler.scheduler import ProgressTracker, run_bounded
from migration_checker.logger import logger
from migration_checker.parser.html_parser import extract_body_text, extract_title
from migration_checker.utils import join_url, utc_now_iso
from migration_checker.validation.models import (
    STATUS_ORDER,
    Status,
    ValidationIssue,
    ValidationRecord,
    ValidationReport,
    ValidationSummary,
    escalate,
)

__all__ = ("MigrationValidator", "VALIDATION_RETRIES")

VALIDATION_RETRIES = 1


class MigrationValidator:
    """Validates crawl records against ``config.destination_url``."""

    def __init__(
        self,
        config: ValidatorConfig,
        fetcher: Optional[Fetcher] = None,
        rules: Soft404Rules = DEFAULT_RULES,
    ) -> None:
        self.config = config
        self.fetcher = fetcher or create_fetcher(config.renderer, renderer_url=config.flaresolverr_url)
        self.rules = rules
        self._url_level = logging.INFO if config.verbose else logging.DEBUG

    async def __aenter__(self) -> MigrationValidator:
        await self.fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.fetcher.__aexit__(exc_type, exc, tb)

    async def validate(self, crawl: CrawlOutput) -> ValidationReport:
        """Validate every record of *crawl*; results are sorted error-first."""
        cfg = self.config
        logger.info("Source: %s", crawl.source_url)
        logger.info("Destination: %s", cfg.destination_url)
        logger.info("URLs to validate: %d", len(crawl.urls))

        start = time.monotonic()
        tracker = ProgressTracker(len(crawl.urls), verbose=cfg.verbose)

        async def _task(record: CrawlRecord) -> ValidationRecord:
            result = await self.validate_path(record.path, record.title)
            if result.status == "error":
                tracker.mark_failed()
            return result

        results: List[ValidationRecord] = await run_bounded(
            crawl.urls, _task, concurrency=cfg.concurrency, on_progress=tracker
        )
        tracker.summary()

        duration_ms = int((time.monotonic() - start) * 1000)
        results.sort(key=lambda r: STATUS_ORDER[r.status])
        return ValidationReport(
            source_url=crawl.source_url,
            destination_url=cfg.destination_url,
            summary=ValidationSummary.from_records(results, duration_ms),
            results=results,
            validated_at=utc_now_iso(),
            config=cfg.to_json_dict(),
        )

    async def validate_path(self, path: str, source_title: Optional[str]) -> ValidationRecord:
        """Fetch ``destination_url + path`` and classify what came back."""
        dest_url = join_url(self.config.destination_url, path)
        outcome = await self.fetcher.fetch(
            dest_url,
            FetchOptions(
                timeout_ms=self.config.timeout,
                max_retries=VALIDATION_RETRIES,
                follow_redirects=True,
            ),
        )

        if not outcome.ok:
            issue = ValidationIssue(
                "error", outcome.error or "Unknown error", {"failure": outcome.error_kind}
            )
            record = ValidationRecord(
                source_path=path,
                source_title=source_title,
                destination_url=dest_url,
                destination_status_code=None,
                destination_title=None,
                status="error",
                issues=[issue],
                response_time_ms=outcome.response_time_ms,
            )
            self._log(record)
            return record

        issues: List[ValidationIssue] = []
        status: Status = "ok"
        code = outcome.status_code

        if code == 404:
            issues.append(ValidationIssue("not_found", "404 Not Found"))
            status = escalate(status, "error")

        if 500 <= code < 600:
            issues.append(ValidationIssue("server_error", f"Server error: {code}"))
            status = escalate(status, "error")

        if outcome.was_redirected:
            final_path = urlparse(outcome.final_url).path or "/"
            if (urlparse(dest_url).path or "/") != final_path:
                issues.append(
                    ValidationIssue(
                        "redirect",
                        f"Redirected to: {final_path}",
                        {"finalUrl": outcome.final_url},
                    )
                )
                if self.config.redirect_handling == "warning":
                    status = escalate(status, "warning")

        dest_title = extract_title(outcome.body)

        if 200 <= code < 300:
            check = check_soft404(extract_body_text(outcome.body), dest_title, code, self.rules)
            if check.is_soft404:
                issues.append(
                    ValidationIssue(
                        "soft_404",
                        f"Soft 404 detected ({round(check.confidence * 100)}% confidence)",
                        {"reasons": check.reasons},
                    )
                )
                status = escalate(status, "error")

        if source_title and dest_title and status != "error":
            if not titles_match(source_title, dest_title):
                issues.append(
                    ValidationIssue(
                        "title_mismatch",
                        f'Title mismatch: "{source_title}" vs "{dest_title}"',
                        {"sourceTitle": source_title, "destinationTitle": dest_title},
                    )
                )
                status = escalate(status, "warning")

        record = ValidationRecord(
            source_path=path,
            source_title=source_title,
            destination_url=dest_url,
            destination_status_code=code,
            destination_title=dest_title,
            status=status,
            issues=issues,
            response_time_ms=outcome.response_time_ms,
        )
        self._log(record)
        return record

    def _log(self, record: ValidationRecord) -> None:
        code = record.destination_status_code
        logger.log(
            self._url_level,
            "%s [%s] %s%s",
            record.status.upper(),
            code if code else "ERR",
            record.source_path,
            f" - {', '.join(i.type for i in record.issues)}" if record.issues else "",
        )
