# === FILE: migration_checker/crawler/crawler.py ===
"""
Breadth-first link discovery over the source site.

The frontier is a FIFO of :class:`FrontierItem`; it is consumed in rounds of
up to ``2 * concurrency`` items which are filtered (visited, depth, exclude),
marked visited and fetched concurrently. Children are enqueued after the
round at ``parent.depth + 1``, so depth never decreases along the frontier.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional, Pattern, Set, Tuple

from migration_checker.config import CrawlerConfig
from migration_checker.crawler.fetcher import Fetcher, create_fetcher
from migration_checker.crawler.models import (
    CrawlOutput,
    CrawlRecord,
    CrawlStats,
    FetchOptions,
    FrontierItem,
)
from migration_checker.crawler.scheduler import run_bounded
from migration_checker.crawler.urls import (
    compile_patterns,
    filter_internal_links,
    is_excluded,
    normalize_url,
)
from migration_checker.logger import logger
from migration_checker.parser.html_parser import parse_html
from migration_checker.utils import get_url_path, utc_now_iso

__all__ = ("SiteCrawler", "CrawlRun")

# Retries for the direct strategy while crawling; validation uses 1.
CRAWL_RETRIES = 2

_Visit = Tuple[CrawlRecord, List[str]]


@dataclass
class CrawlRun:
    """Mutable state of a single crawl. Created per :meth:`SiteCrawler.crawl` call."""

    source_url: str
    frontier: Deque[FrontierItem] = field(default_factory=deque)
    visited: Set[str] = field(default_factory=set)
    records: List[CrawlRecord] = field(default_factory=list)
    stats: CrawlStats = field(default_factory=CrawlStats)

    def take_batch(self, size: int) -> List[FrontierItem]:
        count = min(size, len(self.frontier))
        return [self.frontier.popleft() for _ in range(count)]


class SiteCrawler:
    """Асинхронный BFS-краулер исходного сайта: ограниченная конкурентность, без robots.txt."""

    def __init__(self, config: CrawlerConfig, fetcher: Optional[Fetcher] = None) -> None:
        self.config = config
        self.fetcher = fetcher or create_fetcher(config.renderer, renderer_url=config.flaresolverr_url)
        self._patterns: List[Pattern[str]] = compile_patterns(config.exclude_patterns)
        self._url_level = logging.INFO if config.verbose else logging.DEBUG

    async def __aenter__(self) -> SiteCrawler:
        await self.fetcher.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.fetcher.__aexit__(exc_type, exc, tb)

    async def crawl(self) -> CrawlOutput:
        cfg = self.config
        logger.info("Starting crawl of: %s", cfg.source_url)
        logger.info(
            "Max depth: %d | Concurrency: %d | Renderer: %s",
            cfg.max_depth, cfg.concurrency, cfg.renderer,
        )
        start = time.monotonic()

        run = CrawlRun(source_url=cfg.source_url)
        run.frontier.append(FrontierItem(normalize_url(cfg.source_url), 0, None))

        while run.frontier:
            batch = self._admit(run, run.take_batch(cfg.concurrency * 2))
            if not batch:
                continue

            logger.debug("Processing batch of %d URLs...", len(batch))
            visits = await run_bounded(batch, self._visit, concurrency=cfg.concurrency)

            for item, (record, links) in zip(batch, visits):
                self._record(run, item, record, links)

            logger.info(
                "Crawled: %d | Queue: %d | Visited: %d",
                len(run.records), len(run.frontier), len(run.visited),
            )

        run.stats.total_urls = len(run.records)
        run.stats.duration_ms = int((time.monotonic() - start) * 1000)
        logger.info(
            "Crawl complete: %d URLs (%d ok, %d failed)",
            run.stats.total_urls, run.stats.successful_crawls, run.stats.failed_crawls,
        )
        return CrawlOutput(
            source_url=cfg.source_url,
            urls=run.records,
            stats=run.stats,
            crawled_at=utc_now_iso(),
            config=cfg.to_json_dict(),
        )

    def _admit(self, run: CrawlRun, batch: List[FrontierItem]) -> List[FrontierItem]:
        """Filter a batch in order: visited, depth, exclusion. Survivors become visited."""
        admitted: List[FrontierItem] = []
        for item in batch:
            url = normalize_url(item.url)
            if url in run.visited:
                continue
            if item.depth > self.config.max_depth:
                run.stats.skipped_due_to_depth += 1
                continue
            if is_excluded(url, self._patterns):
                run.stats.skipped_due_to_exclude += 1
                logger.log(self._url_level, "Excluding: %s", url)
                continue
            run.visited.add(url)
            admitted.append(item)
        return admitted

    async def _visit(self, item: FrontierItem) -> _Visit:
        """Fetch one admitted URL. Runs inside the scheduler; touches no run state."""
        cfg = self.config
        outcome = await self.fetcher.fetch(
            item.url,
            FetchOptions(timeout_ms=cfg.timeout, max_retries=CRAWL_RETRIES),
        )
        if cfg.delay > 0:
            await asyncio.sleep(cfg.delay / 1000)

        if not outcome.ok:
            record = CrawlRecord(
                url=item.url,
                path=get_url_path(item.url),
                title=None,
                status_code=outcome.status_code,
                depth=item.depth,
                discovered_from=item.discovered_from,
            )
            return record, []

        page = parse_html(outcome.body, outcome.final_url)
        record = CrawlRecord(
            url=outcome.final_url,
            path=get_url_path(outcome.final_url),
            title=page.title,
            status_code=outcome.status_code,
            depth=item.depth,
            discovered_from=item.discovered_from,
        )
        return record, filter_internal_links(page.links, cfg.source_url)

    def _record(self, run: CrawlRun, item: FrontierItem, record: CrawlRecord, links: List[str]) -> None:
        run.records.append(record)
        if 200 <= record.status_code < 300:
            run.stats.successful_crawls += 1
        else:
            run.stats.failed_crawls += 1

        for link in links:
            if link not in run.visited:
                run.frontier.append(FrontierItem(link, item.depth + 1, record.url))

        logger.log(
            self._url_level,
            "%s [%d] %s (%d links, depth: %d)",
            "OK" if record.status_code == 200 else "FAIL",
            record.status_code, record.path, len(links), record.depth,
        )
