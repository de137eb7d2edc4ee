"""migration_checker.crawler: fetch strategies, bounded scheduler and breadth-first traversal."""

from .crawler import CrawlRun, SiteCrawler
from .fetcher import DirectFetcher, Fetcher, RenderingFetcher, create_fetcher
from .models import CrawlOutput, CrawlRecord, CrawlStats, FetchOptions, FetchOutcome, FrontierItem
from .scheduler import ProgressTracker, run_bounded

__all__ = [
    "CrawlOutput",
    "CrawlRecord",
    "CrawlRun",
    "CrawlStats",
    "DirectFetcher",
    "FetchOptions",
    "FetchOutcome",
    "Fetcher",
    "FrontierItem",
    "ProgressTracker",
    "RenderingFetcher",
    "SiteCrawler",
    "create_fetcher",
    "run_bounded",
]
