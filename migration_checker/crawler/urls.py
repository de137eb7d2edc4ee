# migration_checker/crawler/urls.py
"""
URL normalization and link policy for the crawler.

Two URLs that differ only in fragment, a trailing slash, query-parameter
order or scheme/host case are the same node of the crawl graph.
"""
from __future__ import annotations

import re
from typing import Iterable, List, Pattern, Sequence
from urllib.parse import urlparse, urlunparse

from migration_checker.utils import remove_duplicates

__all__ = (
    "normalize_url",
    "site_host",
    "is_same_site",
    "filter_internal_links",
    "compile_patterns",
    "is_excluded",
)


def normalize_url(url: str) -> str:
    """
    Canonical form of *url* for dedup and comparison.

    Drops the fragment, strips trailing slashes from non-root paths,
    sorts the raw query segments (never re-encoded) and lowercases
    scheme and host. Idempotent.
    Input that is not an absolute http(s)-like URL is returned unchanged.
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return url
    if not parsed.scheme or not parsed.netloc:
        return url

    # all trailing slashes go, so the result is a fixed point
    path = parsed.path.rstrip("/") or "/"

    # segments stay percent-encoded as sent; only their order changes
    query = "&".join(sorted(segment for segment in parsed.query.split("&") if segment))

    return urlunparse((parsed.scheme.lower(), parsed.netloc.lower(), path, parsed.params, query, ""))


def site_host(url: str) -> str:
    """Host of *url* with a leading ``www.`` removed, for same-site comparison."""
    host = (urlparse(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def is_same_site(url: str, source_url: str) -> bool:
    """True when *url* lives on the source site (``www.`` is ignored on both sides)."""
    return site_host(url) == site_host(source_url)


def filter_internal_links(links: Iterable[str], source_url: str) -> List[str]:
    """Normalized, deduplicated links that point to the source site."""
    return remove_duplicates(
        [normalize_url(link) for link in links if is_same_site(link, source_url)]
    )


def compile_patterns(patterns: Sequence[str]) -> List[Pattern[str]]:
    return [re.compile(p, re.IGNORECASE) for p in patterns]


def is_excluded(url: str, patterns: Sequence[Pattern[str]]) -> bool:
    return any(p.search(url) for p in patterns)
