# File: migration_checker/utils.py
"""migration_checker.utils: small helpers for URLs, timestamps and durations."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Collection, List, Sequence
from urllib.parse import urljoin, urlparse

from migration_checker.logger import logger

__all__: Sequence[str] = (
    "get_url_path",
    "get_domain",
    "join_url",
    "utc_now_iso",
    "file_timestamp",
    "format_duration",
    "remove_duplicates",
)


def get_url_path(url: str) -> str:
    """Path plus query string of *url* (``/about?x=1``), without scheme and host."""
    parsed = urlparse(url)
    path = parsed.path or "/"
    return f"{path}?{parsed.query}" if parsed.query else path


def get_domain(url: str) -> str:
    """Host name of *url*, ``"unknown"`` when it has none."""
    return urlparse(url).hostname or "unknown"


def join_url(base_url: str, path: str) -> str:
    """Resolve *path* against *base_url* the way a browser resolves a link."""
    return urljoin(base_url, path)


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def file_timestamp() -> str:
    """Timestamp safe for file names: ``2024-05-01T12-30-00``."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")


def format_duration(ms: int) -> str:
    """Human-readable duration: ``850ms``, ``12s``, ``3m 5s``, ``1h 2m``."""
    if ms < 1000:
        return f"{ms}ms"
    seconds = ms // 1000
    if seconds < 60:
        return f"{seconds}s"
    minutes, seconds = divmod(seconds, 60)
    if minutes < 60:
        return f"{minutes}m {seconds}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
