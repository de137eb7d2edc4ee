# migration_checker/crawler/scheduler.py
"""
Bounded-concurrency runner for fetch tasks plus a small progress tracker.
"""
from __future__ import annotations

import asyncio
import time
from typing import Awaitable, Callable, List, Optional, Sequence, TypeVar

from migration_checker.logger import logger
from migration_checker.utils import format_duration

__all__ = ("run_bounded", "ProgressTracker")

T = TypeVar("T")
R = TypeVar("R")

ProgressFn = Callable[[int, int], None]


async def run_bounded(
    items: Sequence[T],
    task: Callable[[T], Awaitable[R]],
    *,
    concurrency: int,
    on_progress: Optional[ProgressFn] = None,
) -> List[R]:
    """
    Run ``task(item)`` for every item with at most *concurrency* in flight.

    Results come back in input order. A slot is taken before a task starts,
    so the cap holds by admission. Every task is allowed to settle; if any
    of them raised, the first exception in input order is re-raised after
    all others finished. There is no cancellation once started.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    semaphore = asyncio.Semaphore(concurrency)
    total = len(items)
    completed = 0

    async def _run(item: T) -> R:
        nonlocal completed
        async with semaphore:
            try:
                return await task(item)
            finally:
                completed += 1
                if on_progress is not None:
                    on_progress(completed, total)

    settled = await asyncio.gather(*(_run(item) for item in items), return_exceptions=True)
    for result in settled:
        if isinstance(result, BaseException):
            raise result
    return list(settled)  # type: ignore[arg-type]


class ProgressTracker:
    """Progress accounting for long runs; logs at most once per *interval* seconds."""

    def __init__(self, total: int, *, verbose: bool = False, interval: float = 1.0) -> None:
        self.total = total
        self.completed = 0
        self.failed = 0
        self.verbose = verbose
        self.interval = interval
        self._start = time.monotonic()
        self._last_log = 0.0

    def complete(self, success: bool = True) -> None:
        self.completed += 1
        if not success:
            self.failed += 1
        now = time.monotonic()
        if self.verbose and now - self._last_log >= self.interval:
            self.log()
            self._last_log = now

    def mark_failed(self) -> None:
        """Count a completion that should be reported as failed."""
        self.failed += 1

    def __call__(self, completed: int, total: int) -> None:
        """``on_progress`` hook for :func:`run_bounded`."""
        self.complete(True)

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self._start) * 1000)

    def _rate(self) -> float:
        seconds = self.elapsed_ms / 1000
        return self.completed / seconds if seconds > 0 else 0.0

    def log(self) -> None:
        rate = self._rate()
        remaining = self.total - self.completed
        eta_ms = int(remaining / rate * 1000) if rate > 0 and remaining > 0 else 0
        percent = round(self.completed / self.total * 100) if self.total else 100
        logger.info(
            "Progress: %d/%d (%d%%) | Failed: %d | Rate: %.1f/s | ETA: %s",
            self.completed, self.total, percent, self.failed, rate, format_duration(eta_ms),
        )

    def summary(self) -> None:
        logger.info(
            "Completed: %d/%d | Failed: %d | Duration: %s | Rate: %.1f/s",
            self.completed, self.total, self.failed, format_duration(self.elapsed_ms), self._rate(),
        )
