# migration_checker/crawler/fetcher.py
"""
Fetcher module: one logical "get this URL" call with timeout, retry/backoff
and two interchangeable strategies.

* :class:`DirectFetcher` talks HTTP itself (aiohttp).
* :class:`RenderingFetcher` hands the URL to a FlareSolverr-compatible
  headless-browser proxy and translates its JSON envelope.

Both return a :class:`FetchOutcome` and never raise for network problems.
"""
from __future__ import annotations

import asyncio
import json
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from aiohttp import ClientError, ClientSession, ClientTimeout

from migration_checker.config import DEFAULT_FLARESOLVERR_URL, RENDERER_TIMEOUT_MS
from migration_checker.crawler.models import (
    DEFAULT_HEADERS,
    AttemptResult,
    Failure,
    FetchOptions,
    FetchOutcome,
    Success,
)
from migration_checker.logger import logger

__all__ = (
    "Fetcher",
    "DirectFetcher",
    "RenderingFetcher",
    "create_fetcher",
    "backoff_delay",
)

SleepFn = Callable[[float], Awaitable[Any]]


def backoff_delay(attempt: int) -> float:
    """Seconds to wait after failed attempt number *attempt* (linear, capped at 3 s)."""
    return min(1000 * attempt, 3000) / 1000


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


def _client_timeout(timeout_ms: int) -> ClientTimeout:
    return ClientTimeout(total=timeout_ms / 1000 if timeout_ms else None)


def _valid_solution(solution: Any) -> bool:
    """A rendered page needs a real HTTP status; url and response are optional strings."""
    if not isinstance(solution, dict):
        return False
    status = solution.get("status")
    if isinstance(status, bool) or not isinstance(status, int) or status <= 0:
        return False
    return all(
        solution.get(key) is None or isinstance(solution.get(key), str)
        for key in ("url", "response")
    )


class Fetcher:
    """Base class: owns the aiohttp session, subclasses implement :meth:`fetch`."""

    def __init__(self, session: Optional[ClientSession] = None) -> None:
        self.session = session
        self._owns_session = session is None

    async def __aenter__(self) -> Fetcher:
        if self.session is None:
            self.session = ClientSession(raise_for_status=False)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._owns_session and self.session and not self.session.closed:
            await self.session.close()

    def _require_session(self) -> ClientSession:
        if not self.session:
            raise RuntimeError("Session not initialized")
        return self.session

    async def fetch(self, url: str, options: Optional[FetchOptions] = None) -> FetchOutcome:
        raise NotImplementedError


class DirectFetcher(Fetcher):
    """Plain HTTP GET with per-attempt deadline and linear backoff between retries."""

    def __init__(
        self,
        session: Optional[ClientSession] = None,
        *,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        super().__init__(session)
        self._sleep = sleep

    async def fetch(self, url: str, options: Optional[FetchOptions] = None) -> FetchOutcome:
        """
        Fetch *url*. A timeout ends the attempt sequence at once; any other
        failure is retried ``options.max_retries`` more times.
        """
        opts = options or FetchOptions()
        attempt = 0
        last: Optional[Failure] = None
        while attempt <= opts.max_retries:
            attempt += 1
            result = await self._attempt(url, opts)
            if isinstance(result, Success):
                return result.outcome
            last = result
            if result.kind == "timeout":
                return FetchOutcome.failed(url, result.message, "timeout", result.response_time_ms)
            if attempt <= opts.max_retries:
                delay = backoff_delay(attempt)
                logger.debug(
                    "Retry %d/%d for %s after %.1f s: %s",
                    attempt, opts.max_retries, url, delay, result.message,
                )
                await self._sleep(delay)

        message = last.message if last else "Unknown error"
        logger.warning("Failed %s: %s", url, message)
        return FetchOutcome.failed(url, message, "transport")

    async def _attempt(self, url: str, opts: FetchOptions) -> AttemptResult:
        session = self._require_session()
        headers = {**DEFAULT_HEADERS, **opts.headers}
        start = time.monotonic()
        try:
            async with session.get(
                url,
                headers=headers,
                allow_redirects=opts.follow_redirects,
                timeout=_client_timeout(opts.timeout_ms),
            ) as resp:
                body = await resp.text(errors="replace")
                return Success(
                    FetchOutcome(
                        status_code=resp.status,
                        body=body,
                        final_url=str(resp.url),
                        was_redirected=bool(resp.history),
                        response_time_ms=_elapsed_ms(start),
                    )
                )
        except asyncio.TimeoutError:
            return Failure("timeout", f"Request timeout after {opts.timeout_ms}ms", _elapsed_ms(start))
        except ClientError as exc:
            return Failure("transport", str(exc) or type(exc).__name__, _elapsed_ms(start))


class RenderingFetcher(Fetcher):
    """
    Delegated rendering through a FlareSolverr-compatible proxy.

    Exactly one attempt per call: the proxy already drives a full browser,
    so local retries would multiply a very slow operation.
    """

    def __init__(
        self,
        endpoint: str = DEFAULT_FLARESOLVERR_URL,
        session: Optional[ClientSession] = None,
    ) -> None:
        super().__init__(session)
        self.endpoint = endpoint

    async def fetch(self, url: str, options: Optional[FetchOptions] = None) -> FetchOutcome:
        timeout_ms = options.timeout_ms if options else RENDERER_TIMEOUT_MS
        session = self._require_session()
        payload = {"cmd": "request.get", "url": url, "maxTimeout": timeout_ms}
        start = time.monotonic()
        try:
            async with session.post(
                self.endpoint,
                json=payload,
                headers={"Content-Type": "application/json"},
                # proxy-side budget plus slack for its own envelope
                timeout=_client_timeout(timeout_ms + 5000 if timeout_ms else 0),
            ) as resp:
                if resp.status < 200 or resp.status >= 300:
                    return FetchOutcome.failed(
                        url, f"FlareSolverr HTTP error: {resp.status}", "renderer", _elapsed_ms(start)
                    )
                data: Dict[str, Any] = await resp.json(content_type=None)
        except asyncio.TimeoutError:
            return FetchOutcome.failed(
                url, f"Request timeout after {timeout_ms}ms", "timeout", _elapsed_ms(start)
            )
        except (ClientError, json.JSONDecodeError) as exc:
            return FetchOutcome.failed(
                url, str(exc) or "FlareSolverr request failed", "renderer", _elapsed_ms(start)
            )

        elapsed = _elapsed_ms(start)
        if not isinstance(data, dict) or data.get("status") != "ok":
            message = data.get("message", "") if isinstance(data, dict) else "malformed response"
            return FetchOutcome.failed(url, f"FlareSolverr error: {message}", "renderer", elapsed)

        solution = data.get("solution")
        if not _valid_solution(solution):
            return FetchOutcome.failed(
                url, "FlareSolverr error: malformed solution", "renderer", elapsed
            )
        final_url = solution.get("url") or url
        return FetchOutcome(
            status_code=solution["status"],
            body=solution.get("response") or "",
            final_url=final_url,
            was_redirected=final_url != url,
            response_time_ms=elapsed,
        )


def create_fetcher(
    renderer: str,
    *,
    renderer_url: str = DEFAULT_FLARESOLVERR_URL,
    session: Optional[ClientSession] = None,
) -> Fetcher:
    """Pick the fetch strategy for a configured renderer name."""
    if renderer == "flaresolverr":
        return RenderingFetcher(renderer_url, session=session)
    if renderer == "static":
        return DirectFetcher(session)
    raise ValueError(f"Unknown renderer: {renderer!r}")
