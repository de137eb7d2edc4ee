# File: tests/conftest.py
from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Any, Callable, Dict

import pytest
from aiohttp import web

from migration_checker.config import CrawlerConfig, ValidatorConfig


def pytest_configure(config):
    """Register custom markers so that `--strict-markers` does not fail."""
    config.addinivalue_line(
        "markers",
        "slow: marks tests as slow (deselect with '-m \"not slow\"')",
    )


async def serve_app(app: web.Application, port: int) -> AsyncIterator[str]:
    """Start *app* on *port*, yield base URL, ensure cleanup."""
    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, "127.0.0.1", port)
    await site.start()
    try:
        yield f"http://127.0.0.1:{port}"
    finally:
        await runner.cleanup()


def html_page(title: str | None, body: str = "", links: tuple[str, ...] = ()) -> str:
    """Small HTML document with an optional title and a list of anchors."""
    head = f"<title>{title}</title>" if title is not None else ""
    anchors = "".join(f'<a href="{href}">{href}</a>' for href in links)
    return f"<html><head>{head}</head><body><p>{body}</p>{anchors}</body></html>"


async def no_sleep(_: float) -> None:
    return None


@pytest.fixture()
def crawl_config() -> Callable[..., CrawlerConfig]:
    """Factory for a fast CrawlerConfig (no politeness delay, short timeout)."""

    def _make(source_url: str, **overrides: Any) -> CrawlerConfig:
        data: Dict[str, Any] = {
            "source_url": source_url,
            "max_depth": 5,
            "concurrency": 3,
            "timeout": 2000,
            "delay": 0,
        }
        data.update(overrides)
        return CrawlerConfig(**data)

    return _make


@pytest.fixture()
def validator_config(tmp_path) -> Callable[..., ValidatorConfig]:
    """Factory for a ValidatorConfig pointing at *destination_url*."""

    def _make(destination_url: str, **overrides: Any) -> ValidatorConfig:
        data: Dict[str, Any] = {
            "input_path": str(tmp_path / "crawl.json"),
            "destination_url": destination_url,
            "concurrency": 3,
            "timeout": 2000,
        }
        data.update(overrides)
        return ValidatorConfig(**data)

    return _make
