# File: tests/test_validator.py
from __future__ import annotations

import json
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from aiohttp import web
from conftest import html_page, no_sleep, serve_app

from migration_checker.crawler.fetcher import DirectFetcher
from migration_checker.crawler.models import CrawlOutput, CrawlRecord, CrawlStats
from migration_checker.engine import start_validation
from migration_checker.report.json_report import write_json
from migration_checker.validation.validator import MigrationValidator

FILLER = "This destination page carries enough ordinary readable text to look real. " * 8


@pytest_asyncio.fixture
async def destination(unused_tcp_port: int) -> AsyncIterator[str]:
    app = web.Application()

    def page(title: str):
        async def handler(_):
            return web.Response(text=html_page(title, FILLER), content_type="text/html")

        return handler

    async def handle_missing(_):
        return web.Response(status=404, text=html_page("Not Found"), content_type="text/html")

    async def handle_boom(_):
        return web.Response(status=503, text="maintenance")

    async def handle_soft(_):
        return web.Response(
            text=html_page("Page Not Found", "Sorry, this page could not be found."),
            content_type="text/html",
        )

    async def handle_moved(_):
        raise web.HTTPMovedPermanently("/new-home")

    app.router.add_get("/x", page("Foo - Bar"))
    app.router.add_get("/other", page("Completely Different"))
    app.router.add_get("/new-home", page("Moved Page"))
    app.router.add_get("/untitled", page(None))
    app.router.add_get("/missing", handle_missing)
    app.router.add_get("/boom", handle_boom)
    app.router.add_get("/soft", handle_soft)
    app.router.add_get("/moved", handle_moved)

    async for url in serve_app(app, unused_tcp_port):
        yield url


async def check(cfg, path, title):
    async with MigrationValidator(cfg) as validator:
        return await validator.validate_path(path, title)


@pytest.mark.asyncio()
async def test_matching_page_is_ok(destination, validator_config):
    record = await check(validator_config(destination), "/x", "Foo")
    assert record.status == "ok"
    assert record.issues == []
    assert record.destination_status_code == 200
    assert record.destination_title == "Foo - Bar"
    assert record.destination_url == f"{destination}/x"


@pytest.mark.asyncio()
async def test_not_found(destination, validator_config):
    record = await check(validator_config(destination), "/missing", "Old page")
    assert record.status == "error"
    assert [i.type for i in record.issues] == ["not_found"]
    assert record.destination_status_code == 404


@pytest.mark.asyncio()
async def test_server_error(destination, validator_config):
    record = await check(validator_config(destination), "/boom", "Anything")
    assert record.status == "error"
    assert [i.type for i in record.issues] == ["server_error"]
    assert record.issues[0].message == "Server error: 503"


@pytest.mark.asyncio()
async def test_soft_404_suppresses_title_check(destination, validator_config):
    record = await check(validator_config(destination), "/soft", "Pricing")
    assert record.status == "error"
    assert [i.type for i in record.issues] == ["soft_404"]
    assert record.issues[0].message.startswith("Soft 404 detected (")
    assert record.issues[0].details["reasons"]


@pytest.mark.asyncio()
async def test_redirect_is_a_warning_by_default(destination, validator_config):
    record = await check(validator_config(destination), "/moved", "Moved Page")
    assert record.status == "warning"
    assert [i.type for i in record.issues] == ["redirect"]
    assert record.issues[0].message == "Redirected to: /new-home"
    assert record.issues[0].details == {"finalUrl": f"{destination}/new-home"}


@pytest.mark.asyncio()
async def test_redirect_policy_ok(destination, validator_config):
    cfg = validator_config(destination, redirect_handling="ok")
    record = await check(cfg, "/moved", "Moved Page")
    assert record.status == "ok"
    assert [i.type for i in record.issues] == ["redirect"]


@pytest.mark.asyncio()
async def test_title_mismatch_is_a_warning(destination, validator_config):
    record = await check(validator_config(destination), "/other", "Pricing Plans")
    assert record.status == "warning"
    assert [i.type for i in record.issues] == ["title_mismatch"]
    assert record.issues[0].details == {
        "sourceTitle": "Pricing Plans",
        "destinationTitle": "Completely Different",
    }


@pytest.mark.asyncio()
async def test_missing_titles_skip_comparison(destination, validator_config):
    cfg = validator_config(destination)
    assert (await check(cfg, "/untitled", "Pricing Plans")).status == "ok"
    assert (await check(cfg, "/other", None)).status == "ok"


@pytest.mark.asyncio()
async def test_unreachable_destination(unused_tcp_port, validator_config):
    cfg = validator_config(f"http://127.0.0.1:{unused_tcp_port}")
    async with MigrationValidator(cfg, fetcher=DirectFetcher(sleep=no_sleep)) as validator:
        record = await validator.validate_path("/x", "Foo")
    assert record.status == "error"
    assert record.destination_status_code is None
    assert len(record.issues) == 1
    assert record.issues[0].type == "error"
    assert record.issues[0].details == {"failure": "transport"}


def crawl_of(source: str, *pages: tuple[str, str | None]) -> CrawlOutput:
    records = [
        CrawlRecord(url=f"{source}{path}", path=path, title=title, status_code=200, depth=1)
        for path, title in pages
    ]
    return CrawlOutput(
        source_url=f"{source}/",
        urls=records,
        stats=CrawlStats(total_urls=len(records), successful_crawls=len(records)),
        crawled_at="2024-01-01T00:00:00.000Z",
    )


CRAWL_PAGES = (
    ("/x", "Foo"),
    ("/other", "Pricing Plans"),
    ("/missing", "Gone"),
    ("/moved", "Moved Page"),
)


@pytest.mark.asyncio()
async def test_validate_summary_and_order(destination, validator_config):
    crawl = crawl_of("https://old.example.com", *CRAWL_PAGES)
    async with MigrationValidator(validator_config(destination)) as validator:
        report = await validator.validate(crawl)

    assert [r.status for r in report.results] == ["error", "warning", "warning", "ok"]
    assert report.results[0].source_path == "/missing"
    assert report.results[-1].source_path == "/x"

    summary = report.summary
    assert summary.total_urls == 4
    assert summary.ok_urls == 1
    assert summary.warning_urls == 2
    assert summary.error_urls == 1
    assert summary.ok_urls + summary.warning_urls + summary.error_urls == summary.total_urls
    assert summary.not_found_count == 1
    assert summary.title_mismatch_count == 1
    assert summary.redirect_count == 1
    assert summary.soft404_count == 0
    assert report.source_url == "https://old.example.com/"
    assert report.destination_url == destination


@pytest.mark.asyncio()
async def test_start_validation_writes_reports(destination, validator_config, tmp_path):
    crawl_path = tmp_path / "crawl.json"
    write_json(crawl_of("https://old.example.com", *CRAWL_PAGES), crawl_path)
    report_path = tmp_path / "out" / "report.json"
    html_path = tmp_path / "out" / "report.html"

    cfg = validator_config(destination, input_path=str(crawl_path), output_path=str(report_path))
    report, saved = await start_validation(cfg, html_path)

    assert saved == report_path
    data = json.loads(report_path.read_text(encoding="utf-8"))
    assert data["summary"]["totalUrls"] == 4
    assert data["results"][0]["sourcePath"] == "/missing"
    assert data["results"][0]["issues"] == [{"type": "not_found", "message": "404 Not Found"}]
    assert data["config"]["redirectHandling"] == "warning"
    assert report.summary.error_urls == 1

    html = html_path.read_text(encoding="utf-8")
    assert "/missing" in html
    assert destination in html
