# File: tests/test_reports.py
import json
import re

from migration_checker.crawler.models import CrawlOutput, CrawlRecord, CrawlStats
from migration_checker.report.html_report import render_html
from migration_checker.report.json_report import (
    default_crawl_filename,
    default_report_filename,
    read_crawl_output,
    write_json,
)
from migration_checker.utils import format_duration, remove_duplicates, utc_now_iso
from migration_checker.validation.models import (
    ValidationIssue,
    ValidationRecord,
    ValidationReport,
    ValidationSummary,
    escalate,
)


def sample_report() -> ValidationReport:
    results = [
        ValidationRecord(
            source_path="/old-<page>",
            source_title="Old",
            destination_url="https://new.example.com/old-<page>",
            destination_status_code=None,
            destination_title=None,
            status="error",
            issues=[ValidationIssue("error", "Request timeout after 10000ms", {"failure": "timeout"})],
        ),
        ValidationRecord(
            source_path="/about",
            source_title="About",
            destination_url="https://new.example.com/about",
            destination_status_code=200,
            destination_title="About | New",
            status="ok",
        ),
    ]
    return ValidationReport(
        source_url="https://old.example.com/",
        destination_url="https://new.example.com",
        summary=ValidationSummary.from_records(results, 1500),
        results=results,
        validated_at="2024-01-01T00:00:00.000Z",
    )


def test_crawl_output_survives_json(tmp_path):
    output = CrawlOutput(
        source_url="https://example.com/",
        urls=[
            CrawlRecord("https://example.com/", "/", "Главная", 200, 0),
            CrawlRecord("https://example.com/a", "/a", None, 0, 1, "https://example.com/"),
        ],
        stats=CrawlStats(total_urls=2, successful_crawls=1, failed_crawls=1, duration_ms=42),
        crawled_at=utc_now_iso(),
        config={"maxDepth": 1},
    )
    path = write_json(output, tmp_path / "nested" / "crawl.json")

    raw = path.read_text(encoding="utf-8")
    assert "Главная" in raw
    assert raw.startswith('{\n  "sourceUrl"')
    assert read_crawl_output(path) == output


def test_validation_report_json(tmp_path):
    path = write_json(sample_report(), tmp_path / "report.json")
    data = json.loads(path.read_text(encoding="utf-8"))

    assert data["summary"]["errorUrls"] == 1
    assert data["summary"]["durationMs"] == 1500
    first, second = data["results"]
    assert first["destinationStatusCode"] is None
    assert first["issues"][0]["details"] == {"failure": "timeout"}
    assert "details" not in json.dumps(second["issues"])


def test_render_html_escapes_and_summarizes(tmp_path):
    path = render_html(sample_report(), tmp_path / "out" / "report.html")
    html = path.read_text(encoding="utf-8")

    assert "/old-&lt;page&gt;" in html
    assert "/old-<page>" not in html
    assert "Request timeout after 10000ms" in html
    assert "Errors: 1" in html
    assert "Duration: 1s" in html


def test_render_html_custom_template(tmp_path):
    (tmp_path / "report.html.j2").write_text("{{ summary.total_urls }} urls", encoding="utf-8")
    path = render_html(sample_report(), tmp_path / "r.html", template_dir=tmp_path)
    assert path.read_text(encoding="utf-8") == "2 urls"


def test_default_filenames():
    assert re.fullmatch(
        r"crawl-old\.example\.com-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.json",
        default_crawl_filename("https://old.example.com/blog"),
    )
    assert re.fullmatch(
        r"validation-report-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.json",
        default_report_filename(),
    )


def test_escalate_never_downgrades():
    assert escalate("ok", "warning") == "warning"
    assert escalate("warning", "ok") == "warning"
    assert escalate("warning", "error") == "error"
    assert escalate("error", "warning") == "error"


def test_helpers():
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z", utc_now_iso())
    assert [format_duration(ms) for ms in (850, 12_000, 185_000, 3_720_000)] == [
        "850ms",
        "12s",
        "3m 5s",
        "1h 2m",
    ]
    assert remove_duplicates(["b", "a", "b"]) == ["b", "a"]
