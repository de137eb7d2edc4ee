"""migration_checker.report: JSON and HTML output of crawl and validation artifacts."""

from __future__ import annotations

from .html_report import render_html
from .json_report import (
    default_crawl_filename,
    default_report_filename,
    read_crawl_output,
    write_json,
)

__all__ = [
    "render_html",
    "write_json",
    "read_crawl_output",
    "default_crawl_filename",
    "default_report_filename",
]
