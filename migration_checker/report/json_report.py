# migration_checker/report/json_report.py

"""
JSON persistence for migration_checker artifacts.

Both artifacts (crawl output and validation report) are written with a
2-space indent and non-ASCII characters kept as-is.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from migration_checker.crawler.models import CrawlOutput
from migration_checker.utils import file_timestamp, get_domain

__all__ = (
    "write_json",
    "read_crawl_output",
    "default_crawl_filename",
    "default_report_filename",
)


def write_json(artifact: Any, output_path: Path | str) -> Path:
    """
    Serialize *artifact* (anything with ``to_dict()`` or a plain dict) to *output_path*.

    :param artifact: CrawlOutput, ValidationReport or a dict
    :param output_path: target JSON file; parent directories are created
    :return: Path of the written file
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    data: Dict[str, Any] = artifact.to_dict() if hasattr(artifact, "to_dict") else artifact

    with output.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return output


def read_crawl_output(path: Path | str) -> CrawlOutput:
    """Load a crawl artifact written by :func:`write_json`."""
    with Path(path).open("r", encoding="utf-8") as f:
        return CrawlOutput.from_dict(json.load(f))


def default_crawl_filename(source_url: str) -> str:
    """``crawl-<host>-<timestamp>.json``"""
    return f"crawl-{get_domain(source_url)}-{file_timestamp()}.json"


def default_report_filename() -> str:
    return f"validation-report-{file_timestamp()}.json"
