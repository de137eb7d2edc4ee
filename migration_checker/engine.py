# File: migration_checker/engine.py
"""migration_checker.engine: orchestration layer, runs a crawl or a validation and writes the artifact."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from migration_checker.config import CrawlerConfig, ValidatorConfig
from migration_checker.crawler.crawler import SiteCrawler
from migration_checker.crawler.models import CrawlOutput
from migration_checker.logger import logger
from migration_checker.report.html_report import render_html
from migration_checker.report.json_report import (
    default_crawl_filename,
    default_report_filename,
    read_crawl_output,
    write_json,
)
from migration_checker.validation.models import ValidationReport
from migration_checker.validation.validator import MigrationValidator

__all__ = ["start_crawl", "start_validation"]


async def start_crawl(cfg: CrawlerConfig) -> tuple[CrawlOutput, Path]:
    """
    Запускает обход исходного сайта и сохраняет JSON-артефакт.

    The artifact is written even when every URL failed.

    Returns
    -------
    tuple[CrawlOutput, Path]
        Результат обхода и путь к сохранённому файлу.
    """
    output_path = Path(cfg.output_path or default_crawl_filename(cfg.source_url))
    async with SiteCrawler(cfg) as crawler:
        output = await crawler.crawl()
    saved = write_json(output, output_path)
    logger.info("Crawl output: %s", saved)
    return output, saved


async def start_validation(
    cfg: ValidatorConfig,
    html_output: Optional[Union[str, Path]] = None,
) -> tuple[ValidationReport, Path]:
    """
    Загружает результат обхода, проверяет каждый путь на целевом сайте
    и сохраняет отчёт (JSON и, по желанию, HTML).
    """
    crawl = read_crawl_output(cfg.input_path)
    output_path = Path(cfg.output_path or default_report_filename())
    async with MigrationValidator(cfg) as validator:
        report = await validator.validate(crawl)
    saved = write_json(report, output_path)
    logger.info("Validation report: %s", saved)
    if html_output:
        html_path = render_html(report, html_output)
        logger.info("HTML report: %s", html_path)
    return report, saved
