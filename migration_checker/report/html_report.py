"""migration_checker.report.html_report: HTML rendering of a validation report with Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union

from jinja2 import Environment, FileSystemLoader, PackageLoader, select_autoescape

from migration_checker.utils import format_duration
from migration_checker.validation.models import ValidationReport

TEMPLATE_NAME = "report.html.j2"


def _environment(template_dir: Optional[Union[Path, str]]) -> Environment:
    loader = (
        FileSystemLoader(str(template_dir))
        if template_dir is not None
        else PackageLoader("migration_checker", "templates")
    )
    env = Environment(loader=loader, autoescape=select_autoescape(["html", "xml", "j2"]))
    env.filters["duration"] = format_duration
    return env


def render_html(
    report: ValidationReport,
    output_path: Union[Path, str],
    template_dir: Optional[Union[Path, str]] = None,
) -> Path:
    """Рендерит HTML-отчёт валидации и сохраняет его по указанному пути.

    Args:
        report: объект ValidationReport.
        output_path: путь к итоговому HTML-файлу.
        template_dir: своя папка с ``report.html.j2``; по умолчанию шаблон из пакета.

    Returns:
        Path до сохранённого HTML-файла.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    template = _environment(template_dir).get_template(TEMPLATE_NAME)

    context: dict[str, Any] = {
        "source_url": report.source_url,
        "destination_url": report.destination_url,
        "summary": report.summary,
        "results": report.results,
        "validated_at": report.validated_at,
    }

    output_path.write_text(template.render(**context), encoding="utf-8")
    return output_path
