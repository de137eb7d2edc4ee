#!/usr/bin/env python3
"""
Command-line entry point of migration_checker.

Commands:
  crawl     Discover every URL of the source site and save them as JSON
  validate  Check crawled paths against the destination site
  config    Show the loaded settings file

Common options:
  --config PATH       YAML/JSON settings file with ``crawl`` / ``validate`` sections
  --log-level LEVEL   Logging level (DEBUG, INFO, ...)
  --log-file PATH     Log file (stdout only if omitted)
  --log-format FORMAT Log format string
  --version           Show the version

Example:
  migration-checker crawl -u https://old.example.com -d 3 -e '/tag/' -o crawl.json
  migration-checker validate -i crawl.json -d https://new.example.com --html report.html
"""
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, Dict, Mapping

import click
from pydantic.alias_generators import to_snake

from migration_checker import __version__
from migration_checker.config import (
    ConfigError,
    CrawlerConfig,
    ValidatorConfig,
    build_config,
    load_settings,
)
from migration_checker.engine import start_crawl, start_validation
from migration_checker.logger import init_logging, logger
from migration_checker.utils import format_duration

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])
RULE = "═" * 60


def print_error(message: str):
    click.secho(message, fg='red', err=True)
    sys.exit(1)


def _merge(section: Mapping[str, Any], **overrides: Any) -> Dict[str, Any]:
    """Settings-file section (any key style) overlaid with explicitly given CLI values."""
    data = {to_snake(key): value for key, value in section.items()}
    data.update({k: v for k, v in overrides.items() if v is not None and v != ()})
    return data


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(__version__, '--version', message='MigrationChecker, version %(version)s')
@click.option(
    '--config', '-C', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help='YAML/JSON settings file with crawl/validate sections.'
)
@click.option(
    '--log-level', 'log_level',
    default='INFO', show_default=True,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']),
    help='Logging level'
)
@click.option(
    '--log-file', 'log_file',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Log file (stdout only if omitted)'
)
@click.option(
    '--log-format', 'log_format',
    default='%(asctime)s %(levelname)s %(message)s',
    show_default=True,
    help='Log format string'
)
@click.pass_context
def cli(ctx, config_path, log_level, log_file, log_format):
    """Crawl a source site and validate its URLs on the migrated destination."""
    init_logging(
        level=log_level,
        log_file=str(log_file) if log_file else None,
        log_format=log_format
    )
    settings: Dict[str, Any] = {}
    if config_path is not None:
        try:
            settings = load_settings(config_path)
        except (ConfigError, OSError) as e:
            print_error(f'Failed to load settings: {e}')
    ctx.ensure_object(dict)
    ctx.obj['settings'] = settings


@cli.command('crawl', context_settings=CONTEXT_SETTINGS)
@click.option('--url', '-u', 'source_url', default=None, help='Source URL to crawl')
@click.option('--output', '-o', 'output_path', default=None, help='Output file path')
@click.option('--max-depth', '-d', 'max_depth', type=int, default=None, help='Maximum crawl depth [10]')
@click.option('--concurrency', '-c', type=int, default=None, help='Number of parallel requests [5]')
@click.option('--timeout', '-t', type=int, default=None, help='Request timeout in milliseconds [10000]')
@click.option('--delay', type=int, default=None, help='Delay after each request in milliseconds [100]')
@click.option('--exclude', '-e', 'exclude_patterns', multiple=True, help='URL regex to exclude (repeatable)')
@click.option(
    '--renderer', '-r',
    type=click.Choice(['static', 'flaresolverr']),
    default=None,
    help='static (HTML only) or flaresolverr (JavaScript rendering) [static]'
)
@click.option('--flaresolverr-url', 'flaresolverr_url', default=None, help='FlareSolverr API URL')
@click.option('--verbose', '-v', is_flag=True, help='Log every URL')
@click.pass_context
def crawl(ctx, source_url, output_path, max_depth, concurrency, timeout, delay,
          exclude_patterns, renderer, flaresolverr_url, verbose):
    """Crawl a website and discover all of its URLs."""
    data = _merge(
        ctx.obj['settings'].get('crawl', {}),
        source_url=source_url,
        output_path=output_path,
        max_depth=max_depth,
        concurrency=concurrency,
        timeout=timeout,
        delay=delay,
        exclude_patterns=list(exclude_patterns) or None,
        renderer=renderer,
        flaresolverr_url=flaresolverr_url,
        verbose=verbose or None,
    )
    try:
        cfg = build_config(CrawlerConfig, data)
    except ConfigError as e:
        print_error(f'Invalid crawl settings: {e}')

    try:
        output, saved = asyncio.run(start_crawl(cfg))
    except Exception as e:
        logger.error(f'Crawl failed: {e}')
        print_error(f'Crawl failed: {e}')

    stats = output.stats
    click.echo()
    click.secho(RULE, fg='blue')
    click.secho('Crawl Complete', fg='blue', bold=True)
    click.secho(RULE, fg='blue')
    click.secho(f'Total URLs crawled: {stats.total_urls}', fg='green')
    click.secho(f'Successful: {stats.successful_crawls}', fg='green')
    click.secho(f'Failed: {stats.failed_crawls}', fg='red')
    click.secho(f'Skipped (depth): {stats.skipped_due_to_depth}', fg='yellow')
    click.secho(f'Skipped (excluded): {stats.skipped_due_to_exclude}', fg='yellow')
    click.secho(f'Duration: {format_duration(stats.duration_ms)}', fg='blue')
    click.secho(f'Output: {saved}', fg='blue')
    click.secho(RULE, fg='blue')


@cli.command('validate', context_settings=CONTEXT_SETTINGS)
@click.option('--input', '-i', 'input_path', default=None, help='Crawler output file path')
@click.option('--destination', '-d', 'destination_url', default=None, help='Destination URL to validate against')
@click.option('--output', '-o', 'output_path', default=None, help='Output report file path')
@click.option(
    '--html', 'html_output',
    default=None,
    type=click.Path(writable=True, dir_okay=False, path_type=Path),
    help='Also save an HTML report'
)
@click.option('--concurrency', '-c', type=int, default=None, help='Number of parallel requests [5]')
@click.option('--timeout', '-t', type=int, default=None, help='Request timeout in milliseconds [10000]')
@click.option('--redirects-ok', is_flag=True, help='Treat redirects as OK instead of warning')
@click.option('--renderer', '-r', type=click.Choice(['static', 'flaresolverr']), default=None,
              help='static or flaresolverr [static]')
@click.option('--flaresolverr-url', 'flaresolverr_url', default=None, help='FlareSolverr API URL')
@click.option('--verbose', '-v', is_flag=True, help='Log every URL and list all issues')
@click.pass_context
def validate(ctx, input_path, destination_url, output_path, html_output, concurrency, timeout,
             redirects_ok, renderer, flaresolverr_url, verbose):
    """Validate crawled URLs against a destination site."""
    data = _merge(
        ctx.obj['settings'].get('validate', {}),
        input_path=input_path,
        destination_url=destination_url,
        output_path=output_path,
        concurrency=concurrency,
        timeout=timeout,
        redirect_handling='ok' if redirects_ok else None,
        renderer=renderer,
        flaresolverr_url=flaresolverr_url,
        verbose=verbose or None,
    )
    try:
        cfg = build_config(ValidatorConfig, data)
    except ConfigError as e:
        print_error(f'Invalid validation settings: {e}')

    if not Path(cfg.input_path).is_file():
        print_error(f'Input file not found: {cfg.input_path}')

    try:
        report, saved = asyncio.run(start_validation(cfg, html_output))
    except Exception as e:
        logger.error(f'Validation failed: {e}')
        print_error(f'Validation failed: {e}')

    _print_summary(report.summary, saved)
    _print_issues(report, cfg.verbose)


def _print_summary(summary, saved: Path) -> None:
    click.echo()
    click.secho(RULE, fg='blue')
    click.secho('Validation Complete', fg='blue', bold=True)
    click.secho(RULE, fg='blue')
    click.echo(f'Total URLs: {summary.total_urls}')
    click.secho(f'OK: {summary.ok_urls}', fg='green')
    click.secho(f'Warnings: {summary.warning_urls}', fg='yellow')
    click.secho(f'Errors: {summary.error_urls}', fg='red')
    click.echo()
    click.echo('Issue breakdown:')
    click.secho(f'  404 Not Found: {summary.not_found_count}', fg='red')
    click.secho(f'  Soft 404s: {summary.soft404_count}', fg='red')
    click.secho(f'  Server Errors: {summary.server_error_count}', fg='red')
    click.secho(f'  Title Mismatches: {summary.title_mismatch_count}', fg='yellow')
    click.secho(f'  Redirects: {summary.redirect_count}', fg='yellow')
    click.echo()
    click.secho(f'Duration: {format_duration(summary.duration_ms)}', fg='blue')
    click.secho(f'Report: {saved}', fg='blue')
    click.secho(RULE, fg='blue')


def _print_issues(report, verbose: bool, limit: int = 10) -> None:
    errors = report.errors
    if errors:
        click.echo()
        click.secho(f'Errors ({len(errors)}):', fg='red', bold=True)
        shown = errors if verbose else errors[:limit]
        for record in shown:
            click.secho(f'  {record.source_path}', fg='red')
            for issue in record.issues:
                click.echo(f'    - {issue.message}')
        if len(errors) > len(shown):
            click.echo(f'  ... and {len(errors) - len(shown)} more (use -v to see all)')

    warnings = report.warnings
    if warnings and verbose:
        click.echo()
        click.secho(f'Warnings ({len(warnings)}):', fg='yellow', bold=True)
        for record in warnings:
            click.secho(f'  {record.source_path}', fg='yellow')
            for issue in record.issues:
                click.echo(f'    - {issue.message}')


@cli.command('config', context_settings=CONTEXT_SETTINGS)
@click.pass_context
def show_config(ctx):
    """Show the loaded settings file as JSON."""
    click.echo(json.dumps(ctx.obj['settings'], indent=2, ensure_ascii=False))


if __name__ == "__main__":
    cli()
