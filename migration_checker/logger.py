"""Logging for **migration_checker**.

Every module logs through the one ``MigrationChecker`` logger::

    from migration_checker.logger import logger
    logger.info("Crawled: %d | Queue: %d", done, queued)

Per-URL lines go out at INFO under ``--verbose`` and at DEBUG otherwise, so
a default run shows only batch progress, retries, failures and the saved
artifact paths. The CLI calls :func:`init_logging` once its ``--log-level``,
``--log-file`` and ``--log-format`` options are parsed; a long crawl can
therefore be mirrored to a rotating file while the console stays readable.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "MigrationChecker"

# a full-site crawl log rotates at 5 MiB, keeping three old files
_MAX_LOG_BYTES: Final[int] = 5 * 1024 * 1024
_LOG_BACKUPS: Final[int] = 3

_LevelT = Union[int, str]


def _console_handler(fmt: str) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(file: Path | str, fmt: str) -> RotatingFileHandler:
    Path(file).parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=_MAX_LOG_BYTES,
        backupCount=_LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the project logger.

    Parameters
    ----------
    level
        Numeric or textual level; ``"DEBUG"`` also shows every crawled or
        validated URL without ``--verbose``.
    log_file
        Optional log file, written in addition to stdout.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        Drop (and close) handlers from an earlier configuration first.
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level.upper() if isinstance(level, str) else level)

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    lg.addHandler(_console_handler(log_format))
    if log_file is not None:
        lg.addHandler(_file_handler(log_file, log_format))

    # records stay out of the root logger, so aiohttp/asyncio noise is not duplicated
    lg.propagate = False
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Entry point for the ``migration-checker`` command: fresh handlers, given level."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging"]
