"""Logging configuration for hbjob.

configure_logging() replaces the root logger's handlers with a rotating
log file and/or stderr, both carrying the current job context.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from hbjob.logging.context import JobContextFilter
from hbjob.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from hbjob.config.models import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)s %(job_label)s %(name)s: %(message)s"
TEXT_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

_LEVEL_MAP: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def build_formatter(format_name: str) -> logging.Formatter:
    """Return the formatter for a LoggingConfig.format value."""
    if format_name.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)


def _open_log_file(config: LoggingConfig) -> logging.Handler | None:
    """Open the rotating job log, or return None if it cannot be opened."""
    if config.file is None:
        return None
    file_path = Path(config.file).expanduser()
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            file_path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"Warning: Could not open log file {file_path}: {e}\n")
        return None


def configure_logging(config: LoggingConfig) -> None:
    """Configure the root logger based on LoggingConfig.

    Every installed handler gets a JobContextFilter, so records logged
    inside job_context() carry the job identifier and source file. When
    the log file cannot be opened, output goes to stderr instead.

    Args:
        config: Logging configuration.
    """
    level = _LEVEL_MAP.get(config.level.casefold(), logging.INFO)
    formatter = build_formatter(config.format)

    handlers: list[logging.Handler] = []
    file_handler = _open_log_file(config)
    if file_handler is not None:
        handlers.append(file_handler)
    if config.include_stderr or file_handler is None:
        handlers.append(logging.StreamHandler(sys.stderr))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(JobContextFilter())
        root_logger.addHandler(handler)
