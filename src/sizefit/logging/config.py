"""Root logger setup from a LoggingConfig.

Every installed handler carries a RequestContextFilter, so the text format
can tag lines with the id of the in-flight compression request and the JSON
format can include it as a field.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from sizefit.logging.context import RequestContextFilter
from sizefit.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from sizefit.config.models import LoggingConfig

TEXT_FORMAT = "%(asctime)s - %(request_tag)s%(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

# Handlers installed by the last configure_logging() call
_installed: list[logging.Handler] = []


def _formatter(config: LoggingConfig) -> logging.Formatter:
    if config.format.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT)


def _file_handler(config: LoggingConfig) -> logging.Handler | None:
    """Rotating handler for the configured file, or None if it can't be opened."""
    path = Path(config.file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"Warning: Could not open log file {path}: {e}\n")
        return None


def configure_logging(config: LoggingConfig) -> None:
    """Replace the root logger's handlers according to ``config``.

    Logs go to the configured file, to stderr when ``include_stderr`` is
    set, and to stderr alone when there is no usable file. Handlers from a
    previous call are closed.
    """
    level = logging.getLevelName(config.level.upper())

    handlers: list[logging.Handler] = []
    if config.file:
        file_handler = _file_handler(config)
        if file_handler is not None:
            handlers.append(file_handler)
    if config.include_stderr or not handlers:
        handlers.append(logging.StreamHandler(sys.stderr))

    formatter = _formatter(config)
    context_filter = RequestContextFilter()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    while _installed:
        _installed.pop().close()

    root_logger.setLevel(level)
    for handler in handlers:
        root_logger.addHandler(handler)
    _installed.extend(handlers)
