"""
Logging Configuration — Application logging setup.

Application logs go to stderr and are separate from the per-mirror
operation logs (see repomirror.mirror.oplog), which always go to files.

- Human-readable output for interactive use
- JSON output for cron/CI runs (machine-readable)
- Configurable log levels

## Environment Variables

- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: WARNING)
- LOG_FORMAT: json, text (default: text)

## Usage

    from repomirror.logging_config import setup_logging

    setup_logging()  # Call once at startup
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict

import click


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Output format:
    {"ts": "...", "level": "...", "logger": "...", "thread": "...", "message": "..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


class HumanFormatter(logging.Formatter):
    """
    One line per record, tagged with the worker thread:

        12:34:56 WARNING mirror-push-3: message

    Warnings and errors are coloured when writing to a terminal.
    """

    def __init__(self, color: bool | None = None):
        super().__init__(
            "%(asctime)s %(levelname)s %(threadName)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        self.color = sys.stderr.isatty() if color is None else color

    def formatMessage(self, record: logging.LogRecord) -> str:
        line = super().formatMessage(record)
        if self.color and record.levelno >= logging.WARNING:
            fg = "red" if record.levelno >= logging.ERROR else "yellow"
            return click.style(line, fg=fg)
        return line


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
) -> None:
    """
    Configure logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
               Defaults to LOG_LEVEL env var or WARNING, so the per-mirror
               status lines stay readable.
        format_type: Output format (json, text).
                     Defaults to LOG_FORMAT env var or text.
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "WARNING")).upper()
    log_format = (format_type or os.environ.get("LOG_FORMAT", "text")).lower()

    numeric_level = getattr(logging, log_level, logging.WARNING)

    formatter: logging.Formatter
    if log_format == "json":
        formatter = JSONFormatter()
    else:
        formatter = HumanFormatter()

    root = logging.getLogger()
    root.setLevel(numeric_level)
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    handler.setLevel(numeric_level)
    root.addHandler(handler)

    logging.getLogger(__name__).debug(
        f"Logging configured: level={log_level}, format={log_format}"
    )
