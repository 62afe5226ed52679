"""
Operation Log — Per-mirror, append-only log files.

Every fetch/push writes to "<mirror>.log" next to the mirror directory,
e.g. github.com/pkg/errors.git.log. The file collects git's own output
plus timestamped lines from repomirror:

    PUSH: 2026/10/18 09:12:44 runner.py:91: Start
    ...git output...
    PUSH: 2026/10/18 09:12:51 runner.py:112: Done, success:True

Files are never truncated, so history accumulates across runs.
"""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any, Iterator, Union

from .config import LOG_SUFFIX
from .errors import LogUnavailable

LOG_DATEFMT = "%Y/%m/%d %H:%M:%S"


@dataclass
class OperationLog:
    """An open mirror log: raw stream for git, logger for our own lines."""

    path: Path
    stream: IO[Any]
    logger: logging.Logger


def log_path_for(mirror: Union[str, Path]) -> Path:
    """The log file that belongs to a mirror."""
    mirror = Path(mirror)
    return mirror.with_name(mirror.name + LOG_SUFFIX)


def _make_logger(path: Path, stream: IO[Any], label: str) -> logging.Logger:
    # Not registered with logging.getLogger(): one instance per run, discarded
    # afterwards, and never propagated to the application handlers.
    oplogger = logging.Logger(f"repomirror.oplog.{path}", level=logging.DEBUG)
    oplogger.propagate = False

    formatter = logging.Formatter(
        f"{label}: %(asctime)s %(filename)s:%(lineno)d: %(message)s",
        datefmt=LOG_DATEFMT,
    )
    formatter.converter = time.gmtime

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    oplogger.addHandler(handler)
    return oplogger


@contextmanager
def open_operation_log(mirror: Union[str, Path], label: str) -> Iterator[OperationLog]:
    """Open (or create) a mirror's log for one operation.

    Args:
        mirror: Path of the mirror directory.
        label: Line prefix, e.g. "FETCH" or "PUSH".

    Raises:
        LogUnavailable: the file cannot be opened for appending, or the
            buffered output cannot be written out when it is closed.
    """
    path = log_path_for(mirror)
    try:
        stream = open(path, "a", encoding="utf-8")
    except OSError as e:
        raise LogUnavailable(f"Error opening log file {path}: {e}") from e

    oplogger = _make_logger(path, stream, label)
    try:
        yield OperationLog(path=path, stream=stream, logger=oplogger)
    finally:
        for handler in list(oplogger.handlers):
            oplogger.removeHandler(handler)
            handler.close()
        try:
            stream.close()
        except OSError as e:
            raise LogUnavailable(f"Error writing log file {path}: {e}") from e
