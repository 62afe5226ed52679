"""
Operation Runner — Fetch or push a single mirror.

A run opens the mirror's log, performs its steps in order, and reduces the
outcome to True/False. The reason for a failure is written to the mirror
log only; callers just count.
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Union

from .errors import LogUnavailable, MirrorError
from .git_ops import GitCommands
from .oplog import OperationLog, open_operation_log
from .provisioner import ensure_destination, refresh_index, resolve_target

logger = logging.getLogger(__name__)


class OperationKind(str, Enum):
    """Operations that run across every mirror."""
    FETCH = "fetch"
    PUSH = "push"

    @property
    def label(self) -> str:
        return self.value.upper()


def _fetch_steps(mirror: Path, git: GitCommands, oplog: OperationLog) -> None:
    # Prune so deleted upstream branches disappear from the mirror too
    git.fetch_prune(mirror, oplog.stream)


def _push_steps(mirror: Path, git: GitCommands, oplog: OperationLog) -> None:
    target = resolve_target(mirror, git)
    oplog.logger.info(f"Push target: {target.url} ({target.kind.value})")

    if ensure_destination(target, git, oplog.stream):
        oplog.logger.info(f"Initialized bare repository at {target.location}")

    git.push_mirror(mirror, oplog.stream)

    # Not synced until static serving sees the new refs
    refresh_index(target, git, oplog.stream)


_STEPS: Dict[OperationKind, Callable[[Path, GitCommands, OperationLog], None]] = {
    OperationKind.FETCH: _fetch_steps,
    OperationKind.PUSH: _push_steps,
}


def run_operation(mirror: Union[str, Path], kind: OperationKind, git: GitCommands) -> bool:
    """Run one operation against one mirror.

    Never raises for per-mirror problems: every failure, including an
    unexpected exception, is logged and turned into False so that other
    mirrors are unaffected.
    """
    mirror = Path(mirror)
    steps = _STEPS[kind]

    try:
        with open_operation_log(mirror, kind.label) as oplog:
            oplog.logger.info("Start")
            success = False
            try:
                steps(mirror, git, oplog)
                success = True
            except MirrorError as e:
                oplog.logger.error(f"{kind.value} {mirror} failed [{type(e).__name__}]: {e}")
            except Exception:
                oplog.logger.exception(f"{kind.value} {mirror} failed unexpectedly")
                logger.exception(f"[{kind.value}] Unexpected error for {mirror}")
            oplog.logger.info(f"Done, success:{success}")
            return success
    except LogUnavailable as e:
        logger.error(f"[{kind.value}] {e}")
        return False


def fetch_single(mirror: Union[str, Path], git: GitCommands) -> bool:
    """git fetch -p origin, logged to the mirror's log."""
    return run_operation(mirror, OperationKind.FETCH, git)


def push_single(mirror: Union[str, Path], git: GitCommands) -> bool:
    """Provision the destination if needed, push --mirror, refresh index."""
    return run_operation(mirror, OperationKind.PUSH, git)
