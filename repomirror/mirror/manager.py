"""
Mirror Manager — Orchestrates operations across every local mirror.

This is the main entry point for mirror operations. It discovers the
mirrors under the workspace root, runs fetch or push against all of them
in parallel, and aggregates the results.

## Usage from other modules:

    from repomirror.mirror.config import MirrorSettings
    from repomirror.mirror.manager import MirrorManager
    from repomirror.mirror.runner import OperationKind

    manager = MirrorManager(MirrorSettings.from_env())
    outcome = manager.perform(OperationKind.PUSH)
    if not outcome.ok:
        ...
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional
from urllib.parse import urlsplit

from .config import MIRROR_SUFFIX, MirrorSettings
from .errors import MirrorError
from .git_ops import GitCommands
from .locator import find_mirrors
from .runner import OperationKind, run_operation
from .target import parse_push_target

logger = logging.getLogger(__name__)


@dataclass
class OperationResult:
    """Outcome of one operation on one mirror."""

    mirror: Path
    name: str  # path relative to the workspace root
    success: bool


@dataclass
class AggregateOutcome:
    """Outcome of one fetch/push across all mirrors."""

    kind: OperationKind
    total: int = 0
    failed: int = 0
    results: List[OperationResult] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.total - self.failed

    @property
    def ok(self) -> bool:
        return self.failed == 0


@dataclass
class MirrorInfo:
    """A discovered mirror and where it pushes to."""

    name: str
    path: Path
    push_url: Optional[str] = None
    target_kind: Optional[str] = None
    error: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "path": str(self.path),
            "push_url": self.push_url,
            "target_kind": self.target_kind,
            "error": self.error,
        }


ResultCallback = Callable[[OperationResult], None]


def ensure_git_ext(dest: str) -> str:
    """Append ".git" unless the name already ends with it (any case)."""
    if Path(dest).suffix.lower() != MIRROR_SUFFIX:
        return f"{dest}{MIRROR_SUFFIX}"
    return dest


def default_local_dest(fetch_url: str) -> str:
    """Derive "<host><path>" from a fetch URL.

    https://github.com/pkg/errors.git -> github.com/pkg/errors.git
    git@github.com:pkg/errors.git     -> github.com/pkg/errors.git

    Raises:
        MirrorError: no host can be found in the URL.
    """
    raw = fetch_url.strip()
    try:
        parts = urlsplit(raw)
    except ValueError as e:
        raise MirrorError(f"Could not generate a localDest from {raw!r}: {e}") from e

    host = parts.netloc.rpartition("@")[2]
    path = parts.path
    if not host and "://" not in raw and ":" in raw and parts.scheme != "file":
        # scp-like [user@]host:path
        host_part, _, path = raw.partition(":")
        host = host_part.rpartition("@")[2]
        path = "/" + path.lstrip("/")

    segments = [s for s in path.split("/") if s]
    if not host or not segments or ".." in segments:
        raise MirrorError(f"Could not generate a localDest from {raw!r}")

    return "/".join([host, *segments])


class MirrorManager:
    """
    Runs operations over every mirror found under the workspace root.

    fetch/push start one thread per mirror and wait for all of them; a
    failing mirror never stops the others.
    """

    def __init__(self, settings: MirrorSettings, git: Optional[GitCommands] = None):
        self.settings = settings
        self.git = git or GitCommands(settings.git_executable, settings.git_timeout)

    @property
    def root(self) -> Path:
        return self.settings.root

    def display_name(self, mirror: Path) -> str:
        """Mirror path relative to the workspace root, for console output."""
        try:
            rel = mirror.relative_to(self.root)
        except ValueError:
            return str(mirror)
        return str(mirror) if rel == Path(".") else rel.as_posix()

    def discover(self) -> List[Path]:
        """All mirrors under the root. Raises DiscoveryError."""
        mirrors = find_mirrors(self.root)
        logger.debug(f"[mirror] Found {len(mirrors)} mirror(s) under {self.root}")
        return mirrors

    # ─── Fetch / Push ───────────────────────────────────────

    def perform(
        self,
        kind: OperationKind,
        on_result: Optional[ResultCallback] = None,
    ) -> AggregateOutcome:
        """
        Run `kind` against every mirror concurrently.

        `on_result` is called once per mirror as soon as it finishes, so
        calls arrive in completion order. Calls are serialized; the callback
        does not need its own locking.

        Raises:
            DiscoveryError: the root could not be read; nothing was run.
        """
        mirrors = self.discover()
        outcome = AggregateOutcome(kind=kind, total=len(mirrors))
        if not mirrors:
            logger.info(f"[mirror] No mirrors under {self.root}, nothing to {kind.value}")
            return outcome

        lock = threading.Lock()

        def _do_one(mirror: Path) -> None:
            try:
                success = run_operation(mirror, kind, self.git)
            except Exception:
                logger.exception(f"[mirror] {kind.value} crashed for {mirror}")
                success = False
            result = OperationResult(
                mirror=mirror,
                name=self.display_name(mirror),
                success=success,
            )
            with lock:
                if not success:
                    outcome.failed += 1
                outcome.results.append(result)
                if on_result is not None:
                    on_result(result)

        logger.info(f"[mirror] Running {kind.value} on {len(mirrors)} mirror(s)")
        threads = [
            threading.Thread(target=_do_one, args=(mirror,), name=f"mirror-{kind.value}-{i}")
            for i, mirror in enumerate(mirrors)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        logger.info(
            f"[mirror] {kind.value}: {outcome.succeeded}/{outcome.total} mirrors succeeded"
        )
        return outcome

    def fetch_all(self, on_result: Optional[ResultCallback] = None) -> AggregateOutcome:
        return self.perform(OperationKind.FETCH, on_result)

    def push_all(self, on_result: Optional[ResultCallback] = None) -> AggregateOutcome:
        return self.perform(OperationKind.PUSH, on_result)

    # ─── Add / List ─────────────────────────────────────────

    def add(self, fetch_url: str, push_url: str, local_dest: Optional[str] = None) -> Path:
        """
        Clone `fetch_url` as a mirror and record `push_url` as its push target.

        Returns the path of the new mirror.

        Raises:
            MirrorError: no local destination could be derived.
            PrimitiveError: clone or set-url failed.
        """
        if not local_dest:
            local_dest = default_local_dest(fetch_url)
        dest = self.root / ensure_git_ext(local_dest)

        logger.info(f"[mirror] Cloning {fetch_url} into {dest}")
        self.git.clone_mirror(fetch_url, dest)

        logger.info(f"[mirror] Setting push URL for {dest} to {push_url}")
        self.git.set_push_target(dest, push_url)
        return dest

    def list_mirrors(self) -> List[MirrorInfo]:
        """Discovered mirrors with their push URLs, sorted by name."""
        infos = []
        for mirror in self.discover():
            info = MirrorInfo(name=self.display_name(mirror), path=mirror)
            try:
                target = parse_push_target(self.git.get_push_target(mirror))
            except MirrorError as e:
                info.error = str(e)
            else:
                info.push_url = target.url
                info.target_kind = target.kind.value
            infos.append(info)
        return sorted(infos, key=lambda i: i.name)
