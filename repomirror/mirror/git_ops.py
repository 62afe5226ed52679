"""
Git Operations — Thin wrappers around the git commands used for mirroring.

Each method runs exactly one git command. Commands that belong to a mirror
operation take a `stream` (an open file) that receives git's stdout and
stderr, so the output ends up in that mirror's log. Failures raise
PrimitiveError; nothing here decides whether a mirror succeeded.

Tests swap GitCommands for a fake with the same methods.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import IO, Any, List, Optional, Union

from .errors import PrimitiveError, ResolutionError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class GitCommands:
    """Run git commands against mirrors and push destinations."""

    def __init__(self, executable: str = "git", timeout: Optional[float] = None):
        self.executable = executable
        self.timeout = timeout

    def _git(
        self,
        *args: str,
        cwd: Optional[PathLike] = None,
        stream: Optional[IO[Any]] = None,
        capture: bool = False,
        what: str = "git command failed",
    ) -> subprocess.CompletedProcess:
        """Run one git command, raising PrimitiveError unless it exits 0."""
        cmd: List[str] = [self.executable, *args]
        kwargs: dict = {"cwd": str(cwd) if cwd is not None else None, "timeout": self.timeout}
        if capture:
            kwargs.update(capture_output=True, text=True)
        elif stream is not None:
            # Anything buffered must land before git's own output
            stream.flush()
            kwargs.update(stdout=stream, stderr=stream)

        logger.debug(f"[git] {' '.join(cmd)} (cwd={cwd or '.'})")
        try:
            result = subprocess.run(cmd, **kwargs)
        except subprocess.TimeoutExpired as e:
            raise PrimitiveError(f"{what}: timed out after {e.timeout}s", cmd) from e
        except OSError as e:
            raise PrimitiveError(f"{what}: {e}", cmd) from e

        if result.returncode != 0:
            detail = ""
            if capture:
                detail = (result.stderr or result.stdout or "").strip()
            msg = f"{what}: {detail}" if detail else what
            raise PrimitiveError(msg, cmd, result.returncode)
        return result

    # ─── Add ────────────────────────────────────────────────

    def clone_mirror(self, fetch_url: str, dest: PathLike) -> None:
        """git clone --mirror <fetch_url> <dest>

        Output goes to the console; there is no mirror log yet.
        """
        self._git("clone", "--mirror", fetch_url, str(dest), what="Error cloning repository")

    def set_push_target(self, mirror: PathLike, push_url: str) -> None:
        """git remote set-url --push origin <push_url>"""
        self._git(
            "remote", "set-url", "--push", "origin", push_url,
            cwd=mirror,
            capture=True,
            what="Error setting push URL",
        )

    # ─── Push target ────────────────────────────────────────

    def get_push_target(self, mirror: PathLike) -> str:
        """git remote get-url --push origin"""
        try:
            result = self._git(
                "remote", "get-url", "--push", "origin",
                cwd=mirror,
                capture=True,
                what=f"Error reading push URL for {mirror}",
            )
        except PrimitiveError as e:
            raise ResolutionError(str(e)) from e

        url = result.stdout.strip()
        if not url:
            raise ResolutionError(f"Empty push URL for {mirror}")
        return url

    # ─── Fetch / push ───────────────────────────────────────

    def fetch_prune(self, mirror: PathLike, stream: IO[Any]) -> None:
        """git fetch -p origin"""
        self._git("fetch", "-p", "origin", cwd=mirror, stream=stream, what="Error fetching")

    def push_mirror(self, mirror: PathLike, stream: IO[Any]) -> None:
        """git push --mirror"""
        self._git(
            "push", "--mirror",
            cwd=mirror,
            stream=stream,
            what="Error pushing mirrored git repo",
        )

    # ─── Destination ────────────────────────────────────────

    def init_bare(self, dest: PathLike, stream: IO[Any]) -> None:
        """git init --bare <dest>"""
        self._git(
            "init", "--bare", str(dest),
            stream=stream,
            what=f"Error initializing bare git repo at {dest}",
        )

    def refresh_dumb_transport_index(self, dest: PathLike, stream: IO[Any]) -> None:
        """git update-server-info, run inside the destination repo."""
        self._git("update-server-info", cwd=dest, stream=stream, what="Error updating server info")

    # ─── Misc ───────────────────────────────────────────────

    def version(self) -> str:
        """git --version"""
        return self._git("--version", capture=True, what="Error running git").stdout.strip()
