"""
Shared fixtures for mirror tests.

Provides a workspace directory and a FakeGit that stands in for
GitCommands: it records every call, creates directories for clone and
init --bare, and can be told to fail specific calls. No real git needed.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from repomirror.mirror.errors import PrimitiveError, ResolutionError


class FakeGit:
    """In-memory replacement for GitCommands."""

    def __init__(self) -> None:
        self.calls: List[Tuple[str, Path]] = []
        self.push_urls: Dict[Path, str] = {}
        self.failures: Dict[Tuple[str, Path], str] = {}
        self.hooks: Dict[Tuple[str, Path], Callable[[], None]] = {}
        self._lock = threading.Lock()

    def fail(self, method: str, path: Path, message: str = "boom") -> None:
        self.failures[(method, Path(path))] = message

    def calls_for(self, method: str, path: Optional[Path] = None) -> List[Path]:
        with self._lock:
            return [
                p for m, p in self.calls
                if m == method and (path is None or p == Path(path))
            ]

    def methods_for(self, path: Path) -> List[str]:
        """Every method called with `path`, in call order."""
        with self._lock:
            return [m for m, p in self.calls if p == Path(path)]

    def _record(self, method: str, path, stream=None, error_cls=PrimitiveError) -> None:
        path = Path(path)
        with self._lock:
            self.calls.append((method, path))
        if stream is not None:
            stream.write(f"fake git {method} {path}\n")
        hook = self.hooks.get((method, path))
        if hook is not None:
            hook()
        message = self.failures.get((method, path))
        if message is not None:
            if error_cls is PrimitiveError:
                raise PrimitiveError(message, ["git", method], 1)
            raise error_cls(message)

    # GitCommands interface

    def clone_mirror(self, fetch_url: str, dest) -> None:
        self._record("clone_mirror", dest)
        Path(dest).mkdir(parents=True)

    def set_push_target(self, mirror, push_url: str) -> None:
        self._record("set_push_target", mirror)
        self.push_urls[Path(mirror)] = push_url

    def get_push_target(self, mirror) -> str:
        self._record("get_push_target", mirror, error_cls=ResolutionError)
        url = self.push_urls.get(Path(mirror))
        if url is None:
            raise ResolutionError("error: No such remote 'origin'")
        return url

    def fetch_prune(self, mirror, stream) -> None:
        self._record("fetch_prune", mirror, stream)

    def push_mirror(self, mirror, stream) -> None:
        self._record("push_mirror", mirror, stream)

    def init_bare(self, dest, stream) -> None:
        self._record("init_bare", dest, stream)
        Path(dest).mkdir(parents=True)

    def refresh_dumb_transport_index(self, dest, stream) -> None:
        self._record("refresh_dumb_transport_index", dest, stream)

    def version(self) -> str:
        return "git version 2.99.0 (fake)"


def _make_mirror(root: Path, rel: str) -> Path:
    mirror = root / rel
    (mirror / "objects").mkdir(parents=True)
    (mirror / "refs").mkdir()
    (mirror / "HEAD").write_text("ref: refs/heads/main\n")
    return mirror


@pytest.fixture
def fake_git() -> FakeGit:
    return FakeGit()


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty workspace root for mirrors."""
    root = tmp_path / "mirrors"
    root.mkdir()
    return root


@pytest.fixture
def destinations(tmp_path: Path) -> Path:
    """Directory standing in for the destination network share."""
    dest = tmp_path / "share"
    dest.mkdir()
    return dest


@pytest.fixture
def make_mirror():
    """Factory creating directories that look like bare mirrors."""
    return _make_mirror


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """The CLI reconfigures the root logger; undo that after each test."""
    root = logging.getLogger()
    saved_level, saved_handlers = root.level, list(root.handlers)
    yield
    root.setLevel(saved_level)
    root.handlers[:] = saved_handlers
