"""
Push Target — Classify where a mirror pushes to.

File-based targets (plain paths and file:// URLs) are provisioned and
indexed locally by repomirror. Network targets (ssh, http(s), git, and
scp-like "user@host:path" addresses) are assumed to exist already.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlsplit

from .errors import ResolutionError

# C:\repos\x or C:/repos/x
_WINDOWS_DRIVE = re.compile(r"^[A-Za-z]:[\\/]")
# [user@]host:path with no scheme, which git treats as ssh
_SCP_LIKE = re.compile(r"^(?:[^@/]+@)?[^/:]+:")


class TargetKind(str, Enum):
    """How a push destination is addressed."""
    FILE = "file"
    NETWORK = "network"


@dataclass(frozen=True)
class PushTarget:
    """A parsed push URL."""

    url: str
    kind: TargetKind
    scheme: str = ""
    path: Optional[Path] = None  # only for FILE targets

    @property
    def is_file_based(self) -> bool:
        return self.kind == TargetKind.FILE

    @property
    def location(self) -> str:
        """Filesystem path for file targets, the raw URL otherwise."""
        if self.path is not None:
            return str(self.path)
        return self.url


def parse_push_target(url: str) -> PushTarget:
    """Parse a push URL as reported by `git remote get-url --push`.

    Raises:
        ResolutionError: the URL is empty or names no usable path.
    """
    raw = url.strip()
    if not raw:
        raise ResolutionError("Empty push URL")

    if _WINDOWS_DRIVE.match(raw):
        return PushTarget(url=raw, kind=TargetKind.FILE, path=Path(raw))

    try:
        parts = urlsplit(raw)
    except ValueError as e:
        raise ResolutionError(f"Error parsing push URL {raw!r}: {e}") from e

    scheme = parts.scheme.lower()

    if not scheme:
        if _SCP_LIKE.match(raw):
            return PushTarget(url=raw, kind=TargetKind.NETWORK, scheme="ssh")
        # Plain path; git does not percent-decode these
        return PushTarget(url=raw, kind=TargetKind.FILE, path=Path(raw))

    if scheme == "file":
        path = unquote(parts.path)
        if not path:
            raise ResolutionError(f"Push URL {raw!r} has no path")
        return PushTarget(url=raw, kind=TargetKind.FILE, scheme=scheme, path=Path(path))

    return PushTarget(url=raw, kind=TargetKind.NETWORK, scheme=scheme)
