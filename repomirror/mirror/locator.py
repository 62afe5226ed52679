"""
Mirror Locator — Find the bare mirrors under a workspace root.

A directory is a mirror when its name ends in ".git" (any case) and is not
exactly ".git", which would be the metadata directory of a working copy.
Mirrors are leaves: their contents are never scanned.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Union

from .config import MIRROR_SUFFIX
from .errors import DiscoveryError

logger = logging.getLogger(__name__)


def is_mirror_name(name: str) -> bool:
    """True for "foo.git" / "FOO.GIT", False for ".git" and everything else."""
    lowered = name.lower()
    return lowered != MIRROR_SUFFIX and lowered.endswith(MIRROR_SUFFIX)


def find_mirrors(root: Union[str, Path]) -> List[Path]:
    """Walk `root` and return the path of every mirror below it.

    Paths are `root` joined with the mirror's relative path. Order follows
    the directory walk and is not sorted. Symlinks are not followed.

    Raises:
        DiscoveryError: `root` itself cannot be read.
    """
    root = Path(root)

    try:
        with os.scandir(root):
            pass
    except OSError as e:
        raise DiscoveryError(f"Cannot read workspace root {root}: {e}") from e

    if is_mirror_name(root.name):
        return [root]

    mirrors: List[Path] = []
    stack = [root]

    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError as e:
            logger.debug(f"[locate] Skipping unreadable directory {current}: {e}")
            continue

        subdirs = []
        for entry in entries:
            try:
                if not entry.is_dir(follow_symlinks=False):
                    continue
            except OSError:
                continue
            path = current / entry.name
            if is_mirror_name(entry.name):
                mirrors.append(path)
            else:
                subdirs.append(path)

        # Reversed so siblings are visited in listing order
        stack.extend(reversed(subdirs))

    return mirrors
