"""
Mirror Configuration — Parse REPOMIRROR_* environment variables.

All settings are optional:
    REPOMIRROR_ROOT=/srv/mirrors       # workspace holding the *.git mirrors
    REPOMIRROR_GIT=/usr/bin/git        # git executable
    REPOMIRROR_GIT_TIMEOUT=3600        # per-command timeout in seconds

A .env file in the working directory is loaded by the CLI before these are
read. Command-line options take precedence over the environment.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

MIRROR_SUFFIX = ".git"
LOG_SUFFIX = ".log"


@dataclass
class MirrorSettings:
    """Runtime settings for fetch/push/add operations."""

    root: Path = field(default_factory=lambda: Path("."))
    git_executable: str = "git"
    git_timeout: Optional[float] = None  # None = wait forever

    @classmethod
    def from_env(cls) -> "MirrorSettings":
        """Build settings from environment variables."""
        root = Path(os.environ.get("REPOMIRROR_ROOT") or ".")
        git_executable = os.environ.get("REPOMIRROR_GIT") or "git"

        git_timeout: Optional[float] = None
        raw_timeout = os.environ.get("REPOMIRROR_GIT_TIMEOUT", "").strip()
        if raw_timeout:
            try:
                git_timeout = float(raw_timeout)
            except ValueError:
                logger.warning(
                    f"REPOMIRROR_GIT_TIMEOUT={raw_timeout!r} is not a number, ignoring"
                )
            else:
                if git_timeout <= 0:
                    logger.warning("REPOMIRROR_GIT_TIMEOUT must be positive, ignoring")
                    git_timeout = None

        return cls(root=root, git_executable=git_executable, git_timeout=git_timeout)
