"""
Mirror Errors — Failure taxonomy for mirror operations.

Only DiscoveryError aborts a whole fetch/push run. Every other error is
scoped to a single mirror: the runner catches it, records it in that
mirror's log and reports the mirror as failed.
"""

from __future__ import annotations

from typing import Optional, Sequence


class MirrorError(Exception):
    """Base class for all repomirror errors."""


class DiscoveryError(MirrorError):
    """The workspace root could not be read."""


class LogUnavailable(MirrorError):
    """A mirror's operation log could not be opened."""


class ResolutionError(MirrorError):
    """A mirror's push target could not be determined."""


class ProvisionError(MirrorError):
    """A missing file-based push destination could not be created."""


class PrimitiveError(MirrorError):
    """A git command failed."""

    def __init__(
        self,
        message: str,
        args: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.command = list(args) if args else []
        self.returncode = returncode

    def __str__(self) -> str:
        msg = super().__str__()
        if self.command:
            msg += f" (`{' '.join(self.command)}`"
            if self.returncode is not None:
                msg += f" exited {self.returncode}"
            msg += ")"
        return msg
