"""
Destination Provisioner — Make sure a mirror's push target can take a push.

File-based destinations that do not exist yet are created as empty bare
repositories before the push, and get their dumb-transport index refreshed
afterwards so they can be served as static files. Network destinations are
left alone.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from pathlib import Path
from typing import IO, Any, Union

from .errors import PrimitiveError, ProvisionError
from .git_ops import GitCommands
from .target import PushTarget, parse_push_target

logger = logging.getLogger(__name__)


def resolve_target(mirror: Union[str, Path], git: GitCommands) -> PushTarget:
    """Read and parse the mirror's push URL.

    Relative file paths are resolved against the mirror directory, which is
    where git itself resolves them when pushing.

    Raises:
        ResolutionError: no origin remote, git failed, or the URL is unusable.
    """
    target = parse_push_target(git.get_push_target(mirror))
    if target.path is not None and not target.path.is_absolute():
        target = dataclasses.replace(target, path=Path(mirror) / target.path)
    return target


def ensure_destination(target: PushTarget, git: GitCommands, stream: IO[Any]) -> bool:
    """Create a missing file-based destination as a bare repository.

    An existing path is trusted as-is; if it is not a repository the push
    fails later.

    Returns:
        True if a repository was initialized.

    Raises:
        ProvisionError: `git init --bare` failed.
    """
    if not target.is_file_based:
        return False

    try:
        os.stat(target.path)
    except FileNotFoundError:
        pass
    except OSError as e:
        # Not provably missing; let the push report the real problem
        logger.debug(f"[provision] Cannot stat {target.path}: {e}")
        return False
    else:
        return False

    try:
        git.init_bare(target.path, stream)
    except PrimitiveError as e:
        raise ProvisionError(f"Error initializing bare git repository: {e}") from e
    return True


def refresh_index(target: PushTarget, git: GitCommands, stream: IO[Any]) -> None:
    """Run update-server-info in a file-based destination.

    Raises:
        PrimitiveError: the refresh failed.
    """
    if target.is_file_based:
        git.refresh_dumb_transport_index(target.path, stream)
