"""Scratch directory management.

Lambda may reuse an execution context, so ``/tmp`` can still hold the
previous invocation's input video and frames.  ``reset_workspace`` is run at
the start of every invocation.  It is never run after a failure, which
leaves the files of a failed run in place for inspection.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .exceptions import WorkspaceError

logger = logging.getLogger(__name__)


def reset_workspace(path: Path) -> int:
    """Delete every entry under *path* and return how many were removed.

    A missing directory is created.  Failing to list the directory, or to
    delete any single entry, raises ``WorkspaceError``; no partial cleanup
    is tolerated.
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
        entries = sorted(path.iterdir())
    except OSError as exc:
        raise WorkspaceError(str(path), exc) from exc

    if entries:
        logger.info(
            "Found %d stale entries in %s: %s",
            len(entries), path, [e.name for e in entries],
        )

    for entry in entries:
        try:
            if entry.is_dir() and not entry.is_symlink():
                shutil.rmtree(entry)
            else:
                entry.unlink()
        except OSError as exc:
            raise WorkspaceError(str(entry), exc) from exc

    return len(entries)
