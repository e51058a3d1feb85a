"""Result collector: read produced frames back out of the scratch directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterator

from .exceptions import CollectionError
from .models import Artifact

logger = logging.getLogger(__name__)


def _log_error(error: CollectionError) -> None:
    logger.error("%s: %s", error, error.cause)


def collect_artifacts(
    directory: Path,
    source_filename: str,
    on_error: Callable[[CollectionError], None] = _log_error,
) -> Iterator[Artifact]:
    """Yield an ``Artifact`` for every file in *directory* except the source.

    Entries are visited in name order, which is not frame order (``10.png``
    sorts before ``2.png``).  A file that cannot be read is passed to
    *on_error* and skipped; the remaining files are still yielded.
    """
    for path in sorted(directory.iterdir()):
        if path.name == source_filename or not path.is_file():
            continue
        try:
            content = path.read_bytes()
        except OSError as exc:
            on_error(CollectionError(path.name, exc))
            continue
        yield Artifact(filename=path.name, content=content)
