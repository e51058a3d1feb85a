"""Sink uploader: write every collected frame to the destination bucket.

Uploads run concurrently on a bounded thread pool.  ``upload_artifacts``
returns only after every upload has finished, one way or the other, and
reports an ``UploadOutcome`` per artifact.  A failed upload never cancels
the others.
"""

from __future__ import annotations

import logging
import posixpath
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Iterable

from .exceptions import InvalidKeyError, UploadError
from .models import FRAME_CONTENT_TYPE, Artifact, UploadOutcome
from .s3_utils import upload_buffer_to_s3

logger = logging.getLogger(__name__)


def destination_prefix(source_key: str) -> str:
    """Derive the destination key prefix from the source object key.

    Uses the second and third ``/``-separated segments, dropping the file
    extension from the third when it is the file name::

        videos/alpha/clip.mp4      -> alpha/clip
        videos/alpha/take2/clip.mp4 -> alpha/take2

    Keys with fewer than three segments raise ``InvalidKeyError``.
    """
    segments = source_key.split("/")
    if len(segments) < 3:
        raise InvalidKeyError(
            source_key, "expected at least three '/'-separated segments",
        )

    second, third = segments[1], segments[2]
    if len(segments) == 3:
        third = posixpath.splitext(third)[0]
    if not second or not third:
        raise InvalidKeyError(source_key, "empty path segment in destination prefix")
    return f"{second}/{third}"


def destination_key(prefix: str, filename: str) -> str:
    return f"{prefix}/{filename}"


def _upload_one(
    bucket: str,
    key: str,
    artifact: Artifact,
    content_type: str,
) -> UploadOutcome:
    try:
        upload_buffer_to_s3(bucket, key, artifact.content, content_type)
    except Exception as exc:
        error = UploadError(bucket, key, exc)
        logger.error("%s: %s", error, exc, exc_info=True)
        return UploadOutcome(key=key, success=False, error=error)
    logger.info("successful upload to %s/%s", bucket, key)
    return UploadOutcome(key=key, success=True)


def upload_artifacts(
    bucket: str,
    prefix: str,
    artifacts: Iterable[Artifact],
    *,
    max_workers: int = 8,
    content_type: str = FRAME_CONTENT_TYPE,
) -> list[UploadOutcome]:
    """Upload *artifacts* under ``<prefix>/<filename>`` and wait for all of them.

    At most *max_workers* artifacts are held in flight; the iterable is only
    advanced once an earlier upload has finished.  Outcomes are returned in
    the order the artifacts were consumed.
    """
    futures: list[Future[UploadOutcome]] = []
    pending: set[Future[UploadOutcome]] = set()
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        for artifact in artifacts:
            key = destination_key(prefix, artifact.filename)
            future = executor.submit(_upload_one, bucket, key, artifact, content_type)
            futures.append(future)
            pending.add(future)
            if len(pending) >= max_workers:
                _, pending = wait(pending, return_when=FIRST_COMPLETED)
        outcomes = [f.result() for f in futures]

    failed = sum(1 for o in outcomes if not o.success)
    logger.info(
        "Uploaded %d/%d artifacts to s3://%s/%s (%d failed)",
        len(outcomes) - failed, len(outcomes), bucket, prefix, failed,
    )
    return outcomes
