"""Source fetcher: validate the uploaded key, then stream it into scratch."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import AbstractSet

from botocore.exceptions import BotoCoreError, ClientError

from .exceptions import FetchError, InvalidKeyError, UnsupportedTypeError
from .models import ALLOWED_TYPES, SourceReference
from .s3_utils import download_from_s3

logger = logging.getLogger(__name__)

_EXTENSION_RE = re.compile(r"\.(\w+)$")


def source_filename(file_type: str) -> str:
    """Local name of the downloaded source video, e.g. ``input.mp4``."""
    return f"input.{file_type}"


def validate_source(
    reference: SourceReference,
    allowed_types: AbstractSet[str] = ALLOWED_TYPES,
) -> str:
    """Return the key's file extension, or raise before any I/O happens.

    The comparison is case-sensitive: ``clip.MP4`` is rejected.
    """
    match = _EXTENSION_RE.search(reference.key)
    if not match:
        raise InvalidKeyError(reference.key, "no file extension")

    file_type = match.group(1)
    if file_type not in allowed_types:
        raise UnsupportedTypeError(reference.key, file_type)
    return file_type


def fetch_source(
    reference: SourceReference,
    scratch_dir: Path,
    allowed_types: AbstractSet[str] = ALLOWED_TYPES,
) -> Path:
    """Download the source object to ``<scratch_dir>/input.<ext>``.

    Returns only after the whole object has been written and the file
    closed, so extraction never sees a partial input.
    """
    file_type = validate_source(reference, allowed_types)
    local_path = scratch_dir / source_filename(file_type)

    try:
        download_from_s3(reference.bucket, reference.key, local_path)
    except (BotoCoreError, ClientError, OSError) as exc:
        logger.error(
            "Fetch of s3://%s/%s failed: %s", reference.bucket, reference.key, exc,
        )
        raise FetchError(reference.bucket, reference.key, exc) from exc

    return local_path
