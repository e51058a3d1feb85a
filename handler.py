"""AWS Lambda handler for frame extraction (S3 trigger).

Receives an S3 ``ObjectCreated`` notification for an uploaded video,
downloads it to ``/tmp``, extracts frames with ffmpeg at ``FRAMERATE`` fps
and uploads every frame to ``NEW_BUCKET`` as a PNG.

Destination keys reuse the second and third segments of the source key::

    videos/alpha/clip.mp4  →  s3://$NEW_BUCKET/alpha/clip/1.png, 2.png, ...

Any fatal error (bad key, unsupported type, scratch, download or ffmpeg
failure) is raised so Lambda records the invocation as failed.  Failed
frame uploads are logged and do not fail the invocation.

SAM entry point: ``handler.handler``
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from frame_extract import FrameExtractionConfig, build_response, process_upload, source_from_event
from frame_extract.ffmpeg_utils import check_dependencies

logger = logging.getLogger()
logger.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())

# Built on first invocation, reused while the execution context is warm.
_config: FrameExtractionConfig | None = None


def _get_config() -> FrameExtractionConfig:
    global _config
    if _config is None:
        config = FrameExtractionConfig.from_env()
        check_dependencies(config)
        logger.info(
            "Configured: bucket=%s, framerate=%d, scratch=%s, ffmpeg=%s",
            config.destination_bucket, config.frame_rate,
            config.scratch_dir, config.ffmpeg_path,
        )
        _config = config
    return _config


# ---------------------------------------------------------------------------
# Lambda entry point
# ---------------------------------------------------------------------------

def handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    """Lambda handler for a single S3 upload notification."""
    logger.info("Received event: %s", json.dumps(event, indent=2))

    source = None
    try:
        source = source_from_event(event)
        config = _get_config()
        result = process_upload(source, config)
    except Exception as e:
        location = f"s3://{source.bucket}/{source.key}" if source else "event"
        logger.error("Error processing %s: %s", location, e, exc_info=True)
        raise

    if result.failed or result.collection_errors:
        logger.warning(
            "Completed with %d failed uploads and %d unreadable files for %s",
            result.failed, len(result.collection_errors), source.key,
        )
    return build_response(result)
