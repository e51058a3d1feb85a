"""Top-level orchestrator for one upload event.

Exposes:

- ``source_from_event(event)`` — pull the bucket and decoded key out of an
  S3 notification.
- ``process_upload(source, config)`` — the full pipeline, also callable
  directly for local testing or non-Lambda invocation.
- ``build_response(result)`` — the value returned to the Lambda runtime.

Steps run strictly in order: validate → reset scratch → fetch → extract →
collect → upload.  Any fatal error propagates unchanged to the caller and
leaves the scratch directory as it was for debugging.
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import unquote_plus

from .collector import collect_artifacts
from .exceptions import CollectionError, ExtractionError, InvalidKeyError
from .fetcher import fetch_source, source_filename, validate_source
from .ffmpeg_utils import build_extraction_job, extract_frames
from .models import FrameExtractionConfig, PipelineResult, SourceReference
from .uploader import destination_prefix, upload_artifacts
from .workspace import reset_workspace

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Event parsing
# ---------------------------------------------------------------------------

def source_from_event(event: dict[str, Any]) -> SourceReference:
    """Return the object named by the first record of an S3 event.

    Keys arrive URL-encoded with ``+`` for spaces.
    """
    try:
        record = event["Records"][0]
        bucket = record["s3"]["bucket"]["name"]
        raw_key = record["s3"]["object"]["key"]
    except (KeyError, IndexError, TypeError) as exc:
        raise InvalidKeyError("", f"malformed S3 event ({exc!r})") from exc

    return SourceReference(bucket=bucket, key=unquote_plus(raw_key))


# ---------------------------------------------------------------------------
# Core orchestrator
# ---------------------------------------------------------------------------

def process_upload(
    source: SourceReference,
    config: FrameExtractionConfig,
) -> PipelineResult:
    """Extract frames from *source* and upload them to the destination bucket.

    Returns once every upload attempt has finished.  Individual read or
    upload failures are recorded on the result and logged; they do not make
    the invocation fail.
    """
    # Validation first: nothing touches disk or network for a bad key.
    file_type = validate_source(source, config.allowed_types)
    prefix = destination_prefix(source.key)
    logger.info(
        "Processing s3://%s/%s → s3://%s/%s/",
        source.bucket, source.key, config.destination_bucket, prefix,
    )

    purged = reset_workspace(config.scratch_dir)
    logger.info("Purged %d entries from %s", purged, config.scratch_dir)

    input_path = fetch_source(source, config.scratch_dir, config.allowed_types)

    job = build_extraction_job(input_path, config.frame_rate)
    extraction = extract_frames(
        job, config.ffmpeg_path, timeout=config.extraction_timeout,
    )
    if config.strict_exit_code and not extraction.succeeded:
        raise ExtractionError(
            f"ffmpeg exited with status {extraction.returncode} for {source.key}",
        )

    collection_errors: list[CollectionError] = []

    def _record(error: CollectionError) -> None:
        logger.error("%s: %s", error, error.cause)
        collection_errors.append(error)

    artifacts = collect_artifacts(
        config.scratch_dir, source_filename(file_type), on_error=_record,
    )
    uploads = upload_artifacts(
        config.destination_bucket,
        prefix,
        artifacts,
        max_workers=config.upload_concurrency,
    )

    result = PipelineResult(
        source=source,
        extraction=extraction,
        uploads=uploads,
        collection_errors=collection_errors,
    )
    logger.info("Pipeline complete: %s", result.to_dict())
    return result


def build_response(result: PipelineResult) -> dict[str, Any]:
    """Redirect-style response pointing back at the source key."""
    return {
        "statusCode": "301",
        "headers": {"location": result.source.key},
        "body": "",
    }
