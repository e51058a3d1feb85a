"""S3 download and upload utilities.

Uses ``boto3``, which is pre-installed in the Lambda Python runtime.  The
client is created lazily, once per cold start, and shared between upload
threads (boto3 clients are thread-safe).

When running locally with SAM / LocalStack, set ``AWS_SAM_LOCAL=1`` or
``LOCALSTACK_HOSTNAME`` to route requests to the local S3 endpoint.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

import boto3
from botocore.config import Config

logger = logging.getLogger(__name__)

# Lazy-initialised S3 client (created once per Lambda cold start).
_s3_client = None


def _get_s3_client():
    global _s3_client
    if _s3_client is None:
        kwargs: dict = {"config": Config(signature_version="s3v4")}
        if os.environ.get("AWS_SAM_LOCAL") or os.environ.get("LOCALSTACK_HOSTNAME"):
            kwargs["endpoint_url"] = "http://host.docker.internal:4566"
            kwargs["aws_access_key_id"] = "test"
            kwargs["aws_secret_access_key"] = "test"
        _s3_client = boto3.client("s3", **kwargs)
    return _s3_client


# ---------------------------------------------------------------------------
# Download
# ---------------------------------------------------------------------------

def download_from_s3(bucket: str, key: str, local_path: Path) -> int:
    """Stream an object from S3 into a local file.

    The body is written in chunks and the file is flushed and closed before
    this returns.  Returns the number of bytes written.
    """
    logger.info("Downloading s3://%s/%s → %s", bucket, key, local_path)
    with local_path.open("wb") as fh:
        _get_s3_client().download_fileobj(bucket, key, fh)
    size = local_path.stat().st_size
    logger.info("Downloaded %d bytes", size)
    return size


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

def upload_buffer_to_s3(
    bucket: str,
    key: str,
    data: bytes,
    content_type: str,
) -> None:
    """Upload raw bytes to S3, overwriting any existing object at *key*."""
    logger.info("Uploading buffer → s3://%s/%s", bucket, key)
    _get_s3_client().put_object(
        Bucket=bucket, Key=key, Body=data, ContentType=content_type,
    )
    logger.info("Uploaded %d bytes to %s/%s", len(data), bucket, key)
