"""Frame extraction pipeline for S3-triggered AWS Lambda.

Quick start::

    from frame_extract import FrameExtractionConfig, SourceReference, process_upload

    config = FrameExtractionConfig(destination_bucket="frames", frame_rate=1)
    result = process_upload(SourceReference("uploads", "videos/alpha/clip.mp4"), config)

Or from Lambda, point the function at ``handler.handler``.
"""

from .exceptions import (
    CollectionError,
    ConfigurationError,
    ExtractionError,
    FetchError,
    FrameExtractError,
    InvalidKeyError,
    UnsupportedTypeError,
    UploadError,
    WorkspaceError,
)
from .handler import build_response, process_upload, source_from_event
from .models import (
    ALLOWED_TYPES,
    Artifact,
    ExtractionResult,
    FrameExtractionConfig,
    PipelineResult,
    SourceReference,
    UploadOutcome,
)

__all__ = [
    "ALLOWED_TYPES",
    "Artifact",
    "CollectionError",
    "ConfigurationError",
    "ExtractionError",
    "ExtractionResult",
    "FetchError",
    "FrameExtractError",
    "FrameExtractionConfig",
    "InvalidKeyError",
    "PipelineResult",
    "SourceReference",
    "UnsupportedTypeError",
    "UploadError",
    "UploadOutcome",
    "WorkspaceError",
    "build_response",
    "process_upload",
    "source_from_event",
]
