"""Exceptions raised by the frame extraction pipeline.

Validation, workspace, fetch and extraction errors abort an invocation.
``CollectionError`` and ``UploadError`` are only ever recorded and logged
per item; the batch carries on without them.
"""

from __future__ import annotations


class FrameExtractError(Exception):
    """Base class for every pipeline error."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


class ConfigurationError(FrameExtractError):
    """Raised when environment configuration is missing or malformed."""


class InvalidKeyError(FrameExtractError):
    """Raised when an object key (or the event carrying it) is unusable."""

    def __init__(self, key: str, reason: str):
        self.key = key
        super().__init__(f"invalid object key {key!r}: {reason}")


class UnsupportedTypeError(FrameExtractError):
    """Raised when the key's extension is not an allowed video type."""

    def __init__(self, key: str, file_type: str):
        self.key = key
        self.file_type = file_type
        super().__init__(f"filetype: {file_type} is not an allowed type")


class WorkspaceError(FrameExtractError):
    """Raised when the scratch directory cannot be listed or purged."""

    def __init__(self, path: str, cause: Exception | None = None):
        self.path = path
        super().__init__(f"Failed to purge scratch path '{path}'", cause)


class FetchError(FrameExtractError):
    """Raised when streaming the source object to local storage fails."""

    def __init__(self, bucket: str, key: str, cause: Exception | None = None):
        self.bucket = bucket
        self.key = key
        super().__init__(f"Failed to fetch s3://{bucket}/{key}", cause)


class ExtractionError(FrameExtractError):
    """Raised when ffmpeg cannot be spawned, times out or (strict mode) fails."""


class CollectionError(FrameExtractError):
    """A produced file could not be read back from the scratch directory."""

    def __init__(self, filename: str, cause: Exception | None = None):
        self.filename = filename
        super().__init__(f"Failed to read produced file '{filename}'", cause)


class UploadError(FrameExtractError):
    """A single artifact could not be written to the destination bucket."""

    def __init__(self, bucket: str, key: str, cause: Exception | None = None):
        self.bucket = bucket
        self.key = key
        super().__init__(f"Failed to upload s3://{bucket}/{key}", cause)
