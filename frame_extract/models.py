"""Data models for the frame extraction pipeline.

Everything the pipeline passes between steps is one of these dataclasses.
``FrameExtractionConfig`` is built once per execution context and handed to
each component explicitly; nothing reads the environment after that.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from .exceptions import ConfigurationError

# Video container extensions accepted from the source bucket.  Matching is
# case-sensitive ("MP4" is rejected).
ALLOWED_TYPES: frozenset[str] = frozenset(
    {"mov", "mpg", "mpeg", "mp4", "wmv", "avi", "webm"}
)

# Frames are always written as PNG.
FRAME_EXTENSION = "png"
FRAME_CONTENT_TYPE = "image/png"

ENV_TRUE = ("1", "true", "yes", "t")


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FrameExtractionConfig:
    """Process-wide settings, read once at cold start.

    ``allowed_resolutions``, ``output_width`` and ``output_height`` are
    accepted for compatibility with existing deployments but nothing in the
    pipeline resizes frames yet.
    """

    destination_bucket: str
    frame_rate: int = 1
    allowed_resolutions: frozenset[str] = frozenset()
    output_width: int | None = None
    output_height: int | None = None

    ffmpeg_path: str = "/opt/bin/ffmpeg"
    ffprobe_path: str = "/opt/nodejs/ffprobe"
    scratch_dir: Path = Path("/tmp")

    extraction_timeout: float | None = None   # seconds; None waits forever
    strict_exit_code: bool = False            # raise on non-zero ffmpeg exit
    upload_concurrency: int = 8               # worker threads for uploads

    allowed_types: frozenset[str] = field(default=ALLOWED_TYPES)

    def __post_init__(self) -> None:
        if not self.destination_bucket:
            raise ConfigurationError("destination bucket is not configured")
        if self.frame_rate <= 0:
            raise ConfigurationError(
                f"frame rate must be a positive integer, got {self.frame_rate}"
            )
        if self.upload_concurrency <= 0:
            raise ConfigurationError(
                f"upload concurrency must be positive, got {self.upload_concurrency}"
            )
        if self.extraction_timeout is not None and self.extraction_timeout <= 0:
            raise ConfigurationError(
                f"extraction timeout must be positive, got {self.extraction_timeout}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FrameExtractionConfig:
        """Construct from environment variables (``os.environ`` by default)."""
        env = os.environ if environ is None else environ

        timeout = env.get("EXTRACTION_TIMEOUT")
        return cls(
            destination_bucket=env.get("NEW_BUCKET", ""),
            frame_rate=_positive_int(env, "FRAMERATE", 1),
            allowed_resolutions=_parse_resolutions(env.get("ALLOWED_RESOLUTIONS", "")),
            output_width=_positive_int(env, "WIDTH", None),
            output_height=_positive_int(env, "HEIGHT", None),
            ffmpeg_path=env.get("FFMPEG_PATH", "/opt/bin/ffmpeg"),
            ffprobe_path=env.get("FFPROBE_PATH", "/opt/nodejs/ffprobe"),
            scratch_dir=Path(env.get("SCRATCH_DIR", "/tmp")),
            extraction_timeout=_positive_float(timeout) if timeout else None,
            strict_exit_code=env.get("STRICT_EXIT_CODE", "").lower() in ENV_TRUE,
            upload_concurrency=_positive_int(env, "UPLOAD_CONCURRENCY", 8),
        )


def _positive_int(env: Mapping[str, str], name: str, default: int | None) -> int | None:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {value}")
    return value


def _positive_float(raw: str) -> float:
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"EXTRACTION_TIMEOUT must be a number, got {raw!r}"
        ) from exc
    if value <= 0:
        raise ConfigurationError(f"EXTRACTION_TIMEOUT must be positive, got {value}")
    return value


def _parse_resolutions(raw: str) -> frozenset[str]:
    """Split ``"720p, 1080p"`` into ``{"720p", "1080p"}``."""
    if not raw.strip():
        return frozenset()
    return frozenset(part for part in re.split(r"\s*,\s*", raw.strip()) if part)


# ---------------------------------------------------------------------------
# Pipeline data
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceReference:
    """The uploaded object named by the inbound event."""

    bucket: str
    key: str


@dataclass(frozen=True)
class ExtractionJob:
    """One ffmpeg run: input file, target rate and numbered output pattern."""

    input_path: Path
    output_directory: Path
    frame_rate: int
    output_pattern: str = f"%d.{FRAME_EXTENSION}"

    @property
    def output_path(self) -> Path:
        return self.output_directory / self.output_pattern


@dataclass
class ExtractionResult:
    """What ffmpeg left behind once it exited."""

    returncode: int
    frame_count: int
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0


@dataclass
class Artifact:
    """A produced frame image, read fully into memory."""

    filename: str
    content: bytes

    def __repr__(self) -> str:
        return f"Artifact(filename={self.filename!r}, size={len(self.content)})"


@dataclass
class UploadOutcome:
    """Result of a single artifact upload attempt."""

    key: str
    success: bool
    error: Exception | None = None


@dataclass
class PipelineResult:
    """Summary of one invocation, turned into the runtime response."""

    source: SourceReference
    extraction: ExtractionResult
    uploads: list[UploadOutcome] = field(default_factory=list)
    collection_errors: list[Exception] = field(default_factory=list)

    @property
    def uploaded(self) -> int:
        return sum(1 for u in self.uploads if u.success)

    @property
    def failed(self) -> int:
        return sum(1 for u in self.uploads if not u.success)

    def to_dict(self) -> dict:
        return {
            "bucket": self.source.bucket,
            "key": self.source.key,
            "returncode": self.extraction.returncode,
            "frames": self.extraction.frame_count,
            "uploaded": self.uploaded,
            "failed": self.failed,
            "collection_errors": len(self.collection_errors),
        }
