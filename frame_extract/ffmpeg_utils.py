"""FFmpeg subprocess wrappers for frame extraction.

The ffmpeg binary is shipped in a Lambda layer (``/opt/bin/ffmpeg`` by
default).  ``extract_frames`` waits for the process to exit and reports its
exit status instead of raising on it; only a failure to spawn, or a timeout,
is an ``ExtractionError``.  Callers decide whether a non-zero exit matters.
"""

from __future__ import annotations

import logging
import re
import subprocess
from pathlib import Path

from .exceptions import ExtractionError
from .models import FRAME_EXTENSION, ExtractionJob, ExtractionResult, FrameExtractionConfig

logger = logging.getLogger(__name__)

_FRAME_NAME_RE = re.compile(rf"^\d+\.{FRAME_EXTENSION}$")


# ---------------------------------------------------------------------------
# Dependency check
# ---------------------------------------------------------------------------

def check_dependencies(config: FrameExtractionConfig) -> None:
    """Verify that the configured ffmpeg binary runs.

    Call once per execution context.  On Lambda, ffmpeg comes from a layer;
    this catches a missing or mis-pathed layer with a clear message.
    ``ffprobe_path`` is not checked since nothing in the pipeline runs it.
    """
    tool = config.ffmpeg_path
    try:
        subprocess.run(
            [tool, "-version"],
            capture_output=True,
            check=True,
        )
    except (subprocess.CalledProcessError, OSError) as exc:
        raise ExtractionError(
            f"{tool} not found or not runnable. Ensure it is installed "
            f"or available via a Lambda layer.",
            exc,
        ) from exc


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

def build_extraction_job(input_path: Path, frame_rate: int) -> ExtractionJob:
    """Frames are written next to the input, as ``1.png``, ``2.png``, ..."""
    return ExtractionJob(
        input_path=input_path,
        output_directory=input_path.parent,
        frame_rate=frame_rate,
    )


def extraction_command(job: ExtractionJob, ffmpeg_path: str) -> list[str]:
    return [
        ffmpeg_path,
        "-i", str(job.input_path),
        "-r", str(job.frame_rate),
        str(job.output_path),
    ]


def count_frames(directory: Path) -> int:
    """Number of numbered frame images currently in *directory*."""
    return sum(
        1 for p in directory.iterdir()
        if p.is_file() and _FRAME_NAME_RE.match(p.name)
    )


def extract_frames(
    job: ExtractionJob,
    ffmpeg_path: str,
    *,
    timeout: float | None = None,
) -> ExtractionResult:
    """Run ffmpeg for *job* and return once the process has exited.

    Raises ``ExtractionError`` if the binary cannot be started or does not
    finish within *timeout* seconds (the child is killed first).  A non-zero
    exit code is logged and returned in the result, not raised.
    """
    args = extraction_command(job, ffmpeg_path)
    logger.info("Running: %s  [extract frames at %d fps]", " ".join(args), job.frame_rate)

    try:
        proc = subprocess.run(
            args,
            capture_output=True,
            text=True,
            errors="replace",
            check=False,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise ExtractionError(
            f"ffmpeg did not finish within {timeout}s for {job.input_path.name}", exc,
        ) from exc
    except OSError as exc:
        raise ExtractionError(f"Could not start ffmpeg at {ffmpeg_path}: {exc}", exc) from exc

    frame_count = count_frames(job.output_directory)
    if proc.returncode != 0:
        logger.error(
            "ffmpeg exited with rc=%d: %s\nstderr: %s",
            proc.returncode, " ".join(args), proc.stderr,
        )
    logger.info("ffmpeg close (rc=%d), %d frames written", proc.returncode, frame_count)

    return ExtractionResult(
        returncode=proc.returncode,
        frame_count=frame_count,
        stderr=proc.stderr or "",
    )
