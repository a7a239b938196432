"""Pure parsing functions for ffprobe JSON output.

These functions transform ffprobe JSON data into ProbeResult objects.
All functions are pure (no I/O, no side effects) for easy testing.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from hbjob.exceptions import ProbeError
from hbjob.introspector.models import ProbeResult, VideoStream

logger = logging.getLogger(__name__)

# Cover art is reported as a video stream with this disposition set
ATTACHED_PIC = "attached_pic"


def validate_positive_int(
    value: Any,
    field_name: str,
    file_path: Path | None = None,
) -> int | None:
    """Validate that a value is a non-negative integer or None.

    Args:
        value: Value to validate.
        field_name: Field name for warning messages.
        file_path: File path context for warnings.

    Returns:
        Validated value or None if invalid.
    """
    if value is None:
        return None
    if not isinstance(value, int) or isinstance(value, bool):
        logger.warning(
            "Expected int for %s in %s, got %s",
            field_name,
            file_path,
            type(value).__name__,
        )
        return None
    if value < 0:
        logger.warning("Invalid negative %s in %s: %d", field_name, file_path, value)
        return None
    return value


def _is_attached_picture(stream: dict[str, Any]) -> bool:
    disposition = stream.get("disposition") or {}
    return bool(disposition.get(ATTACHED_PIC))


def parse_video_stream(
    stream: dict[str, Any], file_path: Path | None = None
) -> VideoStream:
    """Parse one ffprobe stream dict into a VideoStream."""
    return VideoStream(
        index=stream.get("index", 0),
        codec_name=stream.get("codec_name"),
        profile=stream.get("profile"),
        height=validate_positive_int(stream.get("height"), "height", file_path),
        width=validate_positive_int(stream.get("width"), "width", file_path),
    )


def find_video_stream(
    streams: list[dict[str, Any]], file_path: Path | None = None
) -> VideoStream | None:
    """Return the first real video stream.

    Attached pictures (cover art) are only used when no other video
    stream exists.
    """
    videos = [s for s in streams if s.get("codec_type") == "video"]
    if not videos:
        return None

    primary = next((s for s in videos if not _is_attached_picture(s)), videos[0])
    return parse_video_stream(primary, file_path)


def parse_ffprobe_output(path: Path, data: dict[str, Any]) -> ProbeResult:
    """Parse ffprobe JSON output into a ProbeResult.

    Args:
        path: Path to the probed file.
        data: Parsed ffprobe JSON (-show_format -show_streams).

    Returns:
        ProbeResult for the file.

    Raises:
        ProbeError: If the format section is missing its name.
    """
    format_info = data.get("format") or {}
    format_name = format_info.get("format_name")
    if not format_name:
        raise ProbeError(f"ffprobe reported no container format for {path}")

    return ProbeResult(
        path=path,
        format_name=format_name,
        video=find_video_stream(data.get("streams") or [], path),
    )
