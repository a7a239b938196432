"""Probe result data model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class VideoStream:
    """Attributes of the primary video stream."""

    index: int
    codec_name: str | None = None
    profile: str | None = None
    height: int | None = None
    width: int | None = None


@dataclass(frozen=True)
class ProbeResult:
    """Structured description of a probed media file."""

    path: Path
    format_name: str
    """Container format as reported by ffprobe (e.g. "matroska,webm")."""

    video: VideoStream | None = None
    """First video stream found, or None if the file has none."""

    @property
    def has_video(self) -> bool:
        return self.video is not None
