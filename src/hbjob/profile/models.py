"""Target profile data model."""

from __future__ import annotations

from dataclasses import dataclass, fields


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class TargetProfile:
    """Desired output characteristics of a transcode.

    Every field is optional; None means "no constraint" for that concern.
    """

    container_formats: str | None = None
    """Comma-separated acceptable container short names (e.g. "mp4,mkv")."""

    video_codec: str | None = None
    """HandBrake video encoder name (e.g. "x265_10bit")."""

    video_profile: str | None = None
    """Video codec profile (e.g. "high", "main10")."""

    max_height: int | None = None
    """Maximum picture height in pixels. Zero is never satisfiable."""

    max_width: int | None = None
    """Maximum picture width in pixels. Zero is never satisfiable."""

    def __post_init__(self) -> None:
        # frozen dataclass: bypass __setattr__ to normalize blank strings
        for name in ("container_formats", "video_codec", "video_profile"):
            object.__setattr__(self, name, _blank_to_none(getattr(self, name)))

    @property
    def is_empty(self) -> bool:
        """True if no constraint is set."""
        return all(getattr(self, f.name) is None for f in fields(self))
