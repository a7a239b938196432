"""Configuration data models.

Runtime settings (tool paths, logging) are plain dataclasses. The job
action settings are user-authored and mirror the host's JSON shape, so
they are validated with pydantic and accept camelCase keys.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from hbjob.profile.models import TargetProfile

# HandBrakeCLI --encoder values
VALID_VIDEO_ENCODERS = frozenset(
    {
        "x264",
        "x264_10bit",
        "x265",
        "x265_10bit",
        "x265_12bit",
        "mpeg4",
        "mpeg2",
        "vp8",
        "vp9",
        "theora",
        "svt_av1",
        "svt_av1_10bit",
        "nvenc_h264",
        "nvenc_h265",
        "nvenc_h265_10bit",
        "qsv_h264",
        "qsv_h265",
        "qsv_h265_10bit",
        "vce_h264",
        "vce_h265",
        "vt_h264",
        "vt_h265",
        "vt_h265_10bit",
    }
)

# HandBrakeCLI --aencoder values (copy:<codec> passthrough is allowed separately)
VALID_AUDIO_ENCODERS = frozenset(
    {
        "none",
        "ca_aac",
        "ca_haac",
        "av_aac",
        "fdk_aac",
        "fdk_haac",
        "ac3",
        "eac3",
        "mp3",
        "vorbis",
        "flac16",
        "flac24",
        "opus",
        "copy",
    }
)


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    handbrake: Path | None = None
    ffprobe: Path | None = None


@dataclass
class LoggingConfig:
    """Configuration for structured logging."""

    # Log level: debug, info, warning, error
    level: str = "info"

    # Log file path (None = stderr only)
    file: Path | None = None

    # Log format: text or json
    format: str = "text"

    # Also log to stderr when file is set
    include_stderr: bool = False

    # Rotation threshold in bytes (default 10MB)
    max_bytes: int = 10_485_760

    # Number of rotated files to keep
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        for name in ("level", "format"):
            if not isinstance(getattr(self, name), str):
                raise ValueError(
                    f"{name} must be a string, got {type(getattr(self, name)).__name__}"
                )
        for name in ("max_bytes", "backup_count"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
        if not isinstance(self.include_stderr, bool):
            raise ValueError("include_stderr must be true or false")
        valid_levels = {"debug", "info", "warning", "error"}
        if self.level.lower() not in valid_levels:
            raise ValueError(f"level must be one of {valid_levels}, got {self.level}")
        valid_formats = {"text", "json"}
        if self.format.lower() not in valid_formats:
            raise ValueError(
                f"format must be one of {valid_formats}, got {self.format}"
            )


class JobActionConfig(BaseModel):
    """Settings for the HandBrake job action.

    Every encoding field is optional. Fields that are unset are neither
    passed to HandBrakeCLI nor used as compliance constraints.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: str = "handbrake"

    # General
    preset: str | None = None
    """Preset name (case-sensitive) as known to HandBrakeCLI."""

    # Destination
    optimize: bool = False
    """Optimize MP4 files for HTTP streaming (fast start)."""

    output_extension: str = "m4v"
    """Extension of the file written by the encoder."""

    container_formats: str | None = None
    """Comma-separated container short names the source may already be in."""

    # Video
    video_encoder: str | None = None
    encoder_options: str | None = None
    encoder_profile: str | None = None
    video_quality: float | None = Field(default=None, gt=0)
    video_rate: float | None = Field(default=None, gt=0)
    pfr: bool = False
    """Peak framerate: cap at video_rate without changing slower sources."""

    # Audio
    audio_encoders: list[str] | None = None

    # Picture
    max_height: int | None = Field(default=None, ge=0)
    max_width: int | None = Field(default=None, ge=0)

    # Filters
    comb_detect: str | None = None
    deinterlace: str | None = None
    decomb: str | None = None

    @field_validator("video_encoder")
    @classmethod
    def validate_video_encoder(cls, v: str | None) -> str | None:
        """Validate video encoder name."""
        if v is not None and v.casefold() not in VALID_VIDEO_ENCODERS:
            raise ValueError(
                f"Invalid video_encoder '{v}'. "
                f"Must be one of: {', '.join(sorted(VALID_VIDEO_ENCODERS))}"
            )
        return v

    @field_validator("audio_encoders")
    @classmethod
    def validate_audio_encoders(cls, v: list[str] | None) -> list[str] | None:
        """Validate audio encoder names, allowing copy:<codec> passthrough."""
        if v is None:
            return v
        for idx, encoder in enumerate(v):
            if encoder.startswith("copy:") and len(encoder) > len("copy:"):
                continue
            if encoder not in VALID_AUDIO_ENCODERS:
                raise ValueError(
                    f"Invalid audio encoder '{encoder}' at audio_encoders[{idx}]"
                )
        return v

    @field_validator("output_extension")
    @classmethod
    def validate_output_extension(cls, v: str) -> str:
        """Strip a leading dot and reject empty extensions."""
        v = v.lstrip(".")
        if not v:
            raise ValueError("output_extension must not be empty")
        return v

    def to_target_profile(self) -> TargetProfile:
        """Build the explicit (override) target profile from these settings."""
        return TargetProfile(
            container_formats=self.container_formats,
            video_codec=self.video_encoder,
            video_profile=self.encoder_profile,
            max_height=self.max_height,
            max_width=self.max_width,
        )


@dataclass
class HBJobConfig:
    """Top-level configuration."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    job_action: JobActionConfig = field(default_factory=JobActionConfig)
