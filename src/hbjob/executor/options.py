"""Encoder argument bundle.

EncodeOptions flattens job configuration into the parameters handed to
HandBrakeCLI. Only explicitly set values are carried over.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from hbjob.config.models import JobActionConfig


def _format_number(value: float) -> str:
    """Render 30.0 as "30" and 29.97 as "29.97"."""
    return f"{value:g}"


@dataclass(frozen=True)
class EncodeOptions:
    """Parameters for one HandBrakeCLI run."""

    input: Path
    output: Path

    preset: str | None = None
    optimize: bool = False
    encoder: str | None = None
    encopts: str | None = None
    encoder_profile: str | None = None
    quality: float | None = None
    rate: float | None = None
    pfr: bool = False
    audio_encoders: tuple[str, ...] = field(default_factory=tuple)
    max_height: int | None = None
    max_width: int | None = None
    comb_detect: str | None = None
    deinterlace: str | None = None
    decomb: str | None = None

    def to_args(self) -> list[str]:
        """Render as HandBrakeCLI arguments (without the executable)."""
        args = ["--input", str(self.input), "--output", str(self.output)]

        if self.preset is not None:
            args.extend(["--preset", self.preset])
        if self.optimize:
            args.append("--optimize")
        if self.encoder is not None:
            args.extend(["--encoder", self.encoder])
        if self.encopts is not None:
            args.extend(["--encopts", self.encopts])
        if self.encoder_profile is not None:
            args.extend(["--encoder-profile", self.encoder_profile])
        if self.quality is not None:
            args.extend(["--quality", _format_number(self.quality)])
        if self.rate is not None:
            args.extend(["--rate", _format_number(self.rate)])
        if self.pfr:
            args.append("--pfr")
        if self.audio_encoders:
            args.extend(["--aencoder", ",".join(self.audio_encoders)])
        if self.max_height is not None:
            args.extend(["--maxHeight", str(self.max_height)])
        if self.max_width is not None:
            args.extend(["--maxWidth", str(self.max_width)])
        # Filters take an optional argument, which HandBrakeCLI only accepts as --opt=value
        if self.comb_detect is not None:
            args.append(f"--comb-detect={self.comb_detect}")
        if self.deinterlace is not None:
            args.append(f"--deinterlace={self.deinterlace}")
        if self.decomb is not None:
            args.append(f"--decomb={self.decomb}")

        return args


def build_encode_options(
    config: JobActionConfig, input_path: Path, output_path: Path
) -> EncodeOptions:
    """Build EncodeOptions for one job from the job action settings."""
    return EncodeOptions(
        input=input_path,
        output=output_path,
        preset=config.preset or None,
        optimize=config.optimize,
        encoder=config.video_encoder,
        encopts=config.encoder_options or None,
        encoder_profile=config.encoder_profile or None,
        quality=config.video_quality,
        rate=config.video_rate,
        pfr=config.pfr,
        audio_encoders=tuple(config.audio_encoders or ()),
        max_height=config.max_height,
        max_width=config.max_width,
        comb_detect=config.comb_detect,
        deinterlace=config.deinterlace,
        decomb=config.decomb,
    )
