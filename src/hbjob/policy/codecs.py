"""Codec and container name normalization.

HandBrake names encoders (x264, nvenc_h265, ...) and containers (av_mkv)
differently from the codec and demuxer names ffprobe reports. These
tables map both vocabularies onto one comparable form.
"""

from __future__ import annotations

import re

# Trailing bit-depth tag on HandBrake encoder names (x265_10bit, svt_av1_10bit)
_BIT_DEPTH_SUFFIX = re.compile(r"_\d+bit$")

# HandBrake encoder -> codec name as reported by ffprobe
HANDBRAKE_ENCODER_CODECS: dict[str, str] = {
    "x264": "h264",
    "nvenc_h264": "h264",
    "qsv_h264": "h264",
    "vce_h264": "h264",
    "vt_h264": "h264",
    "mf_h264": "h264",
    "x265": "hevc",
    "nvenc_h265": "hevc",
    "qsv_h265": "hevc",
    "vce_h265": "hevc",
    "vt_h265": "hevc",
    "mf_h265": "hevc",
    "svt_av1": "av1",
    "qsv_av1": "av1",
    "nvenc_av1": "av1",
    "mpeg2": "mpeg2video",
    "mpeg4": "mpeg4",
    "vp8": "vp8",
    "vp9": "vp9",
    "theora": "theora",
}

# Codec names that refer to the same codec
VIDEO_CODEC_ALIASES: dict[str, frozenset[str]] = {
    "hevc": frozenset({"hevc", "h265"}),
    "h264": frozenset({"h264", "avc"}),
    "av1": frozenset({"av1", "av01"}),
    "mpeg2video": frozenset({"mpeg2video", "mpeg2"}),
}

# ffprobe demuxer name -> container short name
CONTAINER_ALIASES: dict[str, str] = {
    "matroska": "mkv",
    "mov": "mp4",
    "m4a": "mp4",
    "3gp": "mp4",
    "3g2": "mp4",
    "mj2": "mp4",
}


def strip_bit_depth(encoder: str) -> str:
    """Remove a trailing bit-depth tag ("x265_10bit" -> "x265")."""
    return _BIT_DEPTH_SUFFIX.sub("", encoder)


def encoder_to_codec(encoder: str) -> str:
    """Map a HandBrake encoder name to the codec ffprobe reports for it.

    Unknown encoder names are returned normalized but otherwise unchanged,
    so a plain codec name ("h264") can be used as a target as well.
    """
    normalized = strip_bit_depth(encoder.strip().casefold())
    return HANDBRAKE_ENCODER_CODECS.get(normalized, normalized)


def video_codec_matches(current_codec: str | None, target_codec: str) -> bool:
    """Check if a probed codec equals a target codec, alias-aware."""
    if not current_codec:
        return False
    current = current_codec.strip().casefold()
    target = target_codec.strip().casefold()
    if current == target:
        return True
    return current in VIDEO_CODEC_ALIASES.get(target, frozenset())


def desired_containers(formats: str) -> frozenset[str]:
    """Parse a desired container list ("mp4,av_mkv") into short names."""
    names = set()
    for entry in formats.casefold().split(","):
        entry = entry.strip()
        if not entry:
            continue
        # HandBrake container names carry an "av_" prefix
        if "_" in entry:
            entry = entry.split("_", 1)[1]
        names.add(entry)
    return frozenset(names)


def probed_containers(format_name: str) -> frozenset[str]:
    """Expand an ffprobe format name into comparable container short names.

    "matroska,webm" yields {"matroska", "mkv", "webm"}.
    """
    format_name = format_name.casefold()
    segments = format_name.split("_")
    if len(segments) > 1:
        format_name = segments[1]

    names = set()
    for demuxer in format_name.split(","):
        demuxer = demuxer.strip()
        if not demuxer:
            continue
        names.add(demuxer)
        if demuxer in CONTAINER_ALIASES:
            names.add(CONTAINER_ALIASES[demuxer])
    return frozenset(names)
