"""Skip decision engine.

Answers whether a probed source already complies with the target profile,
in which case re-encoding it is unnecessary.

Two profiles feed the decision: the preset-derived one and the explicit
(override) one from job configuration. For each concern, the override
value is consulted when set, otherwise the preset value. Every set
concern is checked and the verdict is the conjunction of all checks; with
no concern set the verdict is "skip".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from hbjob.exceptions import NoVideoStreamError
from hbjob.introspector.models import ProbeResult
from hbjob.policy.codecs import (
    desired_containers,
    encoder_to_codec,
    probed_containers,
    video_codec_matches,
)
from hbjob.profile.models import TargetProfile

logger = logging.getLogger(__name__)


class Concern(Enum):
    """A compliance concern, in evaluation order."""

    CONTAINER_FORMAT = "container_formats"
    VIDEO_CODEC = "video_codec"
    VIDEO_PROFILE = "video_profile"
    MAX_HEIGHT = "max_height"
    MAX_WIDTH = "max_width"

    @property
    def needs_video(self) -> bool:
        return self is not Concern.CONTAINER_FORMAT


class ProfileSource(Enum):
    """Which profile a checked value came from."""

    PRESET = "preset"
    OVERRIDE = "override"


@dataclass(frozen=True)
class ConstraintCheck:
    """Outcome of checking one concern."""

    concern: Concern
    source: ProfileSource
    desired: str | int
    actual: str | int | None
    compliant: bool

    def describe(self) -> str:
        verdict = "ok" if self.compliant else "mismatch"
        return (
            f"{self.concern.value} {verdict}: "
            f"source={self.actual!r} desired={self.desired!r} ({self.source.value})"
        )


@dataclass(frozen=True)
class SkipEvaluationResult:
    """Result of skip evaluation, with every check that was performed."""

    skip: bool
    """True if the source is already compliant and needs no transcode."""

    checks: tuple[ConstraintCheck, ...] = ()

    @property
    def failed_checks(self) -> tuple[ConstraintCheck, ...]:
        return tuple(c for c in self.checks if not c.compliant)

    @property
    def reason(self) -> str:
        """Human-readable reason for the decision."""
        if not self.checks:
            return "No constraints set"
        if self.skip:
            return "Already compliant: " + ", ".join(
                c.concern.value for c in self.checks
            )
        return "; ".join(c.describe() for c in self.failed_checks)


def format_compliant(source_format: str, desired_formats: str) -> bool:
    """Check whether the probed container is one of the desired ones."""
    return bool(probed_containers(source_format) & desired_containers(desired_formats))


def video_codec_compliant(source_codec: str | None, desired_encoder: str) -> bool:
    """Check whether the probed codec is what the desired encoder produces."""
    return video_codec_matches(source_codec, encoder_to_codec(desired_encoder))


def video_profile_compliant(source_profile: str | None, desired_profile: str) -> bool:
    """Case-insensitive exact profile match."""
    if source_profile is None:
        return False
    return source_profile.strip().casefold() == desired_profile.strip().casefold()


def max_dimension_compliant(source_dimension: int | None, desired_max: int) -> bool:
    """Check a picture dimension against a maximum.

    A maximum of zero is never satisfiable, forcing a re-encode.
    """
    if desired_max == 0:
        return False
    if source_dimension is None:
        return False
    return source_dimension <= desired_max


def _compare(concern: Concern, actual: Any, desired: Any) -> bool:
    if concern is Concern.CONTAINER_FORMAT:
        return format_compliant(actual, desired)
    if concern is Concern.VIDEO_CODEC:
        return video_codec_compliant(actual, desired)
    if concern is Concern.VIDEO_PROFILE:
        return video_profile_compliant(actual, desired)
    return max_dimension_compliant(actual, desired)


def _actual_value(probe: ProbeResult, concern: Concern) -> str | int | None:
    if concern is Concern.CONTAINER_FORMAT:
        return probe.format_name
    video = probe.video
    if video is None:
        return None
    if concern is Concern.VIDEO_CODEC:
        return video.codec_name
    if concern is Concern.VIDEO_PROFILE:
        return video.profile
    if concern is Concern.MAX_HEIGHT:
        return video.height
    return video.width


def _plan_checks(
    preset: TargetProfile, override: TargetProfile
) -> list[tuple[Concern, ProfileSource, str | int]]:
    """Pick the value to check per concern, preset-sourced concerns first."""
    from_preset = []
    from_override = []
    for concern in Concern:
        override_value = getattr(override, concern.value)
        preset_value = getattr(preset, concern.value)
        if override_value is not None:
            from_override.append((concern, ProfileSource.OVERRIDE, override_value))
        elif preset_value is not None:
            from_preset.append((concern, ProfileSource.PRESET, preset_value))
    return from_preset + from_override


def evaluate_skip(
    probe: ProbeResult,
    preset: TargetProfile,
    override: TargetProfile,
) -> SkipEvaluationResult:
    """Evaluate every set constraint against the probe.

    Args:
        probe: Probed source file.
        preset: Preset-derived target profile.
        override: Explicit target profile; wins over preset per concern.

    Returns:
        SkipEvaluationResult; skip is True only if every check passed.

    Raises:
        NoVideoStreamError: If a video constraint is set and the probe has
            no video stream.
    """
    planned = _plan_checks(preset, override)

    if probe.video is None and any(c.needs_video for c, _, _ in planned):
        raise NoVideoStreamError(probe.path)

    checks: list[ConstraintCheck] = []
    skip = True
    for concern, source, desired in planned:
        actual = _actual_value(probe, concern)
        compliant = _compare(concern, actual, desired)
        skip = skip and compliant
        checks.append(
            ConstraintCheck(
                concern=concern,
                source=source,
                desired=desired,
                actual=actual,
                compliant=compliant,
            )
        )
        logger.debug(
            "Checked %s: %r vs %r -> %s",
            concern.value,
            actual,
            desired,
            compliant,
            extra={"concern": concern.value, "source": source.value},
        )

    return SkipEvaluationResult(skip=skip, checks=tuple(checks))


def should_skip(
    probe: ProbeResult,
    preset: TargetProfile,
    override: TargetProfile,
) -> bool:
    """Return True if the source already complies and needs no transcode."""
    return evaluate_skip(probe, preset, override).skip
