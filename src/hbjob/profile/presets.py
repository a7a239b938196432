"""HandBrake preset resolution.

Turns a named HandBrake preset into a TargetProfile by asking HandBrakeCLI
to export it as JSON. Resolution happens once per job action, so the
export runs synchronously.
"""

from __future__ import annotations

import json
import logging
import subprocess  # nosec B404 - subprocess is required for HandBrakeCLI
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from hbjob.exceptions import ConfigurationError
from hbjob.profile.models import TargetProfile
from hbjob.tools import HANDBRAKE_CLI, require_tool

logger = logging.getLogger(__name__)

PRESET_EXPORT_TIMEOUT = 60


class HandBrakePreset(BaseModel):
    """One record of a HandBrakeCLI preset export.

    Only the keys relevant to compliance checks are modelled; the export
    carries many more, which are ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    preset_name: str | None = Field(default=None, alias="PresetName")
    file_format: str | None = Field(default=None, alias="FileFormat")
    mp4_http_optimize: bool | None = Field(default=None, alias="Mp4HttpOptimize")
    picture_height: int | None = Field(default=None, alias="PictureHeight")
    picture_width: int | None = Field(default=None, alias="PictureWidth")
    video_encoder: str | None = Field(default=None, alias="VideoEncoder")
    video_profile: str | None = Field(default=None, alias="VideoProfile")

    def to_target_profile(self) -> TargetProfile:
        """Convert to a TargetProfile."""
        return TargetProfile(
            container_formats=self.file_format,
            video_codec=self.video_encoder,
            video_profile=self.video_profile,
            max_height=self.picture_height,
            max_width=self.picture_width,
        )


def parse_preset_export(output: str) -> HandBrakePreset:
    """Parse HandBrakeCLI --preset-export output.

    Args:
        output: JSON text written to stdout by HandBrakeCLI.

    Returns:
        The first preset in the export's PresetList.

    Raises:
        ConfigurationError: If the output is malformed or lists no preset.
    """
    try:
        data = json.loads(output)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid preset export output: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError("Preset export output is not a JSON object")

    preset_list = data.get("PresetList")
    if not isinstance(preset_list, list) or not preset_list:
        raise ConfigurationError("Preset export contains no presets")

    try:
        return HandBrakePreset.model_validate(preset_list[0])
    except ValidationError as e:
        raise ConfigurationError(f"Invalid preset record: {e}") from e


def resolve_preset(name: str, handbrake_path: Path) -> HandBrakePreset:
    """Export a named preset via HandBrakeCLI and parse it.

    Args:
        name: Preset name (case-sensitive).
        handbrake_path: Path to the HandBrakeCLI executable.

    Returns:
        The parsed preset record.

    Raises:
        ConfigurationError: If HandBrakeCLI fails or its output is unusable.
    """
    try:
        result = subprocess.run(  # nosec B603 - path resolved via require_tool
            [str(handbrake_path), "--preset-export", name],
            capture_output=True,
            text=True,
            errors="replace",
            check=True,
            timeout=PRESET_EXPORT_TIMEOUT,
        )
    except subprocess.TimeoutExpired as e:
        raise ConfigurationError(
            f"Preset export for '{name}' timed out after {e.timeout}s"
        ) from e
    except subprocess.CalledProcessError as e:
        raise ConfigurationError(
            f"Preset export for '{name}' failed: {e.stderr or e}"
        ) from e
    except OSError as e:
        raise ConfigurationError(f"Could not run {handbrake_path}: {e}") from e

    return parse_preset_export(result.stdout)


class PresetResolver:
    """Resolves preset names to target profiles without ever raising.

    An unresolvable preset degrades to an empty profile, i.e. no
    preset-derived constraints.
    """

    def __init__(self, handbrake_path: Path | None = None) -> None:
        """Initialize the resolver.

        Args:
            handbrake_path: Explicit HandBrakeCLI path; PATH is searched if None.
        """
        self._handbrake_path = handbrake_path

    def resolve(self, name: str | None) -> TargetProfile:
        """Resolve a preset name to a TargetProfile.

        Args:
            name: Preset name, or None for no preset.

        Returns:
            The preset-derived profile, or an empty profile on any failure.
        """
        if not name:
            return TargetProfile()

        try:
            path = require_tool(HANDBRAKE_CLI, self._handbrake_path)
            preset = resolve_preset(name, path)
        except ConfigurationError as e:
            logger.error(
                "Could not resolve preset '%s': %s",
                name,
                e,
                extra={"preset": name},
            )
            return TargetProfile()

        profile = preset.to_target_profile()
        logger.debug(
            "Resolved preset '%s' (%s): %s",
            name,
            preset.preset_name,
            profile,
            extra={"preset": name, "mp4_http_optimize": preset.mp4_http_optimize},
        )
        return profile
