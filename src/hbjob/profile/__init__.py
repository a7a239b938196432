"""Target profile resolution.

- TargetProfile: desired output characteristics, every field optional
- HandBrakePreset: one record of a HandBrakeCLI preset export
- PresetResolver: preset name -> TargetProfile, degrading to empty on failure
"""

from hbjob.profile.models import TargetProfile
from hbjob.profile.presets import (
    HandBrakePreset,
    PresetResolver,
    parse_preset_export,
    resolve_preset,
)

__all__ = [
    "HandBrakePreset",
    "PresetResolver",
    "TargetProfile",
    "parse_preset_export",
    "resolve_preset",
]
