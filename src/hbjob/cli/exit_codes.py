"""Centralized exit codes for all CLI commands.

Exit code ranges:
    0: Success
    1-9: General errors
    10-19: Configuration errors
    20-29: Target/file errors
    30-39: Tool/dependency errors
    40-49: Operation errors
    60-69: Decision states
"""

from enum import IntEnum


class ExitCode(IntEnum):
    """Exit codes for hbjob CLI commands."""

    SUCCESS = 0

    # General errors (1-9)
    GENERAL_ERROR = 1
    INTERRUPTED = 2

    # Configuration errors (10-19)
    CONFIG_ERROR = 11
    PRESET_NOT_RESOLVED = 12

    # Target/file errors (20-29)
    PROBE_ERROR = 20
    NO_VIDEO_STREAM = 21

    # Tool/dependency errors (30-39)
    TOOL_NOT_AVAILABLE = 30

    # Operation errors (40-49)
    OPERATION_FAILED = 40

    # Decision states (60-69)
    TRANSCODE_NEEDED = 60
