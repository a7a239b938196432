"""Mapping of hbjob exceptions to CLI exit codes."""

from hbjob.cli.exit_codes import ExitCode
from hbjob.exceptions import (
    CancellationError,
    ConfigurationError,
    HBJobError,
    NoVideoStreamError,
    ProbeError,
    ToolNotFoundError,
    WorkerError,
)


def exit_code_for(error: HBJobError) -> ExitCode:
    """Pick the exit code for a job failure."""
    if isinstance(error, ToolNotFoundError):
        return ExitCode.TOOL_NOT_AVAILABLE
    if isinstance(error, ConfigurationError):
        return ExitCode.CONFIG_ERROR
    if isinstance(error, NoVideoStreamError):
        return ExitCode.NO_VIDEO_STREAM
    if isinstance(error, ProbeError):
        return ExitCode.PROBE_ERROR
    if isinstance(error, CancellationError):
        return ExitCode.INTERRUPTED
    if isinstance(error, WorkerError):
        return ExitCode.OPERATION_FAILED
    return ExitCode.GENERAL_ERROR
