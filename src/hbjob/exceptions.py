"""Exception hierarchy for hbjob.

All errors raised by the job action inherit from HBJobError, allowing
callers to catch every job failure with a single except clause.
"""

from __future__ import annotations


class HBJobError(Exception):
    """Base exception for hbjob errors."""


class ConfigurationError(HBJobError):
    """Raised when configuration or preset resolution fails.

    Preset resolution failures are recovered locally by the resolver,
    which degrades to an empty target profile.
    """


class ToolNotFoundError(ConfigurationError):
    """Raised when a required external tool cannot be located.

    Attributes:
        tool: Name of the missing tool (e.g., "HandBrakeCLI").
    """

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(
            f"{tool} is not installed or not in PATH. "
            f"Configure a custom path in ~/.hbjob/config.toml or via environment."
        )


class ProbeError(HBJobError):
    """Raised when a source file cannot be probed."""


class NoVideoStreamError(ProbeError):
    """Raised when a probed file has no video stream to evaluate.

    Attributes:
        path: Path of the probed file.
    """

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"No video stream found in {path}")


class WorkerError(HBJobError):
    """Raised when the encoder worker reports an error.

    Attributes:
        job_id: Identifier of the failed job, if known.
    """

    def __init__(self, message: str, job_id: str | None = None) -> None:
        self.job_id = job_id
        super().__init__(message)


class CancellationError(HBJobError):
    """Raised when a job is killed while encoding is in progress.

    Attributes:
        job_id: Identifier of the cancelled job.
    """

    def __init__(self, job_id: str) -> None:
        self.job_id = job_id
        super().__init__(f"Job {job_id} was cancelled")
