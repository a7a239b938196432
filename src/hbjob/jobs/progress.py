"""Progress reporting for running encodes.

Reporters only observe; nothing they do affects job control flow.
"""

from __future__ import annotations

import logging
import sys
from typing import Protocol

from hbjob.executor.progress import HandBrakeProgress
from hbjob.jobs.models import JobIdentifier

logger = logging.getLogger(__name__)


class ProgressReporter(Protocol):
    """Protocol for per-tick progress reporting.

    Implementations provide context-specific progress display:
    - Logging: debug log lines with structured fields
    - CLI: in-place stderr status line
    - Tests: null/silent reporter
    """

    def on_progress(self, job_id: JobIdentifier, progress: HandBrakeProgress) -> None:
        """Report one progress tick."""
        ...


class LoggingProgressReporter:
    """Progress reporter that writes debug log lines."""

    def on_progress(self, job_id: JobIdentifier, progress: HandBrakeProgress) -> None:
        logger.debug(
            "%s task %d/%d: %.2f%% (%s fps, avg %s fps, ETA %s)",
            progress.task,
            progress.task_number,
            progress.task_count,
            progress.percent_complete,
            progress.fps,
            progress.avg_fps,
            progress.eta,
            extra={
                "task": progress.task,
                "percent_complete": progress.percent_complete,
                "fps": progress.fps,
                "avg_fps": progress.avg_fps,
                "eta": progress.eta,
            },
        )


class StderrProgressReporter:
    """Progress reporter that rewrites a status line on stderr."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled

    def on_progress(self, job_id: JobIdentifier, progress: HandBrakeProgress) -> None:
        if not self.enabled:
            return
        eta = f" ETA {progress.eta}" if progress.eta else ""
        sys.stderr.write(
            f"\r{job_id}: {progress.task} {progress.percent_complete:6.2f}%{eta}"
        )
        sys.stderr.flush()

    def on_complete(self) -> None:
        """Terminate the status line."""
        if self.enabled:
            sys.stderr.write("\n")
            sys.stderr.flush()


class NullProgressReporter:
    """No-op progress reporter for tests."""

    def on_progress(self, job_id: JobIdentifier, progress: HandBrakeProgress) -> None:
        pass


class CompositeProgressReporter:
    """Progress reporter that delegates to multiple reporters."""

    def __init__(self, reporters: list[ProgressReporter]) -> None:
        self.reporters = reporters

    def on_progress(self, job_id: JobIdentifier, progress: HandBrakeProgress) -> None:
        for reporter in self.reporters:
            reporter.on_progress(job_id, progress)
