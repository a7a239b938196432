"""Job lifecycle: registry of active jobs and the HandBrake job action."""

from hbjob.jobs.action import HandBrakeJobAction, WorkerFactory
from hbjob.jobs.models import Job, JobIdentifier
from hbjob.jobs.progress import (
    CompositeProgressReporter,
    LoggingProgressReporter,
    NullProgressReporter,
    ProgressReporter,
    StderrProgressReporter,
)
from hbjob.jobs.registry import JobRegistry

__all__ = [
    "CompositeProgressReporter",
    "HandBrakeJobAction",
    "Job",
    "JobIdentifier",
    "JobRegistry",
    "LoggingProgressReporter",
    "NullProgressReporter",
    "ProgressReporter",
    "StderrProgressReporter",
    "WorkerFactory",
]
