"""Job context for structured logging.

Provides context propagation for concurrently running jobs using
contextvars. Each asyncio task gets its own copy, so log records emitted
while a job is being processed automatically carry its identifier.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_job_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "job_id", default=None
)
_file_path: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "file_path", default=None
)


def set_job_context(job_id: str, file_path: Path | str | None = None) -> None:
    """Set the current job context.

    Args:
        job_id: Job identifier.
        file_path: Source file being processed, or None.
    """
    _job_id.set(job_id)
    _file_path.set(str(file_path) if file_path is not None else None)


def clear_job_context() -> None:
    """Clear the current job context."""
    _job_id.set(None)
    _file_path.set(None)


@contextmanager
def job_context(
    job_id: str, file_path: Path | str | None = None
) -> Generator[None, None, None]:
    """Context manager that sets job context on entry and restores on exit.

    Example:
        with job_context("job-42", "/media/movie.mkv"):
            logger.info("Probing")  # Record carries job_id and file_path
    """
    old_job_id = _job_id.get()
    old_file_path = _file_path.get()
    try:
        set_job_context(job_id, file_path)
        yield
    finally:
        _job_id.set(old_job_id)
        _file_path.set(old_file_path)


def get_job_context() -> tuple[str | None, str | None]:
    """Get current job context as (job_id, file_path)."""
    return _job_id.get(), _file_path.get()


def job_label(job_id: str | None, file_path: str | None) -> str:
    """Render the job context for the text log format.

    "[job-42 movie.mkv]" inside a job, "[job-42]" when no source file is
    bound, and "-" outside any job.
    """
    if not job_id:
        return "-"
    if file_path:
        return f"[{job_id} {Path(file_path).name}]"
    return f"[{job_id}]"


class JobContextFilter(logging.Filter):
    """Logging filter that injects job context into log records.

    Adds job_id and file_path attributes for the JSON format and a
    job_label attribute for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        job_id, file_path = get_job_context()

        record.job_id = job_id
        record.file_path = file_path
        record.job_label = job_label(job_id, file_path)

        return True
